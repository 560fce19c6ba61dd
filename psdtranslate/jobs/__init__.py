"""Asynchronous job helpers."""

from .poller import JobPoller, classify_status

__all__ = ["JobPoller", "classify_status"]
