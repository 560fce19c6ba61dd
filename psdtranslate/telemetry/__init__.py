"""Telemetry and observability helpers.

This package emits run events for deterministic operator auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
