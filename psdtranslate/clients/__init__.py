"""Outbound service clients for Adobe IMS and the Photoshop API."""

from .ims_auth import IMSTokenProvider
from .photoshop import PhotoshopJobClient

__all__ = ["IMSTokenProvider", "PhotoshopJobClient"]
