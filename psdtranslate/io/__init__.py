"""Input/output components for psdtranslate.

This package contains the object stager used to hand documents to services
that only accept URL-addressable input.
"""

from .download import SignedUrlDownloader
from .object_stager import GCSObjectStager, ObjectStager

__all__ = ["GCSObjectStager", "ObjectStager", "SignedUrlDownloader"]
