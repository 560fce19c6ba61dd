"""Translation pipeline package.

This package contains the orchestrator and its stage telemetry helpers.
"""

from .orchestrator import PsdTranslationPipeline

__all__ = ["PsdTranslationPipeline"]
