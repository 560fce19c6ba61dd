"""Top-level package for psdtranslate.

This package translates the text layers of Photoshop documents by chaining
Adobe IMS, the Photoshop API, DeepL, and Google Cloud Storage. The main
orchestration entry point is `PsdTranslationPipeline`.
"""

__version__ = "0.1.0"

from .pipeline import PsdTranslationPipeline

__all__ = ["PsdTranslationPipeline", "__version__"]
