"""Translation clients and batching.

This package defines the DeepL client, the per-call rate limiter, and the
sequential batcher that turns text layers into translation units.
"""

from .batcher import TextTranslator, TranslationBatcher
from .deepl_client import DeepLClient
from .rate_limiter import RateLimiter

__all__ = ["DeepLClient", "RateLimiter", "TextTranslator", "TranslationBatcher"]
