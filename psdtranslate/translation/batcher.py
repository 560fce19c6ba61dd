"""Sequential, rate-limited translation of discovered text layers.

Units are produced strictly in discovery order, one request at a time.
A missing translation for one layer keeps its original text; a failed
translation request aborts the whole batch.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from ..errors import TranslationError
from ..models.datatypes import TextLayer, TranslationUnit
from ..telemetry.logger import RunLogger
from .rate_limiter import RateLimiter


class TextTranslator(Protocol):
    """Protocol for single-string translation clients."""

    def translate_text(self, text: str, target_lang: str) -> str | None:
        """Translate `text`, returning `None` when no translation came back."""


class TranslationBatcher:
    """Translate text layers one by one under a fixed inter-call interval."""

    def __init__(
        self,
        translator: TextTranslator,
        rate_limiter: RateLimiter | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self.translator = translator
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.run_logger = run_logger

    def translate_all(
        self,
        layers: Sequence[TextLayer],
        target_lang: str,
    ) -> list[TranslationUnit]:
        """Return one `TranslationUnit` per layer, in the order given."""

        units: list[TranslationUnit] = []
        for layer in layers:
            translated = self._translate_layer(layer, target_lang)
            units.append(
                TranslationUnit(
                    layer_name=layer.name,
                    original_text=layer.content,
                    translated_text=translated,
                    position=layer.position,
                )
            )
        return units

    def _translate_layer(self, layer: TextLayer, target_lang: str) -> str:
        if not layer.content.strip():
            return layer.content

        self.rate_limiter.acquire("translate")
        try:
            translated = self.translator.translate_text(layer.content, target_lang)
        except TranslationError as exc:
            exc.layer_name = layer.name
            raise
        finally:
            self.rate_limiter.release("translate")

        if translated is None:
            if self.run_logger is not None:
                self.run_logger.log_warning(
                    "translate",
                    "fallback_original",
                    layer=layer.name,
                    position=layer.position,
                )
            return layer.content
        if self.run_logger is not None:
            self.run_logger.log_event(
                "translate",
                "layer",
                layer=layer.name,
                position=layer.position,
                chars=len(translated),
            )
        return translated
