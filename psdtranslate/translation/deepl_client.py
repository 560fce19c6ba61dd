"""DeepL translation HTTP client.

Responsibilities:
- Send single-string translate requests to the DeepL REST API.
- Return `None` when the response carries no translation, so callers can
  fall back to the source text.
- Raise `TranslationError` for transport failures and non-2xx statuses.
"""

from __future__ import annotations

from ..errors import TranslationError
from ..clients.http import ServiceHTTPClient


class DeepLClient(ServiceHTTPClient):
    """Minimal requests-based DeepL client."""

    _service_label = "DeepL"

    def __init__(
        self,
        *,
        api_key: str,
        endpoint: str,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.endpoint = endpoint

    def translate_text(self, text: str, target_lang: str) -> str | None:
        """Translate one string and return the first translation, if any."""

        response = self._post(
            self.endpoint,
            on_transport_error=TranslationError,
            headers={
                "Authorization": f"DeepL-Auth-Key {self.api_key}",
                "Content-Type": "application/json",
            },
            json_payload={"text": [text], "target_lang": target_lang},
        )
        body_text = self._response_text(response)
        if not self._is_success(response.status_code):
            raise TranslationError(
                f"Failed to translate text (HTTP {response.status_code}): "
                f"{self._short_message(body_text)}",
                status_code=response.status_code,
            )

        payload = self._parse_json_object(body_text)
        if payload is None:
            raise TranslationError(
                "DeepL returned a non-JSON body.",
                status_code=response.status_code,
            )
        translations = payload.get("translations")
        if not isinstance(translations, list) or not translations:
            return None
        first = translations[0]
        if not isinstance(first, dict):
            return None
        translated = first.get("text")
        if not isinstance(translated, str) or not translated:
            return None
        return translated
