"""Shared HTTP helpers for outbound service clients.

Responsibilities:
- Send JSON/form requests through `requests` with a uniform timeout.
- Convert transport failures into the caller's typed error.
- Decode, redact, and cap response bodies for diagnostics.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Mapping

import requests


ErrorFactory = Callable[[str], Exception]


class ServiceHTTPClient:
    """Base class holding timeout settings and response helpers."""

    _MAX_DIAGNOSTIC_CHARS = 300
    _service_label = "Service"

    def __init__(self, *, timeout_seconds: float = 60.0) -> None:
        self.timeout_seconds = timeout_seconds

    def _post(
        self,
        url: str,
        *,
        on_transport_error: ErrorFactory,
        headers: Mapping[str, str] | None = None,
        json_payload: Any = None,
        form_payload: Mapping[str, str] | None = None,
    ) -> requests.Response:
        """POST to `url`, mapping network-layer failures through `on_transport_error`."""

        try:
            return requests.post(
                url,
                headers=dict(headers or {}),
                json=json_payload,
                data=form_payload,
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise on_transport_error(f"{self._service_label} request timed out.") from exc
        except requests.RequestException as exc:
            raise on_transport_error(
                f"{self._service_label} request transport error: {self._short_message(str(exc))}"
            ) from exc

    def _get(
        self,
        url: str,
        *,
        on_transport_error: ErrorFactory,
        headers: Mapping[str, str] | None = None,
    ) -> requests.Response:
        """GET `url`, mapping network-layer failures through `on_transport_error`."""

        try:
            return requests.get(url, headers=dict(headers or {}), timeout=self.timeout_seconds)
        except requests.Timeout as exc:
            raise on_transport_error(f"{self._service_label} request timed out.") from exc
        except requests.RequestException as exc:
            raise on_transport_error(
                f"{self._service_label} request transport error: {self._short_message(str(exc))}"
            ) from exc

    @staticmethod
    def _is_success(status_code: int) -> bool:
        return 200 <= status_code < 300

    @staticmethod
    def _response_text(response: requests.Response) -> str:
        """Decode a response body into a best-effort UTF-8 string."""

        content = getattr(response, "content", b"") or b""
        return bytes(content).decode("utf-8", errors="replace").strip()

    @staticmethod
    def _parse_json_object(raw_text: str) -> dict[str, Any] | None:
        """Parse a JSON object body, returning `None` for anything else."""

        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError:
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact bearer tokens and key-like values from diagnostic content."""

        redacted = re.sub(
            r"(?i)bearer\s+[A-Za-z0-9._~+/=-]{12,}",
            "Bearer [redacted-token]",
            text,
        )
        redacted = re.sub(
            r"(?i)deepl-auth-key\s+[A-Za-z0-9:_-]{8,}",
            "DeepL-Auth-Key [redacted-key]",
            redacted,
        )
        redacted = re.sub(
            r"(?i)(client_secret|access_token)([\"'=:\s]+)[A-Za-z0-9._~+/=-]{8,}",
            r"\1\2[redacted]",
            redacted,
        )
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        """Normalize, redact, and cap diagnostic message length."""

        compact = " ".join(cls._redact_sensitive_tokens(text).split())
        if len(compact) <= cls._MAX_DIAGNOSTIC_CHARS:
            return compact
        return f"{compact[: cls._MAX_DIAGNOSTIC_CHARS - 3]}..."
