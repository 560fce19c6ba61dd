"""Photoshop API job client.

Responsibilities:
- Submit manifest and text-edit jobs with the bearer token and API key.
- Treat any 2xx (including `202 Accepted`) as an accepted submission.
- Fetch job status documents for the poller.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Mapping, Sequence

from ..errors import JobSubmissionError, PollingTransportError
from ..models.datatypes import AccessToken, SubmissionResponse, TranslationUnit
from .http import ServiceHTTPClient

_ACCEPTED_STATUS = 202
_OUTPUT_DOCUMENT_TYPE = "vnd.adobe.photoshop"


class PhotoshopJobClient(ServiceHTTPClient):
    """Issue signed requests to the Photoshop API."""

    _service_label = "Photoshop API"

    def __init__(
        self,
        *,
        api_key: str,
        manifest_endpoint: str,
        text_endpoint: str,
        timeout_seconds: float = 60.0,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds)
        self.api_key = api_key
        self.manifest_endpoint = manifest_endpoint
        self.text_endpoint = text_endpoint

    def _headers(self, token: AccessToken) -> dict[str, str]:
        return {
            "Authorization": token.authorization_header,
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def submit(
        self,
        endpoint: str,
        token: AccessToken,
        body: Mapping[str, Any],
    ) -> SubmissionResponse:
        """Submit one job and return the accepted response.

        Raises:
            JobSubmissionError: For non-2xx statuses (with the raw body attached),
                transport failures, and non-JSON success bodies.
        """

        response = self._post(
            endpoint,
            on_transport_error=JobSubmissionError,
            headers=self._headers(token),
            json_payload=dict(body),
        )
        body_text = self._response_text(response)
        status_code = response.status_code
        if not (self._is_success(status_code) or status_code == _ACCEPTED_STATUS):
            raise JobSubmissionError(
                f"Photoshop API request failed: {status_code} - {self._short_message(body_text)}",
                status_code=status_code,
                body=body_text,
            )

        payload = self._parse_json_object(body_text)
        if payload is None:
            raise JobSubmissionError(
                f"Photoshop API returned a non-JSON body (HTTP {status_code}).",
                status_code=status_code,
                body=body_text,
            )
        return SubmissionResponse(status_code=status_code, body=payload)

    def fetch_status(
        self,
        polling_url: str,
        token: AccessToken,
        operation: str,
    ) -> dict[str, Any]:
        """Fetch one job status document.

        Raises:
            PollingTransportError: For non-2xx statuses and transport failures.
        """

        on_transport_error = partial(PollingTransportError, operation=operation)
        response = self._get(
            polling_url,
            on_transport_error=on_transport_error,
            headers=self._headers(token),
        )
        body_text = self._response_text(response)
        if not self._is_success(response.status_code):
            raise PollingTransportError(
                f"Polling failed for {operation}: {response.status_code} - "
                f"{self._short_message(body_text)}",
                operation=operation,
                status_code=response.status_code,
                body=body_text,
            )

        payload = self._parse_json_object(body_text)
        if payload is None:
            raise PollingTransportError(
                f"Polling for {operation} returned a non-JSON body.",
                operation=operation,
                status_code=response.status_code,
                body=body_text,
            )
        return payload

    def request_manifest(self, token: AccessToken, input_url: str) -> SubmissionResponse:
        """Submit a document-manifest job for an externally stored document."""

        body = {"inputs": [{"href": input_url, "storage": "external"}]}
        return self.submit(self.manifest_endpoint, token, body)

    def apply_text_edits(
        self,
        token: AccessToken,
        input_url: str,
        output_url: str,
        units: Sequence[TranslationUnit],
    ) -> SubmissionResponse:
        """Submit a text-edit job writing the edited document to `output_url`."""

        body = {
            "inputs": [{"href": input_url, "storage": "external"}],
            "options": {"layers": [unit.as_edit_layer() for unit in units]},
            "outputs": [
                {
                    "href": output_url,
                    "storage": "external",
                    "type": _OUTPUT_DOCUMENT_TYPE,
                }
            ],
        }
        return self.submit(self.text_endpoint, token, body)
