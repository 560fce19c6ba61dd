"""Unit tests for the IMS token provider and the Photoshop API job client."""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from psdtranslate.clients import IMSTokenProvider, PhotoshopJobClient
from psdtranslate.errors import AuthError, JobSubmissionError, PollingTransportError
from psdtranslate.models.datatypes import AccessToken, ClientCredentials, TranslationUnit
from tests.doubles import MockRequestsResponse

_TOKEN_ENDPOINT = "https://ims.test/ims/token/v3"
_MANIFEST_ENDPOINT = "https://image.test/pie/psdService/documentManifest"
_TEXT_ENDPOINT = "https://image.test/pie/psdService/text"


class _RequestRecorder:
    """Capture one outbound request and reply with a canned response."""

    def __init__(self, response: MockRequestsResponse) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []

    def __call__(self, url: str, **kwargs: Any) -> MockRequestsResponse:
        self.calls.append({"url": url, **kwargs})
        return self.response


def _json_response(payload: Any, status_code: int = 200) -> MockRequestsResponse:
    return MockRequestsResponse(payload=json.dumps(payload).encode("utf-8"), status_code=status_code)


def _credentials() -> ClientCredentials:
    return ClientCredentials(
        client_id="client-id",
        client_secret="client-secret-value",
        token_endpoint=_TOKEN_ENDPOINT,
    )


def _job_client() -> PhotoshopJobClient:
    return PhotoshopJobClient(
        api_key="client-id",
        manifest_endpoint=_MANIFEST_ENDPOINT,
        text_endpoint=_TEXT_ENDPOINT,
        timeout_seconds=30.0,
    )


def test_ims_token_provider_posts_client_credentials_form(monkeypatch: pytest.MonkeyPatch) -> None:
    """Token exchange should send the grant as a form with comma-joined scopes."""

    recorder = _RequestRecorder(
        _json_response({"access_token": "abc.def", "token_type": "bearer", "expires_in": 86399})
    )
    monkeypatch.setattr(requests, "post", recorder)

    token = IMSTokenProvider(timeout_seconds=12.0).acquire_token(_credentials())

    assert token == AccessToken(access_token="abc.def", token_type="bearer", expires_in=86399)
    assert token.authorization_header == "Bearer abc.def"
    call = recorder.calls[0]
    assert call["url"] == _TOKEN_ENDPOINT
    assert call["data"] == {
        "grant_type": "client_credentials",
        "client_id": "client-id",
        "client_secret": "client-secret-value",
        "scope": "AdobeID,openid",
    }
    assert call["json"] is None
    assert call["timeout"] == 12.0


@pytest.mark.parametrize(
    ("response", "message"),
    [
        (_json_response({"error": "invalid_client"}, status_code=400), "HTTP 400"),
        (MockRequestsResponse(payload=b"<html>oops</html>"), "non-JSON"),
        (_json_response({"token_type": "bearer"}), "missing `access_token`"),
    ],
)
def test_ims_token_provider_rejects_bad_responses(
    monkeypatch: pytest.MonkeyPatch,
    response: MockRequestsResponse,
    message: str,
) -> None:
    """Refusals, non-JSON bodies, and token-less bodies should raise `AuthError`."""

    monkeypatch.setattr(requests, "post", _RequestRecorder(response))

    with pytest.raises(AuthError, match=message) as exc_info:
        IMSTokenProvider().acquire_token(_credentials())

    assert exc_info.value.stage == "authenticate"
    assert exc_info.value.hint


def test_ims_token_provider_maps_transport_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Connection failures should be reported as authentication errors."""

    def refuse(url: str, **kwargs: Any) -> MockRequestsResponse:
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "post", refuse)

    with pytest.raises(AuthError, match="transport error"):
        IMSTokenProvider().acquire_token(_credentials())


def test_credentials_repr_hides_secret() -> None:
    """Client credentials should never print their secret."""

    assert "client-secret-value" not in repr(_credentials())


def test_request_manifest_sends_external_input_with_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Manifest submission should reference the staged URL with both auth headers."""

    recorder = _RequestRecorder(
        _json_response({"_links": {"self": {"href": "https://image.test/status/1"}}}, 202)
    )
    monkeypatch.setattr(requests, "post", recorder)

    submission = _job_client().request_manifest(
        AccessToken(access_token="tok"), "https://storage.test/in.psd?sig"
    )

    assert submission.status_code == 202
    assert submission.polling_url == "https://image.test/status/1"
    call = recorder.calls[0]
    assert call["url"] == _MANIFEST_ENDPOINT
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert call["headers"]["x-api-key"] == "client-id"
    assert call["json"] == {
        "inputs": [{"href": "https://storage.test/in.psd?sig", "storage": "external"}]
    }


def test_apply_text_edits_builds_layer_edits(monkeypatch: pytest.MonkeyPatch) -> None:
    """Text-edit submission should list layers by name with translated content."""

    recorder = _RequestRecorder(_json_response({"_links": {"self": {"href": "s"}}}, 202))
    monkeypatch.setattr(requests, "post", recorder)
    units = [
        TranslationUnit("Title", "Hello", "Hallo", 0),
        TranslationUnit("Body", "World", "Welt", 1),
    ]

    _job_client().apply_text_edits(
        AccessToken(access_token="tok"), "https://in", "https://out", units
    )

    call = recorder.calls[0]
    assert call["url"] == _TEXT_ENDPOINT
    assert call["json"] == {
        "inputs": [{"href": "https://in", "storage": "external"}],
        "options": {
            "layers": [
                {"name": "Title", "text": {"content": "Hallo"}},
                {"name": "Body", "text": {"content": "Welt"}},
            ]
        },
        "outputs": [
            {"href": "https://out", "storage": "external", "type": "vnd.adobe.photoshop"}
        ],
    }


def test_submit_accepts_synchronous_success_without_link(monkeypatch: pytest.MonkeyPatch) -> None:
    """A 200 response without a status link is an accepted, already-final submission."""

    monkeypatch.setattr(
        requests, "post", _RequestRecorder(_json_response({"outputs": [{"status": "succeeded"}]}))
    )

    submission = _job_client().request_manifest(AccessToken(access_token="tok"), "https://in")

    assert submission.status_code == 200
    assert submission.polling_url is None


def test_submit_raises_with_raw_body_on_refusal(monkeypatch: pytest.MonkeyPatch) -> None:
    """Refused submissions should keep the status and the raw response body."""

    raw = '{"code": "403", "message": "Forbidden"}'
    monkeypatch.setattr(
        requests,
        "post",
        _RequestRecorder(MockRequestsResponse(payload=raw.encode("utf-8"), status_code=403)),
    )

    with pytest.raises(JobSubmissionError) as exc_info:
        _job_client().request_manifest(AccessToken(access_token="tok"), "https://in")

    assert exc_info.value.status_code == 403
    assert exc_info.value.body == raw
    assert "403" in str(exc_info.value)


def test_fetch_status_returns_document(monkeypatch: pytest.MonkeyPatch) -> None:
    """Status queries should GET the polling URL with the same auth headers."""

    recorder = _RequestRecorder(_json_response({"outputs": [{"status": "running"}]}))
    monkeypatch.setattr(requests, "get", recorder)

    body = _job_client().fetch_status("https://image.test/status/1", AccessToken("tok"), "manifest")

    assert body == {"outputs": [{"status": "running"}]}
    assert recorder.calls[0]["url"] == "https://image.test/status/1"
    assert recorder.calls[0]["headers"]["x-api-key"] == "client-id"


def test_fetch_status_raises_transport_error_on_non_2xx(monkeypatch: pytest.MonkeyPatch) -> None:
    """A non-2xx status query should raise with operation and status attached."""

    monkeypatch.setattr(
        requests,
        "get",
        _RequestRecorder(MockRequestsResponse(payload=b"gateway down", status_code=502)),
    )

    with pytest.raises(PollingTransportError) as exc_info:
        _job_client().fetch_status("https://status", AccessToken("tok"), "text-edit")

    assert exc_info.value.operation == "text-edit"
    assert exc_info.value.status_code == 502
    assert exc_info.value.body == "gateway down"


def test_fetch_status_maps_timeouts(monkeypatch: pytest.MonkeyPatch) -> None:
    """Timed-out status queries should raise `PollingTransportError` for the operation."""

    def time_out(url: str, **kwargs: Any) -> MockRequestsResponse:
        raise requests.Timeout("slow")

    monkeypatch.setattr(requests, "get", time_out)

    with pytest.raises(PollingTransportError, match="timed out") as exc_info:
        _job_client().fetch_status("https://status", AccessToken("tok"), "manifest")

    assert exc_info.value.operation == "manifest"
