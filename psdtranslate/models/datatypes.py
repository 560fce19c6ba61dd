"""Core datatypes shared across psdtranslate modules.

Responsibilities:
- Represent records exchanged between pipeline stages.
- Keep wire-shaped payload construction next to the records that own it.

Key types:
- `ClientCredentials`, `AccessToken`, `StagedObject`, `TextLayer`,
  `TranslationUnit`, `SubmissionResponse`, `JobState`, `AsyncJob`,
  `TranslationRequest`, `TranslationOutcome`, and `PipelineResponse`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class ClientCredentials:
    """OAuth2 client identity exchanged for a short-lived bearer token.

    Attributes:
        client_id: Adobe client id; also sent as the `x-api-key` header.
        client_secret: Adobe client secret.
        token_endpoint: IMS token endpoint URL.
        scopes: Scopes requested for the token.
    """

    client_id: str
    client_secret: str
    token_endpoint: str
    scopes: tuple[str, ...] = ("AdobeID", "openid")

    def __repr__(self) -> str:
        return (
            f"ClientCredentials(client_id={self.client_id!r}, client_secret='***', "
            f"token_endpoint={self.token_endpoint!r}, scopes={self.scopes!r})"
        )


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token issued by the token endpoint."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int | None = None

    @property
    def authorization_header(self) -> str:
        """Return the `Authorization` header value for this token."""

        return f"Bearer {self.access_token}"

    def __repr__(self) -> str:
        return f"AccessToken(token_type={self.token_type!r}, expires_in={self.expires_in!r})"


@dataclass(frozen=True, slots=True)
class StagedObject:
    """A named blob plus one time-limited signed URL.

    Attributes:
        object_key: Key of the blob inside the bucket.
        content_type: MIME type bound to the object (and to write URLs).
        url: Signed URL granting `access` until `expires_at`.
        expires_at: UTC expiry of the signed URL.
        access: Either `read` or `write`.
    """

    object_key: str
    content_type: str
    url: str
    expires_at: datetime
    access: str = "read"


@dataclass(frozen=True, slots=True)
class TextLayer:
    """A text-bearing node discovered in a document manifest.

    Attributes:
        name: Layer name used to address the layer in edit requests.
        content: Current text content, or an empty string when absent.
        position: 0-based pre-order index among discovered text layers.
        node: Raw manifest mapping for the layer.
    """

    name: str
    content: str
    position: int
    node: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class TranslationUnit:
    """Translation output for one text layer."""

    layer_name: str
    original_text: str
    translated_text: str
    position: int

    def as_edit_layer(self) -> dict[str, Any]:
        """Return the text-edit request entry for this unit."""

        return {"name": self.layer_name, "text": {"content": self.translated_text}}


@dataclass(frozen=True, slots=True)
class SubmissionResponse:
    """Accepted response from an image-editing job submission."""

    status_code: int
    body: Mapping[str, Any]

    @property
    def polling_url(self) -> str | None:
        """Return the status link for asynchronous jobs, when present."""

        links = self.body.get("_links")
        if not isinstance(links, Mapping):
            return None
        self_link = links.get("self")
        if not isinstance(self_link, Mapping):
            return None
        href = self_link.get("href")
        if isinstance(href, str) and href.strip():
            return href
        return None


class JobState(str, Enum):
    """Lifecycle state of one outstanding image-editing operation."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(slots=True)
class AsyncJob:
    """One outstanding operation against the image-editing service.

    Attributes:
        operation: Label used for error attribution (`manifest`, `text-edit`).
        submission: The accepted submission response.
        polling_url: Status link queried by the poller.
        state: Current lifecycle state.
        attempts: Number of status queries issued so far.
        result: Final response body once the job succeeded.
    """

    operation: str
    submission: SubmissionResponse
    polling_url: str | None
    state: JobState = JobState.PENDING
    attempts: int = 0
    result: Mapping[str, Any] | None = None

    @classmethod
    def from_submission(cls, operation: str, submission: SubmissionResponse) -> AsyncJob:
        """Create a pending job bound to the submission's polling link."""

        return cls(
            operation=operation,
            submission=submission,
            polling_url=submission.polling_url,
        )


@dataclass(frozen=True, slots=True)
class TranslationRequest:
    """Inbound request to translate one document.

    Attributes:
        document: Raw PSD bytes.
        file_name: Client-supplied file name, used to derive object keys.
        target_lang: Target language code for the translation API.
        run_id: Optional run identifier; generated when omitted.
    """

    document: bytes
    file_name: str
    target_lang: str = "EN"
    run_id: str | None = None

    def __repr__(self) -> str:
        return (
            f"TranslationRequest(file_name={self.file_name!r}, "
            f"target_lang={self.target_lang!r}, size={len(self.document)}, "
            f"run_id={self.run_id!r})"
        )


@dataclass(frozen=True, slots=True)
class TranslationOutcome:
    """Result of one successful pipeline run."""

    run_id: str
    download_url: str
    output_key: str
    units: tuple[TranslationUnit, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class PipelineResponse:
    """Uniform outward reply produced by the orchestrator."""

    status_code: int
    payload: dict[str, str]
