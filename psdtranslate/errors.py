"""Domain exceptions for pipeline, service, and CLI diagnostics.

Every exception carries the pipeline stage it was raised in, a human-readable
detail, and an optional operator hint. Subclasses add the contextual fields
callers need for diagnostics (status codes, raw bodies, attempt counts).
"""

from __future__ import annotations

from typing import Any


class PsdTranslateError(RuntimeError):
    """Base class for all failures raised by psdtranslate components."""

    default_stage = "pipeline"

    def __init__(
        self,
        detail: str,
        *,
        stage: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped error."""

        super().__init__(detail)
        self.stage = stage or self.default_stage
        self.detail = detail
        self.hint = hint


class PipelineStageError(PsdTranslateError):
    """Raised for configuration and command-level failures outside service calls."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        super().__init__(detail, stage=stage, hint=hint)


class AuthError(PsdTranslateError):
    """Raised when the token endpoint rejects the client or cannot be reached."""

    default_stage = "authenticate"

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(
            detail,
            hint="Verify the Adobe client id/secret and the IMS token endpoint.",
        )
        self.status_code = status_code


class StorageError(PsdTranslateError):
    """Raised when an object cannot be signed, read, or deleted."""

    default_stage = "storage"

    def __init__(self, detail: str, *, object_key: str | None = None) -> None:
        super().__init__(detail)
        self.object_key = object_key


class StorageWriteError(StorageError):
    """Raised when staging bytes into the object store fails."""


class JobSubmissionError(PsdTranslateError):
    """Raised when the image-editing service refuses a job submission."""

    default_stage = "submit"

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.body = body


class PollingTransportError(PsdTranslateError):
    """Raised when a status query returns a non-2xx response or fails in transit."""

    default_stage = "poll"

    def __init__(
        self,
        detail: str,
        *,
        operation: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        super().__init__(detail)
        self.operation = operation
        self.status_code = status_code
        self.body = body


class PollingTimeoutError(PsdTranslateError):
    """Raised when a job is still pending after every allowed status query."""

    default_stage = "poll"

    def __init__(self, *, operation: str, attempts: int, elapsed_seconds: float) -> None:
        super().__init__(
            f"Polling for {operation} timed out after {attempts} attempts "
            f"({elapsed_seconds:.1f}s)."
        )
        self.operation = operation
        self.attempts = attempts
        self.elapsed_seconds = elapsed_seconds


class JobFailedError(PsdTranslateError):
    """Raised when the image-editing service reports a failed job."""

    default_stage = "poll"

    def __init__(self, *, operation: str, errors: Any) -> None:
        super().__init__(f"{operation} failed: {errors!r}")
        self.operation = operation
        self.errors = errors


class ManifestFormatError(PsdTranslateError):
    """Raised when a document manifest cannot be interpreted."""

    default_stage = "extract_layers"


class NoTranslatableContentError(PsdTranslateError):
    """Raised when a document has no text layers to translate."""

    default_stage = "extract_layers"

    def __init__(self, detail: str = "No text layers found in PSD; aborting translation.") -> None:
        super().__init__(detail)


class TranslationError(PsdTranslateError):
    """Raised when the translation API call fails; fatal for the whole run."""

    default_stage = "translate"

    def __init__(
        self,
        detail: str,
        *,
        status_code: int | None = None,
        layer_name: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.layer_name = layer_name
