"""Shared parsing helpers for request, config, and object-key normalization."""

from __future__ import annotations

import re


_DEFAULT_TARGET_LANG = "EN"
_DOCUMENT_SUFFIX = ".psd"
_TRANSLATED_SUFFIX = "-translated.psd"
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def normalize_target_language(value: object, default: str = _DEFAULT_TARGET_LANG) -> str:
    """Return an upper-case target language code, falling back to `default`.

    Only strings are accepted; any other form value is treated as absent.
    """

    if not isinstance(value, str):
        return default
    normalized = normalize_optional_string(value)
    if normalized is None:
        return default
    return normalized.upper()


def safe_document_name(file_name: str | None) -> str:
    """Reduce a client-supplied file name to a single safe object-key segment."""

    base = (file_name or "").replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_KEY_CHARS.sub("_", base).strip("._")
    if not cleaned:
        return f"document{_DOCUMENT_SUFFIX}"
    return cleaned


def translated_document_name(file_name: str) -> str:
    """Return the output file name for a translated document.

    `banner.psd` becomes `banner-translated.psd`; names without the `.psd`
    suffix get the translated suffix appended.
    """

    if file_name.lower().endswith(_DOCUMENT_SUFFIX):
        return f"{file_name[: -len(_DOCUMENT_SUFFIX)]}{_TRANSLATED_SUFFIX}"
    return f"{file_name}{_TRANSLATED_SUFFIX}"


def run_object_keys(run_id: str, file_name: str | None) -> tuple[str, str]:
    """Return run-unique `(input_key, output_key)` for one pipeline run."""

    document_name = safe_document_name(file_name)
    return (
        f"{run_id}/{document_name}",
        f"{run_id}/{translated_document_name(document_name)}",
    )
