"""Unit tests for request and object-key normalization helpers."""

from __future__ import annotations

import pytest

from psdtranslate.parsing import (
    normalize_optional_string,
    normalize_target_language,
    run_object_keys,
    safe_document_name,
    translated_document_name,
)


def test_normalize_optional_string() -> None:
    assert normalize_optional_string(None) is None
    assert normalize_optional_string("   ") is None
    assert normalize_optional_string("  x ") == "x"
    assert normalize_optional_string(5) == "5"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("de", "DE"), (" en-gb ", "EN-GB"), ("", "EN"), (None, "EN"), (["DE"], "EN"), (3, "EN")],
)
def test_normalize_target_language(value: object, expected: str) -> None:
    """Only string values count; anything else falls back to the default."""

    assert normalize_target_language(value) == expected


def test_normalize_target_language_uses_custom_default() -> None:
    assert normalize_target_language(None, default="FR") == "FR"


@pytest.mark.parametrize(
    ("file_name", "expected"),
    [
        ("banner.psd", "banner.psd"),
        ("../../etc/passwd", "passwd"),
        ("C:\\designs\\My Banner.psd", "My_Banner.psd"),
        ("", "document.psd"),
        (None, "document.psd"),
        ("...", "document.psd"),
    ],
)
def test_safe_document_name(file_name: str | None, expected: str) -> None:
    """Client file names should reduce to one safe key segment."""

    assert safe_document_name(file_name) == expected


def test_translated_document_name() -> None:
    assert translated_document_name("banner.psd") == "banner-translated.psd"
    assert translated_document_name("banner.PSD") == "banner-translated.psd"
    assert translated_document_name("banner") == "banner-translated.psd"


def test_run_object_keys_are_scoped_by_run() -> None:
    """Concurrent runs with the same file name must not share object keys."""

    first = run_object_keys("run-a", "banner.psd")
    second = run_object_keys("run-b", "banner.psd")

    assert first == ("run-a/banner.psd", "run-a/banner-translated.psd")
    assert set(first).isdisjoint(second)
