"""HTTP endpoint tests for the FastAPI translation application."""

from __future__ import annotations

from fastapi.testclient import TestClient

from psdtranslate import __version__
from psdtranslate.api import create_app
from tests.doubles import FakePhotoshopJobClient, StubTranslator

_LAYERS = [{"type": "textLayer", "name": "Title", "text": {"content": "Hello"}}]
_PSD_UPLOAD = ("banner.psd", b"psd-bytes", "image/vnd.adobe.photoshop")


def _client(build_pipeline, stager, translator: StubTranslator | None = None) -> TestClient:  # type: ignore[no-untyped-def]
    pipeline = build_pipeline(
        job_client=FakePhotoshopJobClient(stager, _LAYERS),
        translator=translator or StubTranslator({"Hello": "Hallo"}),
    )
    return TestClient(create_app(pipeline=pipeline))


def test_root_reports_api_info(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    with _client(build_pipeline, stager) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {
        "name": "psdtranslate",
        "version": __version__,
        "api": "/api/translate",
    }


def test_translate_returns_download_url(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    """A multipart upload should be translated and answered with a download URL."""

    translator = StubTranslator({"Hello": "Hallo"})
    with _client(build_pipeline, stager, translator) as client:
        response = client.post(
            "/api/translate",
            files={"psd": _PSD_UPLOAD},
            data={"targetLang": "de"},
        )

    assert response.status_code == 200
    assert response.json() == {
        "downloadUrl": "https://storage.test/run-1/banner-translated.psd?method=GET&ttl=300"
    }
    assert translator.calls == [("Hello", "DE")]


def test_translate_defaults_target_language(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    """Omitting `targetLang` should translate to the configured default."""

    translator = StubTranslator({"Hello": "Hello"})
    with _client(build_pipeline, stager, translator) as client:
        client.post("/api/translate", files={"psd": _PSD_UPLOAD})

    assert translator.calls == [("Hello", "EN")]


def test_translate_without_file_is_rejected(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    with _client(build_pipeline, stager) as client:
        response = client.post("/api/translate", data={"targetLang": "DE"})

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}
    assert stager.uploads == []


def test_translate_with_empty_file_is_rejected(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    with _client(build_pipeline, stager) as client:
        response = client.post(
            "/api/translate",
            files={"psd": ("banner.psd", b"", "image/vnd.adobe.photoshop")},
        )

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_translate_failure_returns_generic_error(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    """Service failures should never leak detail to the HTTP client."""

    translator = StubTranslator({}, fail_on="Hello")
    with _client(build_pipeline, stager, translator) as client:
        response = client.post("/api/translate", files={"psd": _PSD_UPLOAD})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}


def test_shutdown_flushes_pending_deletions(build_pipeline, stager) -> None:  # type: ignore[no-untyped-def]
    """Stopping the application should delete every object still awaiting its timer."""

    with _client(build_pipeline, stager) as client:
        client.post("/api/translate", files={"psd": _PSD_UPLOAD})
        assert stager.pending_deletions() == (
            "run-1/banner-translated.psd",
            "run-1/banner.psd",
        )

    assert stager.pending_deletions() == ()
    assert sorted(stager.deleted) == ["run-1/banner-translated.psd", "run-1/banner.psd"]
    assert stager.objects == {}
