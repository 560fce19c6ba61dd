"""FastAPI application exposing the document translation endpoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import ConfigLoader, PsdTranslateConfig
from ..models.datatypes import TranslationRequest
from ..pipeline import PsdTranslationPipeline
from ..telemetry.logger import RunLogger


def create_app(
    config: PsdTranslateConfig | None = None,
    pipeline: PsdTranslationPipeline | None = None,
) -> FastAPI:
    """Create the application with one pipeline bound for the process lifetime."""

    if pipeline is None:
        resolved_config = config if config is not None else ConfigLoader.from_env()
        pipeline = PsdTranslationPipeline(resolved_config, run_logger=RunLogger())

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        pipeline.stager.flush_pending()

    app = FastAPI(
        title="psdtranslate",
        description="Translate text layers of Photoshop documents",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {"name": "psdtranslate", "version": __version__, "api": "/api/translate"}

    @app.post("/api/translate")
    def translate(
        psd: Optional[UploadFile] = File(None),
        targetLang: Optional[str] = Form(None),
    ) -> JSONResponse:
        """Translate the uploaded PSD and return a short-lived download URL."""
        if psd is None:
            return JSONResponse({"error": "No file uploaded"}, status_code=400)

        request = TranslationRequest(
            document=psd.file.read(),
            file_name=psd.filename or "document.psd",
            target_lang=targetLang or pipeline.config.default_target_lang,
        )
        response = pipeline.handle(request)
        return JSONResponse(response.payload, status_code=response.status_code)

    return app
