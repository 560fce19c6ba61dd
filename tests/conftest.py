"""Shared pytest fixtures for the psdtranslate test suite."""

from __future__ import annotations

import io
from typing import Any, Callable

import pytest

from psdtranslate.pipeline import PsdTranslationPipeline
from psdtranslate.telemetry.logger import RunLogger
from tests.doubles import (
    FakePhotoshopJobClient,
    FakeTokenProvider,
    InMemoryObjectStager,
    StubTranslator,
    service_config,
)


@pytest.fixture
def log_sink() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def run_logger(log_sink: io.StringIO):
    logger = RunLogger(sink=log_sink)
    yield logger
    logger.close()


@pytest.fixture
def stager(run_logger: RunLogger) -> InMemoryObjectStager:
    return InMemoryObjectStager(run_logger=run_logger)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def build_pipeline(
    stager: InMemoryObjectStager,
    run_logger: RunLogger,
    sleeps: list[float],
) -> Callable[..., PsdTranslationPipeline]:
    """Return a factory wiring a pipeline to in-memory doubles."""

    def _build(
        *,
        job_client: FakePhotoshopJobClient,
        translator: StubTranslator,
        token_provider: FakeTokenProvider | None = None,
        **config_overrides: Any,
    ) -> PsdTranslationPipeline:
        return PsdTranslationPipeline(
            service_config(**config_overrides),
            token_provider=token_provider or FakeTokenProvider(),
            job_client=job_client,
            stager=stager,
            translator=translator,
            run_logger=run_logger,
            clock=lambda: 0.0,
            sleeper=sleeps.append,
            run_id_factory=lambda: "run-1",
        )

    return _build
