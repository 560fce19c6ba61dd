"""Service factory helpers for the translation pipeline.

Responsibilities:
- Build concrete service clients from a validated `PsdTranslateConfig`.
- Keep orchestration independent from concrete client construction.
"""

from __future__ import annotations

from typing import Callable

from .clients.ims_auth import IMSTokenProvider
from .clients.photoshop import PhotoshopJobClient
from .config import PsdTranslateConfig
from .io.object_stager import GCSObjectStager, ObjectStager
from .jobs.poller import JobPoller
from .models.datatypes import ClientCredentials
from .telemetry.logger import RunLogger
from .translation.deepl_client import DeepLClient
from .translation.rate_limiter import RateLimiter


class ServiceFactory:
    """Factory for service clients used by the pipeline."""

    @staticmethod
    def client_credentials(config: PsdTranslateConfig) -> ClientCredentials:
        """Return the IMS client identity configured for this process."""

        return ClientCredentials(
            client_id=config.adobe_client_id or "",
            client_secret=config.adobe_client_secret or "",
            token_endpoint=config.ims_token_endpoint,
            scopes=config.ims_scopes,
        )

    @staticmethod
    def create_token_provider(config: PsdTranslateConfig) -> IMSTokenProvider:
        return IMSTokenProvider(timeout_seconds=config.http_timeout_seconds)

    @staticmethod
    def create_job_client(config: PsdTranslateConfig) -> PhotoshopJobClient:
        return PhotoshopJobClient(
            api_key=config.adobe_client_id or "",
            manifest_endpoint=config.manifest_endpoint,
            text_endpoint=config.text_endpoint,
            timeout_seconds=config.http_timeout_seconds,
        )

    @staticmethod
    def create_translator(config: PsdTranslateConfig) -> DeepLClient:
        return DeepLClient(
            api_key=config.deepl_api_key or "",
            endpoint=config.deepl_endpoint,
            timeout_seconds=config.http_timeout_seconds,
        )

    @staticmethod
    def create_stager(
        config: PsdTranslateConfig,
        run_logger: RunLogger | None = None,
    ) -> ObjectStager:
        if not config.gcs_bucket_name:
            raise ValueError("`gcs_bucket_name` is required to stage documents.")
        return GCSObjectStager.from_settings(
            bucket_name=config.gcs_bucket_name,
            project_id=config.gcs_project_id,
            keyfile=config.gcs_keyfile,
            run_logger=run_logger,
        )

    @staticmethod
    def create_poller(
        config: PsdTranslateConfig,
        clock: Callable[[], float],
        sleeper: Callable[[float], None],
        run_logger: RunLogger | None = None,
    ) -> JobPoller:
        return JobPoller(
            max_attempts=config.poll_max_attempts,
            interval_seconds=config.poll_interval_seconds,
            clock=clock,
            sleeper=sleeper,
            run_logger=run_logger,
        )

    @staticmethod
    def create_rate_limiter(
        config: PsdTranslateConfig,
        clock: Callable[[], float],
        sleeper: Callable[[float], None],
    ) -> RateLimiter:
        return RateLimiter(
            min_interval_seconds=config.translation_interval_seconds,
            clock=clock,
            sleeper=sleeper,
        )
