"""Pipeline orchestration for psdtranslate.

Responsibilities:
- Run the translation stages in strict order, each consuming its
  predecessor's output.
- Keep staged objects on a bounded lifetime: every object a run writes is
  either delivered (then deleted after a grace period) or scheduled for
  deletion when the run ends.
- Map every failure to one uniform outward response while logging detail.

Key types:
- `PsdTranslationPipeline`: orchestration facade.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from time import monotonic, sleep
from typing import Any, Mapping, Sequence
from uuid import uuid4

from ..clients.ims_auth import IMSTokenProvider
from ..clients.photoshop import PhotoshopJobClient
from ..config import PSD_CONTENT_TYPE, PsdTranslateConfig
from ..errors import JobSubmissionError, NoTranslatableContentError
from ..io.object_stager import ObjectStager
from ..jobs.poller import JobPoller
from ..manifest.layers import find_text_layers, manifest_layers
from ..models.datatypes import (
    AccessToken,
    AsyncJob,
    PipelineResponse,
    StagedObject,
    SubmissionResponse,
    TextLayer,
    TranslationOutcome,
    TranslationRequest,
    TranslationUnit,
)
from ..parsing import normalize_target_language, run_object_keys
from ..provider_factory import ServiceFactory
from ..telemetry.logger import RunLogger
from ..translation.batcher import TextTranslator, TranslationBatcher
from .telemetry import PipelineTelemetryMixin

INTERNAL_ERROR_MESSAGE = "Internal Server Error"
MISSING_DOCUMENT_MESSAGE = "No file uploaded"


class PsdTranslationPipeline(PipelineTelemetryMixin):
    """Coordinate all stages for a single document translation run."""

    def __init__(
        self,
        config: PsdTranslateConfig,
        *,
        token_provider: IMSTokenProvider | None = None,
        job_client: PhotoshopJobClient | None = None,
        stager: ObjectStager | None = None,
        translator: TextTranslator | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        clock: Callable[[], float] = monotonic,
        sleeper: Callable[[float], None] = sleep,
        run_id_factory: Callable[[], str] = lambda: uuid4().hex,
    ) -> None:
        """Bind configuration and collaborators; missing ones are built from config."""

        config.validate()
        if None in (token_provider, job_client, stager, translator):
            config.require_service_credentials()
        self.config = config
        self._run_logger = run_logger if run_logger is not None else RunLogger()
        self._stage_progress_callback = stage_progress_callback
        self._clock = clock
        self._sleeper = sleeper
        self._run_id_factory = run_id_factory
        self.token_provider = token_provider or ServiceFactory.create_token_provider(config)
        self.job_client = job_client or ServiceFactory.create_job_client(config)
        self.stager = stager or ServiceFactory.create_stager(config, run_logger=self._run_logger)
        self.translator = translator or ServiceFactory.create_translator(config)
        self.poller: JobPoller = ServiceFactory.create_poller(
            config, clock=clock, sleeper=sleeper, run_logger=self._run_logger
        )

    def handle(self, request: TranslationRequest) -> PipelineResponse:
        """Run the pipeline and return the uniform outward response.

        Failure detail is logged for operators and never included in the reply.
        """

        if not request.document:
            return PipelineResponse(status_code=400, payload={"error": MISSING_DOCUMENT_MESSAGE})
        try:
            outcome = self.run(request)
        except Exception as exc:
            self._run_logger.log_error_detail(getattr(exc, "stage", "pipeline"), exc)
            return PipelineResponse(status_code=500, payload={"error": INTERNAL_ERROR_MESSAGE})
        return PipelineResponse(status_code=200, payload={"downloadUrl": outcome.download_url})

    def run(self, request: TranslationRequest) -> TranslationOutcome:
        """Translate one document and return a signed download URL.

        Raises the typed error of the first failing stage; later stages are
        never started.
        """

        run_id = request.run_id or self._run_id_factory()
        input_key, output_key = run_object_keys(run_id, request.file_name)
        target_lang = normalize_target_language(
            request.target_lang, default=self.config.default_target_lang
        )
        transient_keys: list[str] = []
        if self._run_logger is not None:
            self._run_logger.log_event(
                "pipeline", "run", run_id=run_id, target_lang=target_lang
            )

        try:
            token = self._run_stage("authenticate", self._authenticate)
            staged_input = self._run_stage(
                "stage_input",
                lambda: self._stage_document(request.document, input_key, transient_keys),
            )
            manifest_submission = self._run_stage(
                "request_manifest",
                lambda: self.job_client.request_manifest(token, staged_input.url),
            )
            manifest = self._run_stage(
                "poll_manifest",
                lambda: self._await_manifest(manifest_submission, token),
            )
            layers = self._run_stage("extract_layers", lambda: self._extract_layers(manifest))
            units = self._run_stage(
                "translate",
                lambda: self._translate(layers, target_lang),
            )
            edit_input, edit_output = self._run_stage(
                "stage_edit",
                lambda: self._stage_edit(request.document, input_key, output_key, transient_keys),
            )
            edit_submission = self._run_stage(
                "submit_edit",
                lambda: self.job_client.apply_text_edits(
                    token, edit_input.url, edit_output.url, units
                ),
            )
            self._run_stage(
                "poll_edit",
                lambda: self._await_edit(edit_submission, token),
            )
            download = self._run_stage(
                "publish",
                lambda: self._publish(output_key, transient_keys),
            )
        finally:
            self._release_transient(transient_keys)

        return TranslationOutcome(
            run_id=run_id,
            download_url=download.url,
            output_key=output_key,
            units=tuple(units),
        )

    def _authenticate(self) -> AccessToken:
        credentials = ServiceFactory.client_credentials(self.config)
        return self.token_provider.acquire_token(credentials)

    def _stage_document(
        self,
        document: bytes,
        object_key: str,
        transient_keys: list[str],
    ) -> StagedObject:
        """Upload the document and mint a read URL the image service can fetch."""

        if object_key not in transient_keys:
            transient_keys.append(object_key)
        self.stager.upload(document, object_key, PSD_CONTENT_TYPE)
        return self.stager.signed_read_url(
            object_key, timedelta(seconds=self.config.input_url_ttl_seconds)
        )

    def _await_manifest(
        self,
        submission: SubmissionResponse,
        token: AccessToken,
    ) -> Mapping[str, Any]:
        """Poll the manifest job; a response without a status link is already final."""

        job = AsyncJob.from_submission("manifest", submission)
        if job.polling_url is None:
            return submission.body
        return self.poller.poll(
            job,
            lambda url: self.job_client.fetch_status(url, token, job.operation),
        )

    def _extract_layers(self, manifest: Mapping[str, Any]) -> list[TextLayer]:
        layers = find_text_layers(manifest_layers(manifest))
        if not layers:
            raise NoTranslatableContentError()
        if self._run_logger is not None:
            self._run_logger.log_event("extract_layers", "found", text_layers=len(layers))
        return layers

    def _translate(
        self,
        layers: Sequence[TextLayer],
        target_lang: str,
    ) -> list[TranslationUnit]:
        rate_limiter = ServiceFactory.create_rate_limiter(
            self.config, clock=self._clock, sleeper=self._sleeper
        )
        batcher = TranslationBatcher(
            self.translator,
            rate_limiter=rate_limiter,
            run_logger=self._run_logger,
        )
        return batcher.translate_all(layers, target_lang)

    def _stage_edit(
        self,
        document: bytes,
        input_key: str,
        output_key: str,
        transient_keys: list[str],
    ) -> tuple[StagedObject, StagedObject]:
        """Re-stage the input and allocate a write URL for the edited output."""

        edit_input = self._stage_document(document, input_key, transient_keys)
        transient_keys.append(output_key)
        edit_output = self.stager.signed_write_url(
            output_key,
            timedelta(seconds=self.config.output_write_url_ttl_seconds),
            PSD_CONTENT_TYPE,
        )
        return edit_input, edit_output

    def _await_edit(
        self,
        submission: SubmissionResponse,
        token: AccessToken,
    ) -> Mapping[str, Any]:
        job = AsyncJob.from_submission("text-edit", submission)
        if job.polling_url is None:
            raise JobSubmissionError(
                "Text-edit submission did not return a status link.",
                status_code=submission.status_code,
                body=str(dict(submission.body)),
            )
        return self.poller.poll(
            job,
            lambda url: self.job_client.fetch_status(url, token, job.operation),
        )

    def _publish(self, output_key: str, transient_keys: list[str]) -> StagedObject:
        """Mint the download URL and hand the output over to delayed deletion."""

        download = self.stager.signed_read_url(
            output_key, timedelta(seconds=self.config.download_url_ttl_seconds)
        )
        transient_keys.remove(output_key)
        self.stager.schedule_delete(
            output_key, timedelta(seconds=self.config.output_delete_delay_seconds)
        )
        return download

    def _release_transient(self, transient_keys: list[str]) -> None:
        """Schedule deletion of every object the run wrote and did not deliver."""

        for object_key in transient_keys:
            self.stager.schedule_delete(
                object_key, timedelta(seconds=self.config.input_delete_delay_seconds)
            )
