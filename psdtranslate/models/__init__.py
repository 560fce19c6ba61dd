"""Model package exports for psdtranslate datatypes."""

from .datatypes import (
    AccessToken,
    AsyncJob,
    ClientCredentials,
    JobState,
    PipelineResponse,
    StagedObject,
    SubmissionResponse,
    TextLayer,
    TranslationOutcome,
    TranslationRequest,
    TranslationUnit,
)

__all__ = [
    "AccessToken",
    "AsyncJob",
    "ClientCredentials",
    "JobState",
    "PipelineResponse",
    "StagedObject",
    "SubmissionResponse",
    "TextLayer",
    "TranslationOutcome",
    "TranslationRequest",
    "TranslationUnit",
]
