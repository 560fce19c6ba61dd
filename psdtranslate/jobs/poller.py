"""Bounded status polling for asynchronous Photoshop API jobs.

Responsibilities:
- Drive an `AsyncJob` from `PENDING` to a terminal state with fixed backoff.
- Keep the poll policy independent from the HTTP client issuing queries.

Transition rules, evaluated on every status document:
- `outputs[0].status == "succeeded"` -> `SUCCEEDED`, the body is returned.
- `outputs[0].status == "failed"` -> `FAILED`, `JobFailedError` is raised.
- anything else (no outputs, other or absent status) -> stay `PENDING`.
- `max_attempts` queries without a terminal status -> `TIMED_OUT`.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import monotonic, sleep
from typing import Any, Callable, Mapping

from ..errors import JobFailedError, PollingTimeoutError
from ..models.datatypes import AsyncJob, JobState
from ..telemetry.logger import RunLogger

StatusFetcher = Callable[[str], Mapping[str, Any]]


def classify_status(body: Mapping[str, Any]) -> JobState:
    """Map one status document onto the job state it implies."""

    outputs = body.get("outputs")
    if not isinstance(outputs, list) or not outputs:
        return JobState.PENDING
    first_output = outputs[0]
    if not isinstance(first_output, Mapping):
        return JobState.PENDING
    status = first_output.get("status")
    if status == "succeeded":
        return JobState.SUCCEEDED
    if status == "failed":
        return JobState.FAILED
    return JobState.PENDING


def _failure_errors(body: Mapping[str, Any]) -> Any:
    first_output = body["outputs"][0]
    errors = first_output.get("errors")
    return errors if errors else dict(body)


@dataclass(slots=True)
class JobPoller:
    """Fixed-interval poller with a bounded number of status queries."""

    max_attempts: int = 10
    interval_seconds: float = 5.0
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    run_logger: RunLogger | None = None

    def poll(self, job: AsyncJob, fetch: StatusFetcher) -> Mapping[str, Any]:
        """Query `job.polling_url` until the job succeeds, fails, or times out.

        Transport errors raised by `fetch` propagate immediately without
        consuming further attempts.
        """

        if job.polling_url is None:
            raise ValueError(f"Job `{job.operation}` has no polling URL.")

        started_at = self.clock()
        while job.attempts < self.max_attempts:
            if job.attempts > 0 and self.interval_seconds > 0:
                self.sleeper(self.interval_seconds)
            body = fetch(job.polling_url)
            job.attempts += 1
            job.state = classify_status(body)
            self._log_attempt(job)

            if job.state is JobState.SUCCEEDED:
                job.result = body
                return body
            if job.state is JobState.FAILED:
                raise JobFailedError(operation=job.operation, errors=_failure_errors(body))

        job.state = JobState.TIMED_OUT
        raise PollingTimeoutError(
            operation=job.operation,
            attempts=job.attempts,
            elapsed_seconds=self.clock() - started_at,
        )

    def _log_attempt(self, job: AsyncJob) -> None:
        if self.run_logger is None:
            return
        self.run_logger.log_event(
            "poll",
            "status",
            operation=job.operation,
            attempt=job.attempts,
            state=job.state.value,
        )
