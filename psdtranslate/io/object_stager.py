"""Object staging on Google Cloud Storage.

Responsibilities:
- Upload document bytes under run-unique keys.
- Mint time-limited V4 signed URLs for reading and writing objects.
- Delete transient objects, immediately or on a detached timer.

Key types:
- `ObjectStager`: staging interface with best-effort scheduled deletion.
- `GCSObjectStager`: `google-cloud-storage` implementation.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
import threading
from typing import Callable

from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from ..errors import StorageError, StorageWriteError
from ..models.datatypes import StagedObject
from ..telemetry.logger import RunLogger

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def _daemon_timer(delay_seconds: float, action: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_seconds, action)
    timer.daemon = True
    return timer


class ObjectStager:
    """Staging interface; subclasses provide upload, signing, and deletion."""

    def __init__(
        self,
        run_logger: RunLogger | None = None,
        timer_factory: TimerFactory = _daemon_timer,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.run_logger = run_logger
        self._timer_factory = timer_factory
        self._now = now
        self._pending: dict[str, threading.Timer] = {}
        self._pending_lock = threading.Lock()

    def upload(self, data: bytes, object_key: str, content_type: str) -> None:
        """Store `data` under `object_key`; raises `StorageWriteError`."""

        raise NotImplementedError

    def signed_read_url(self, object_key: str, ttl: timedelta) -> StagedObject:
        """Mint a read URL valid for `ttl`; raises `StorageError`."""

        raise NotImplementedError

    def signed_write_url(
        self, object_key: str, ttl: timedelta, content_type: str
    ) -> StagedObject:
        """Mint an upload URL for a not-yet-existing object; raises `StorageError`."""

        raise NotImplementedError

    def delete(self, object_key: str) -> None:
        """Delete `object_key` now; raises `StorageError`."""

        raise NotImplementedError

    def schedule_delete(self, object_key: str, after: timedelta) -> None:
        """Delete `object_key` after `after` on a detached timer.

        Never raises and never blocks; a deletion failure is logged only.
        Rescheduling a key replaces its pending timer.
        """

        timer = self._timer_factory(
            max(after.total_seconds(), 0.0),
            lambda: self._delete_quietly(object_key),
        )
        with self._pending_lock:
            previous = self._pending.pop(object_key, None)
            self._pending[object_key] = timer
        if previous is not None:
            previous.cancel()
        timer.start()
        if self.run_logger is not None:
            self.run_logger.log_event(
                "cleanup",
                "scheduled",
                object_key=object_key,
                after_seconds=int(after.total_seconds()),
            )

    def pending_deletions(self) -> tuple[str, ...]:
        """Return keys whose deletion timer has not fired yet."""

        with self._pending_lock:
            return tuple(sorted(self._pending))

    def flush_pending(self) -> None:
        """Cancel pending timers and delete their objects now.

        Used before the process exits, since daemon timers die with it.
        """

        with self._pending_lock:
            pending = list(self._pending.items())
            self._pending.clear()
        for object_key, timer in pending:
            timer.cancel()
            self._delete_quietly(object_key)

    def _delete_quietly(self, object_key: str) -> None:
        with self._pending_lock:
            self._pending.pop(object_key, None)
        try:
            self.delete(object_key)
        except StorageError as exc:
            if self.run_logger is not None:
                self.run_logger.log_warning(
                    "cleanup",
                    "delete_failed",
                    object_key=object_key,
                    error_type=type(exc).__name__,
                )
            return
        if self.run_logger is not None:
            self.run_logger.log_event("cleanup", "deleted", object_key=object_key)

    def _expires_at(self, ttl: timedelta) -> datetime:
        return self._now() + ttl


class GCSObjectStager(ObjectStager):
    """Object stager backed by one Google Cloud Storage bucket."""

    def __init__(
        self,
        bucket: storage.Bucket,
        run_logger: RunLogger | None = None,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        super().__init__(run_logger=run_logger, timer_factory=timer_factory)
        self.bucket = bucket

    @classmethod
    def from_settings(
        cls,
        bucket_name: str,
        project_id: str | None = None,
        keyfile: Path | None = None,
        run_logger: RunLogger | None = None,
    ) -> GCSObjectStager:
        """Build a stager from bucket, project, and optional service-account key file."""

        if keyfile is not None:
            client = storage.Client.from_service_account_json(str(keyfile), project=project_id)
        else:
            client = storage.Client(project=project_id)
        return cls(client.bucket(bucket_name), run_logger=run_logger)

    def upload(self, data: bytes, object_key: str, content_type: str) -> None:
        blob = self.bucket.blob(object_key)
        try:
            blob.upload_from_string(data, content_type=content_type)
        except (GoogleAPIError, GoogleAuthError, OSError) as exc:
            raise StorageWriteError(
                f"Failed to upload `{object_key}`: {exc}", object_key=object_key
            ) from exc

    def signed_read_url(self, object_key: str, ttl: timedelta) -> StagedObject:
        blob = self.bucket.blob(object_key)
        try:
            # Loads metadata, including the content type recorded at upload.
            blob.reload()
        except NotFound as exc:
            raise StorageError(
                f"Object `{object_key}` does not exist.", object_key=object_key
            ) from exc
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise StorageError(
                f"Failed to look up `{object_key}`: {exc}", object_key=object_key
            ) from exc
        url = self._sign(blob, object_key, ttl, method="GET")
        return StagedObject(
            object_key=object_key,
            content_type=blob.content_type or "",
            url=url,
            expires_at=self._expires_at(ttl),
            access="read",
        )

    def signed_write_url(
        self, object_key: str, ttl: timedelta, content_type: str
    ) -> StagedObject:
        blob = self.bucket.blob(object_key)
        url = self._sign(blob, object_key, ttl, method="PUT", content_type=content_type)
        return StagedObject(
            object_key=object_key,
            content_type=content_type,
            url=url,
            expires_at=self._expires_at(ttl),
            access="write",
        )

    def delete(self, object_key: str) -> None:
        try:
            self.bucket.blob(object_key).delete()
        except NotFound as exc:
            raise StorageError(
                f"Object `{object_key}` was already gone.", object_key=object_key
            ) from exc
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise StorageError(
                f"Failed to delete `{object_key}`: {exc}", object_key=object_key
            ) from exc

    @staticmethod
    def _sign(
        blob: storage.Blob,
        object_key: str,
        ttl: timedelta,
        *,
        method: str,
        content_type: str | None = None,
    ) -> str:
        try:
            return blob.generate_signed_url(
                version="v4",
                expiration=ttl,
                method=method,
                content_type=content_type,
            )
        except (GoogleAPIError, GoogleAuthError, AttributeError, ValueError) as exc:
            # AttributeError: credentials without a private key cannot sign.
            raise StorageError(
                f"Failed to sign {method} URL for `{object_key}`: {exc}",
                object_key=object_key,
            ) from exc
