"""Unit tests for Google Cloud Storage staging and scheduled cleanup."""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest
from google.api_core.exceptions import Forbidden, NotFound

from psdtranslate.errors import StorageError, StorageWriteError
from psdtranslate.io import GCSObjectStager
from tests.doubles import InMemoryObjectStager, ManualTimer


class _FakeBlob:
    """Blob double recording uploads, signing calls, and deletions."""

    def __init__(self, bucket: "_FakeBucket", name: str) -> None:
        self.bucket = bucket
        self.name = name
        self.content_type: str | None = None
        self.sign_calls: list[dict[str, Any]] = []

    def upload_from_string(self, data: bytes, content_type: str) -> None:
        if self.bucket.upload_error is not None:
            raise self.bucket.upload_error
        self.bucket.objects[self.name] = data
        self.bucket.content_types[self.name] = content_type
        self.content_type = content_type

    def reload(self) -> None:
        if self.bucket.lookup_error is not None:
            raise self.bucket.lookup_error
        if self.name not in self.bucket.objects:
            raise NotFound("No such object")
        self.content_type = self.bucket.content_types.get(self.name)

    def generate_signed_url(self, **kwargs: Any) -> str:
        self.sign_calls.append(kwargs)
        self.bucket.sign_calls.append(kwargs)
        if self.bucket.sign_error is not None:
            raise self.bucket.sign_error
        return f"https://signed.test/{self.name}?X-Goog-Signature=abc"

    def delete(self) -> None:
        if self.bucket.delete_error is not None:
            raise self.bucket.delete_error
        if self.name not in self.bucket.objects:
            raise NotFound("No such object")
        del self.bucket.objects[self.name]


class _FakeBucket:
    """Bucket double holding objects in memory."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.sign_calls: list[dict[str, Any]] = []
        self.upload_error: Exception | None = None
        self.sign_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.lookup_error: Exception | None = None

    def blob(self, name: str) -> _FakeBlob:
        return _FakeBlob(self, name)


def _stager(bucket: _FakeBucket, timers: list[ManualTimer], run_logger=None) -> GCSObjectStager:  # type: ignore[no-untyped-def]
    def timer_factory(delay: float, action) -> ManualTimer:  # type: ignore[no-untyped-def]
        timer = ManualTimer(delay, action)
        timers.append(timer)
        return timer

    return GCSObjectStager(bucket, run_logger=run_logger, timer_factory=timer_factory)  # type: ignore[arg-type]


def test_upload_and_signed_read_url() -> None:
    """Uploaded objects should be readable through a V4 GET URL."""

    bucket = _FakeBucket()
    stager = _stager(bucket, [])

    stager.upload(b"psd-bytes", "run-1/banner.psd", "image/vnd.adobe.photoshop")
    staged = stager.signed_read_url("run-1/banner.psd", timedelta(hours=2))

    assert bucket.objects["run-1/banner.psd"] == b"psd-bytes"
    assert staged.object_key == "run-1/banner.psd"
    assert staged.access == "read"
    assert staged.content_type == "image/vnd.adobe.photoshop"
    assert staged.url.startswith("https://signed.test/run-1/banner.psd")
    assert bucket.sign_calls == [
        {
            "version": "v4",
            "expiration": timedelta(hours=2),
            "method": "GET",
            "content_type": None,
        }
    ]


def test_signed_read_url_requires_existing_object() -> None:
    """Reading a missing object should fail before any URL is signed."""

    bucket = _FakeBucket()

    with pytest.raises(StorageError, match="does not exist") as exc_info:
        _stager(bucket, []).signed_read_url("run-1/missing.psd", timedelta(minutes=5))

    assert exc_info.value.object_key == "run-1/missing.psd"
    assert bucket.sign_calls == []


def test_signed_write_url_binds_put_and_content_type() -> None:
    """Write URLs should be PUT URLs bound to the declared content type."""

    bucket = _FakeBucket()

    staged = _stager(bucket, []).signed_write_url(
        "run-1/banner-translated.psd", timedelta(hours=2), "image/vnd.adobe.photoshop"
    )

    assert staged.access == "write"
    assert staged.content_type == "image/vnd.adobe.photoshop"
    assert bucket.sign_calls[0]["method"] == "PUT"
    assert bucket.sign_calls[0]["content_type"] == "image/vnd.adobe.photoshop"
    assert "run-1/banner-translated.psd" not in bucket.objects


def test_upload_failure_raises_storage_write_error() -> None:
    """Store-side upload failures should surface as `StorageWriteError`."""

    bucket = _FakeBucket()
    bucket.upload_error = Forbidden("denied")

    with pytest.raises(StorageWriteError):
        _stager(bucket, []).upload(b"x", "run-1/a.psd", "image/vnd.adobe.photoshop")


def test_signing_failure_raises_storage_error() -> None:
    """Credentials that cannot sign should surface as `StorageError`."""

    bucket = _FakeBucket()
    bucket.sign_error = AttributeError("you need a private key to sign credentials")

    with pytest.raises(StorageError, match="Failed to sign PUT URL"):
        _stager(bucket, []).signed_write_url("k", timedelta(minutes=1), "image/png")


def test_delete_maps_missing_object_to_storage_error() -> None:
    """Deleting an absent object should raise a storage error."""

    with pytest.raises(StorageError, match="already gone"):
        _stager(_FakeBucket(), []).delete("run-1/a.psd")


def test_schedule_delete_runs_when_timer_fires() -> None:
    """Scheduled deletion should not block and should delete once the timer fires."""

    bucket = _FakeBucket()
    bucket.objects["run-1/a.psd"] = b"x"
    timers: list[ManualTimer] = []
    stager = _stager(bucket, timers)

    stager.schedule_delete("run-1/a.psd", timedelta(seconds=60))

    assert timers[0].started is True
    assert timers[0].delay_seconds == 60.0
    assert stager.pending_deletions() == ("run-1/a.psd",)
    assert "run-1/a.psd" in bucket.objects

    timers[0].fire()

    assert "run-1/a.psd" not in bucket.objects
    assert stager.pending_deletions() == ()


def test_schedule_delete_replaces_previous_timer() -> None:
    """Rescheduling the same key should cancel the earlier timer."""

    timers: list[ManualTimer] = []
    stager = _stager(_FakeBucket(), timers)

    stager.schedule_delete("k", timedelta(seconds=60))
    stager.schedule_delete("k", timedelta(seconds=5))

    assert timers[0].cancelled is True
    assert timers[1].cancelled is False
    assert stager.pending_deletions() == ("k",)


def test_scheduled_delete_failure_is_logged_not_raised(run_logger, log_sink) -> None:  # type: ignore[no-untyped-def]
    """A failing deletion on a timer should only log a warning."""

    bucket = _FakeBucket()
    bucket.delete_error = Forbidden("denied")
    timers: list[ManualTimer] = []
    stager = _stager(bucket, timers, run_logger=run_logger)

    stager.schedule_delete("run-1/a.psd", timedelta(seconds=60))
    timers[0].fire()

    assert (
        "[phase] level=WARNING stage=cleanup event=delete_failed "
        "error_type=StorageError object_key=run-1/a.psd"
    ) in log_sink.getvalue()


def test_flush_pending_deletes_immediately_and_cancels_timers() -> None:
    """Flushing should delete every pending object now and cancel its timer."""

    bucket = _FakeBucket()
    bucket.objects.update({"a": b"1", "b": b"2"})
    timers: list[ManualTimer] = []
    stager = _stager(bucket, timers)
    stager.schedule_delete("a", timedelta(seconds=60))
    stager.schedule_delete("b", timedelta(seconds=60))

    stager.flush_pending()

    assert bucket.objects == {}
    assert all(timer.cancelled for timer in timers)
    assert stager.pending_deletions() == ()


def test_in_memory_stager_tracks_scheduled_keys() -> None:
    """The shared in-memory double should report live schedules by key."""

    stager = InMemoryObjectStager()
    stager.upload(b"x", "run-1/a.psd", "image/vnd.adobe.photoshop")
    stager.schedule_delete("run-1/a.psd", timedelta(seconds=60))

    assert stager.scheduled() == {"run-1/a.psd": 60.0}
    stager.fire_all()
    assert stager.deleted == ["run-1/a.psd"]


def test_signed_read_url_lookup_failure_raises_storage_error() -> None:
    """A failing metadata lookup should surface as `StorageError` without signing."""

    bucket = _FakeBucket()
    bucket.objects["run-1/a.psd"] = b"x"
    bucket.lookup_error = Forbidden("denied")

    with pytest.raises(StorageError, match="Failed to look up"):
        _stager(bucket, []).signed_read_url("run-1/a.psd", timedelta(minutes=5))

    assert bucket.sign_calls == []
