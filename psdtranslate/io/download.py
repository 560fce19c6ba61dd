"""Download of delivered documents through their signed read URL."""

from __future__ import annotations

from pathlib import Path

from ..clients.http import ServiceHTTPClient
from ..errors import StorageError


class SignedUrlDownloader(ServiceHTTPClient):
    """Fetch an object through a signed URL and write it to a local path."""

    _service_label = "Signed URL download"

    def download(self, url: str, destination: Path) -> Path:
        """Write the object behind `url` to `destination` and return the path."""

        response = self._get(url, on_transport_error=StorageError)
        if not self._is_success(response.status_code):
            raise StorageError(
                f"Download failed (HTTP {response.status_code}): "
                f"{self._short_message(self._response_text(response))}"
            )
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(bytes(response.content))
        return destination
