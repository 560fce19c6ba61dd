"""Secure secret storage helpers for psdtranslate.

Responsibilities:
- Persist service secrets (Adobe client id/secret, DeepL key) in the OS keyring.
- Provide deterministic read/write/delete operations per named secret.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for secret persistence.
- `KeyringCredentialStore`: keyring-backed secure storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError, NoKeyringError

from .config import SECRET_ENV_KEYS


_DEFAULT_SERVICE_NAME = "psdtranslate"
SECRET_NAMES = tuple(SECRET_ENV_KEYS)


class CredentialStore:
    """Interface for secure secret operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_secret(self, name: str) -> str | None:
        """Load one named secret, when stored."""

        raise NotImplementedError

    def set_secret(self, name: str, value: str) -> None:
        """Persist one named secret."""

        raise NotImplementedError

    def clear_secret(self, name: str) -> bool:
        """Delete a named secret and return whether one existed."""

        raise NotImplementedError

    def load_all(self) -> dict[str, str]:
        """Return every stored secret keyed by its config field name."""

        stored: dict[str, str] = {}
        for name in SECRET_NAMES:
            value = self.get_secret(name)
            if value is not None:
                stored[name] = value
        return stored


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME

    def _keyring_backend(self):
        return keyring.get_keyring()

    @staticmethod
    def _require_known_name(name: str) -> None:
        if name not in SECRET_NAMES:
            supported = ", ".join(SECRET_NAMES)
            raise ValueError(f"Unknown secret `{name}`; supported: {supported}.")

    def is_available(self) -> bool:
        """Return `True` when a usable keyring backend is configured."""

        backend = self._keyring_backend()
        return getattr(backend, "priority", 0) > 0

    def get_secret(self, name: str) -> str | None:
        """Get a normalized secret, returning `None` when missing or unavailable."""

        self._require_known_name(name)
        try:
            value = self._keyring_backend().get_password(self.service_name, name)
        except (KeyringError, NoKeyringError):
            return None
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    def set_secret(self, name: str, value: str) -> None:
        """Persist a normalized secret or raise when the value is blank."""

        self._require_known_name(name)
        normalized = value.strip()
        if not normalized:
            raise ValueError(f"Secret `{name}` must be a non-empty string.")
        self._keyring_backend().set_password(self.service_name, name, normalized)

    def clear_secret(self, name: str) -> bool:
        """Remove a stored secret and report if one was present."""

        if self.get_secret(name) is None:
            return False
        self._keyring_backend().delete_password(self.service_name, name)
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
