"""Configuration model and loaders for psdtranslate.

Responsibilities:
- Define the explicit runtime configuration passed into the pipeline.
- Resolve secrets with deterministic precedence across CLI, keyring, and env.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `PsdTranslateConfig`: normalized settings for the pipeline and its clients.
- `RuntimeSecretSources`: optional value sources for secret precedence.
- `ConfigLoader`: static construction helpers for `PsdTranslateConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, normalize_target_language


DEFAULT_IMS_TOKEN_ENDPOINT = "https://ims-na1.adobelogin.com/ims/token/v3"
DEFAULT_MANIFEST_ENDPOINT = "https://image.adobe.io/pie/psdService/documentManifest"
DEFAULT_TEXT_ENDPOINT = "https://image.adobe.io/pie/psdService/text"
DEFAULT_DEEPL_ENDPOINT = "https://api-free.deepl.com/v2/translate"
PSD_CONTENT_TYPE = "image/vnd.adobe.photoshop"

# Secret field name -> environment variable consulted after CLI and keyring.
SECRET_ENV_KEYS = {
    "adobe_client_id": "ADOBE_CLIENT_ID",
    "adobe_client_secret": "ADOBE_CLIENT_SECRET",
    "deepl_api_key": "DEEPL_API_KEY",
}


@dataclass(frozen=True, slots=True)
class RuntimeSecretSources:
    """Source mappings used for deterministic secret precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PsdTranslateConfig:
    """Runtime configuration for the translation service.

    Attributes:
        adobe_client_id: Adobe client id, also used as the Photoshop API key.
        adobe_client_secret: Adobe client secret for the IMS exchange.
        ims_token_endpoint: OAuth2 client-credentials token endpoint.
        ims_scopes: Scopes requested for the IMS token.
        manifest_endpoint: Photoshop API document-manifest endpoint.
        text_endpoint: Photoshop API text-edit endpoint.
        deepl_api_key: DeepL authentication key.
        deepl_endpoint: DeepL translate endpoint.
        gcs_bucket_name: Bucket used to stage input and output documents.
        gcs_project_id: Optional Google Cloud project id.
        gcs_keyfile: Optional service-account key file used for URL signing.
        default_target_lang: Target language when a request omits one.
        poll_interval_seconds: Wait between job status queries.
        poll_max_attempts: Status queries allowed before a job times out.
        translation_interval_seconds: Minimum spacing between translation calls.
        input_url_ttl_seconds: Lifetime of signed input read URLs.
        output_write_url_ttl_seconds: Lifetime of signed output write URLs.
        download_url_ttl_seconds: Lifetime of the returned download URL.
        output_delete_delay_seconds: Grace period before the output is deleted.
        input_delete_delay_seconds: Grace period before the staged input is deleted.
        http_timeout_seconds: Timeout applied to every outbound HTTP request.
    """

    adobe_client_id: str | None = None
    adobe_client_secret: str | None = None
    ims_token_endpoint: str = DEFAULT_IMS_TOKEN_ENDPOINT
    ims_scopes: tuple[str, ...] = ("AdobeID", "openid")
    manifest_endpoint: str = DEFAULT_MANIFEST_ENDPOINT
    text_endpoint: str = DEFAULT_TEXT_ENDPOINT
    deepl_api_key: str | None = None
    deepl_endpoint: str = DEFAULT_DEEPL_ENDPOINT
    gcs_bucket_name: str | None = None
    gcs_project_id: str | None = None
    gcs_keyfile: Path | None = None
    default_target_lang: str = "EN"
    poll_interval_seconds: float = 5.0
    poll_max_attempts: int = 10
    translation_interval_seconds: float = 1.0
    input_url_ttl_seconds: int = 2 * 60 * 60
    output_write_url_ttl_seconds: int = 2 * 60 * 60
    download_url_ttl_seconds: int = 5 * 60
    output_delete_delay_seconds: float = 60.0
    input_delete_delay_seconds: float = 60.0
    http_timeout_seconds: float = 60.0

    def validate(self) -> None:
        """Validate endpoint and timing values before any service is built."""

        for field_name in (
            "ims_token_endpoint",
            "manifest_endpoint",
            "text_endpoint",
            "deepl_endpoint",
            "default_target_lang",
        ):
            self._require_non_empty(getattr(self, field_name), field_name)
        if not self.ims_scopes:
            raise ValueError("`ims_scopes` must list at least one scope.")
        if self.poll_max_attempts <= 0:
            raise ValueError("`poll_max_attempts` must be a positive integer.")
        for field_name in (
            "input_url_ttl_seconds",
            "output_write_url_ttl_seconds",
            "download_url_ttl_seconds",
            "http_timeout_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"`{field_name}` must be positive.")
        for field_name in (
            "poll_interval_seconds",
            "translation_interval_seconds",
            "output_delete_delay_seconds",
            "input_delete_delay_seconds",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"`{field_name}` must not be negative.")

    def require_service_credentials(self) -> None:
        """Require every secret and the bucket name needed to reach external services."""

        missing = [
            name
            for name in ("adobe_client_id", "adobe_client_secret", "deepl_api_key", "gcs_bucket_name")
            if normalize_optional_string(getattr(self, name)) is None
        ]
        if missing:
            raise ValueError(f"Missing required service setting(s): {', '.join(missing)}.")

    def with_resolved_secrets(self, sources: RuntimeSecretSources) -> PsdTranslateConfig:
        """Return a copy with secrets resolved in `cli` > `secure` > `env` > field order."""

        resolved: dict[str, str | None] = {}
        for key, env_key in SECRET_ENV_KEYS.items():
            resolved[key] = (
                self._normalized_lookup(sources.cli, key)
                or self._normalized_lookup(sources.secure, key)
                or self._normalized_lookup(sources.env, env_key)
                or normalize_optional_string(getattr(self, key))
            )
        return replace(self, **resolved)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _require_non_empty(value: object, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `PsdTranslateConfig` from external sources."""

    _STRING_KEYS = frozenset(
        {
            "adobe_client_id",
            "adobe_client_secret",
            "ims_token_endpoint",
            "manifest_endpoint",
            "text_endpoint",
            "deepl_api_key",
            "deepl_endpoint",
            "gcs_bucket_name",
            "gcs_project_id",
        }
    )
    _POSITIVE_INT_KEYS = frozenset(
        {
            "poll_max_attempts",
            "input_url_ttl_seconds",
            "output_write_url_ttl_seconds",
            "download_url_ttl_seconds",
        }
    )
    _FLOAT_KEYS = frozenset(
        {
            "poll_interval_seconds",
            "translation_interval_seconds",
            "output_delete_delay_seconds",
            "input_delete_delay_seconds",
            "http_timeout_seconds",
        }
    )
    _ENV_TUNABLES = {
        "PSDTRANSLATE_POLL_INTERVAL_SECONDS": "poll_interval_seconds",
        "PSDTRANSLATE_POLL_MAX_ATTEMPTS": "poll_max_attempts",
        "PSDTRANSLATE_TRANSLATION_INTERVAL_SECONDS": "translation_interval_seconds",
        "PSDTRANSLATE_DOWNLOAD_URL_TTL_SECONDS": "download_url_ttl_seconds",
        "PSDTRANSLATE_OUTPUT_DELETE_DELAY_SECONDS": "output_delete_delay_seconds",
        "PSDTRANSLATE_HTTP_TIMEOUT_SECONDS": "http_timeout_seconds",
        "PSDTRANSLATE_DEEPL_ENDPOINT": "deepl_endpoint",
    }

    @staticmethod
    def from_yaml(path: Path) -> PsdTranslateConfig:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> PsdTranslateConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        payload: dict[str, Any] = {
            key: env_map[env_key]
            for key, env_key in SECRET_ENV_KEYS.items()
            if env_key in env_map
        }
        for env_key, key in (
            ("GCS_BUCKET_NAME", "gcs_bucket_name"),
            ("GCS_PROJECT_ID", "gcs_project_id"),
            ("PSDTRANSLATE_TARGET_LANG", "default_target_lang"),
        ):
            if env_key in env_map:
                payload[key] = env_map[env_key]
        keyfile = normalize_optional_string(
            env_map.get("GOOGLE_APPLICATION_CREDENTIALS")
        ) or normalize_optional_string(env_map.get("GCS_KEYFILE"))
        if keyfile is not None:
            payload["gcs_keyfile"] = keyfile
        for env_key, key in ConfigLoader._ENV_TUNABLES.items():
            if normalize_optional_string(env_map.get(env_key)) is not None:
                payload[key] = env_map[env_key]

        return ConfigLoader.from_mapping(payload, source_label="Environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> PsdTranslateConfig:
        """Build a validated config from a normalized mapping payload."""

        supported = {item.name for item in fields(PsdTranslateConfig)}
        unknown = sorted(set(payload).difference(supported))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if key in ConfigLoader._STRING_KEYS:
                values[key] = normalize_optional_string(raw_value)
            elif key in ConfigLoader._POSITIVE_INT_KEYS:
                values[key] = ConfigLoader._positive_int(raw_value, key, source_label)
            elif key in ConfigLoader._FLOAT_KEYS:
                values[key] = ConfigLoader._non_negative_float(raw_value, key, source_label)
            elif key == "gcs_keyfile":
                keyfile = normalize_optional_string(raw_value)
                values[key] = Path(keyfile) if keyfile is not None else None
            elif key == "ims_scopes":
                values[key] = ConfigLoader._scopes(raw_value, source_label)
            elif key == "default_target_lang":
                values[key] = normalize_target_language(raw_value)

        config = PsdTranslateConfig(**{k: v for k, v in values.items() if v is not None})
        config.validate()
        return config

    @staticmethod
    def _positive_int(raw_value: Any, key: str, source_label: str) -> int:
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        try:
            parsed = int(str(raw_value).strip())
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.") from exc
        if parsed <= 0:
            raise ValueError(f"{source_label} field `{key}` must be a positive integer.")
        return parsed

    @staticmethod
    def _non_negative_float(raw_value: Any, key: str, source_label: str) -> float:
        if isinstance(raw_value, bool):
            raise ValueError(f"{source_label} field `{key}` must be a number.")
        try:
            parsed = float(str(raw_value).strip())
        except ValueError as exc:
            raise ValueError(f"{source_label} field `{key}` must be a number.") from exc
        if parsed < 0:
            raise ValueError(f"{source_label} field `{key}` must not be negative.")
        return parsed

    @staticmethod
    def _scopes(raw_value: Any, source_label: str) -> tuple[str, ...]:
        if isinstance(raw_value, str):
            items = raw_value.split(",")
        elif isinstance(raw_value, (list, tuple)):
            items = list(raw_value)
        else:
            raise ValueError(f"{source_label} field `ims_scopes` must be a list or CSV string.")
        scopes = tuple(
            scope for scope in (normalize_optional_string(item) for item in items) if scope
        )
        if not scopes:
            raise ValueError(f"{source_label} field `ims_scopes` must list at least one scope.")
        return scopes
