"""Decoder settings.

The wire format is fixed, but how strictly a decoder polices it is a
deployment decision: a development build wants unknown bundle magics to
fail, a field build reading from many Android versions does not.

Features:
    - **DecoderSettings:** strict_magic, verify_bundle_length, service_name, log_level, json_logs
    - **env_prefix:** ``PARCEL_`` environment variables override defaults
    - **.env file support:** automatic loading via pydantic-settings

Examples:
    >>> from parcelspine.core.settings import DecoderSettings
    >>> DecoderSettings(strict_magic=True).strict_magic
    True
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class DecoderSettings(BaseSettings):
    """Settings shared by every decode call.

    Fields
    ──────
    strict_magic          : Reject bundles whose magic is neither BNDL nor BNDN
    verify_bundle_length  : Require a bundle to end exactly at its declared length
    log_level             : Structlog log level
    json_logs             : JSON logs (True), console (False), auto-detect (None)
    service_name          : Value of the service.name log field
    """

    model_config = SettingsConfigDict(
        env_prefix="PARCEL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Validation ───────────────────────────────────────────────
    strict_magic: bool = False
    verify_bundle_length: bool = False

    # ── Observability ────────────────────────────────────────────
    service_name: str = "parcelspine"
    log_level: str = "INFO"
    json_logs: bool | None = Field(
        default=None,
        description="Force JSON or console log rendering; None auto-detects a tty",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> DecoderSettings:
    """Return the process-wide settings, read once from the environment."""
    return DecoderSettings()
