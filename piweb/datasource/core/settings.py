"""Datasource instance settings.

Settings are resolved once per datasource instance. The host hands over its
instance settings as a plain mapping (already decrypted); ``from_env`` is a
convenience for scripts and local runs.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..config import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_PREFIX,
    WEBID_CACHE_TTL_SECONDS,
    WEBID_EVICTION_INTERVAL_SECONDS,
)


class DataSourceSettings(BaseModel):
    """Configuration for one PI Web API datasource instance."""

    url: str = Field(..., min_length=1)
    uid: str = ""
    basic_auth_user: str | None = None
    basic_auth_password: SecretStr | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_concurrency: int = Field(default=DEFAULT_MAX_CONCURRENCY, ge=1)
    webid_cache_ttl: float = Field(default=WEBID_CACHE_TTL_SECONDS, gt=0)
    eviction_interval: float = Field(default=WEBID_EVICTION_INTERVAL_SECONDS, gt=0)

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Resource paths are appended with a leading slash."""
        return v.rstrip("/")

    @property
    def basic_auth_enabled(self) -> bool:
        return bool(self.basic_auth_user)

    @classmethod
    def from_instance_settings(
        cls,
        settings: Mapping[str, Any],
        decrypted_secure_json: Mapping[str, str] | None = None,
    ) -> DataSourceSettings:
        """Build settings from the host's instance settings mapping.

        Args:
            settings: Host mapping with ``URL``, ``UID`` and optionally
                ``BasicAuthEnabled``/``BasicAuthUser`` and ``JSONData``
            decrypted_secure_json: Decrypted secure fields (``basicAuthPassword``)

        Returns:
            DataSourceSettings for the instance
        """
        secure = decrypted_secure_json or {}
        json_data = settings.get("JSONData") or {}
        data: dict[str, Any] = {
            "url": settings.get("URL", ""),
            "uid": settings.get("UID", ""),
        }
        if settings.get("BasicAuthEnabled"):
            data["basic_auth_user"] = settings.get("BasicAuthUser")
            data["basic_auth_password"] = secure.get("basicAuthPassword")
        for key in ("timeout", "max_concurrency"):
            if key in json_data:
                data[key] = json_data[key]
        return cls(**data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DataSourceSettings:
        """Build settings from ``PIWEBAPI_*`` environment variables."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in env:
                data[name] = env[key]
        return cls(**data)
