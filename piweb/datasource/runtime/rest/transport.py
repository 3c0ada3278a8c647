"""REST transport bound to one PI Web API base URL."""

from __future__ import annotations

from typing import Any

import aiohttp

from ...core.settings import DataSourceSettings
from .http_client import HTTPClient


class RESTTransport:
    """Thin transport that joins endpoint paths onto the configured base URL."""

    def __init__(self, base_url: str, http: HTTPClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http or HTTPClient()

    @classmethod
    def from_settings(cls, settings: DataSourceSettings) -> RESTTransport:
        auth = None
        if settings.basic_auth_enabled:
            password = settings.basic_auth_password
            auth = aiohttp.BasicAuth(
                settings.basic_auth_user or "",
                password.get_secret_value() if password else "",
            )
        return cls(settings.url, HTTPClient(timeout=settings.timeout, auth=auth))

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self._http.get(self.url(path), params=params, headers=headers)

    async def post(
        self,
        path: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return await self._http.post(self.url(path), json_body=json_body, headers=headers)

    async def close(self) -> None:
        await self._http.close()
