"""HTTP client helper."""

from __future__ import annotations

from typing import Any

import aiohttp

from ...core.exceptions import TransportError


class HTTPClient:
    """Async HTTP client wrapper.

    Every request is bounded by the client timeout. Connection failures,
    timeouts, error statuses and undecodable bodies surface as
    ``TransportError``; cancellation propagates unchanged.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        auth: aiohttp.BasicAuth | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._auth = auth
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                auth=self._auth,
                headers={"Accept": "application/json"},
            )
        return self._session

    def _url(self, url: str) -> str:
        # If base_url is set and url is relative, combine them
        if self.base_url and not url.startswith("http"):
            return f"{self.base_url}{url}"
        return url

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET request returning the decoded JSON body."""
        return await self._request("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON body and return the decoded JSON body."""
        return await self._request("POST", url, json=json_body, headers=headers)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        url = self._url(url)
        try:
            async with self.session.request(method, url, **kwargs) as response:
                if response.status >= 400:
                    raise TransportError(
                        f"{method} {url} returned HTTP {response.status}",
                        status_code=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise TransportError(
                        f"{method} {url} returned a body that is not valid JSON",
                        status_code=response.status,
                    ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        except TimeoutError as e:
            raise TransportError(f"{method} {url} timed out") from e

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
