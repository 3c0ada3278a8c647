"""Builders and fakes shared by the unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

from piweb.datasource.core import TransportError
from piweb.datasource.models import Query

BASE_URL = "https://pi.example.com/piwebapi"
DATASOURCE_UID = "ds-uid"


def make_query(ref_id: str = "A", **pi: Any) -> Query:
    """Build a Query the way the host sends it (60s interval, 500 points)."""
    return Query.model_validate(
        {
            "RefID": ref_id,
            "MaxDataPoints": 500,
            "Interval": 60_000_000_000,
            "TimeRange": {"From": "2024-01-01T00:00:00Z", "To": "2024-01-01T06:00:00Z"},
            "JSON": pi,
        }
    )


def raw_query(ref_id: str = "A", **pi: Any) -> dict[str, Any]:
    return {
        "RefID": ref_id,
        "MaxDataPoints": 500,
        "Interval": 60_000_000_000,
        "TimeRange": {"From": "2024-01-01T00:00:00Z", "To": "2024-01-01T06:00:00Z"},
        "JSON": pi,
    }


def nested_content(web_id: str, units: str, values: list[Any]) -> dict[str, Any]:
    """Stream set style content: values under Items[0].Items."""
    return {
        "Items": [
            {
                "WebId": web_id,
                "Name": web_id,
                "UnitsAbbreviation": units,
                "Items": [
                    {"Timestamp": f"2024-01-01T00:0{i}:00Z", "Value": v, "Good": True}
                    for i, v in enumerate(values)
                ],
            }
        ]
    }


def flat_content(units: str, values: list[Any]) -> dict[str, Any]:
    """Calculation style content: values directly under Items."""
    return {
        "UnitsAbbreviation": units,
        "Items": [
            {"Timestamp": f"2024-01-01T00:0{i}:00Z", "Value": v, "Good": True}
            for i, v in enumerate(values)
        ],
    }


class FakeTransport:
    """In-memory stand-in for RESTTransport.

    ``web_ids`` maps hierarchical paths to WebIDs; unknown paths answer 404.
    ``batch_handler`` receives each batch body and returns the raw response.
    """

    def __init__(
        self,
        web_ids: dict[str, str] | None = None,
        batch_handler: Callable[[dict[str, Any]], Any] | None = None,
    ) -> None:
        self.base_url = BASE_URL
        self.web_ids = web_ids or {}
        self.batch_handler = batch_handler or echo_batch
        self.get = AsyncMock(side_effect=self._get)
        self.post = AsyncMock(side_effect=self._post)
        self.close = AsyncMock()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        target = (params or {}).get("path", "")
        if target not in self.web_ids:
            raise TransportError(f"GET {path} returned HTTP 404", status_code=404)
        return {"WebId": self.web_ids[target], "Name": target}

    async def _post(self, path: str, json_body: Any = None) -> Any:
        return self.batch_handler(json_body)


def webid_of(resource: str) -> str:
    return resource.rsplit("&webid=", 1)[-1]


def echo_batch(body: dict[str, Any]) -> dict[str, Any]:
    """Answer every sub-request with one psi value of 12.3 for its WebID."""
    return {
        key: {
            "Status": 200,
            "Headers": {},
            "Content": nested_content(webid_of(request["Resource"]), "psi", [12.3]),
        }
        for key, request in body.items()
    }


def summary_content(web_id: str, units: str, values: dict[str, Any]) -> dict[str, Any]:
    """Stream set summary content: each value wrapped as {"Type", "Value"}."""
    return {
        "Items": [
            {
                "WebId": web_id,
                "Name": web_id,
                "UnitsAbbreviation": units,
                "Items": [
                    {
                        "Type": summary_type,
                        "Value": {"Timestamp": "2024-01-01T00:00:00Z", "Value": v, "Good": True},
                    }
                    for summary_type, v in values.items()
                ],
            }
        ]
    }
