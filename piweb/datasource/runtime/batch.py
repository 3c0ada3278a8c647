"""Batch execution: one PI Web API batch call per RefID.

Each RefID's ordered sub-requests are keyed by their position ("0", "1", ...)
and sent in a single ``POST /batch``. The response object is keyed the same
way; entries are placed back by integer index, never by arrival order. A
failed send or an undecodable envelope leaves that RefID's responses
unresolved without affecting other RefIDs. There are no retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Protocol

from ..config import BATCH_PATH, DEFAULT_MAX_CONCURRENCY
from ..core.exceptions import BatchTransportError, TransportError
from ..models.batch import BatchResponse, BatchSubRequest
from .classifier import classify_sub_response


class PostTransport(Protocol):
    async def post(self, path: str, json_body: Any = None) -> Any: ...


@dataclass
class BatchOutcome:
    """Result of the batch call for one RefID.

    Attributes:
        ref_id: RefID the batch belongs to
        responses: Classified responses by submission index; ``None`` where
            nothing came back for that index or the whole batch failed
        error: Set when the batch call itself failed
        latency_ms: Round trip latency of the batch call
    """

    ref_id: str
    responses: list[BatchResponse | None] = field(default_factory=list)
    error: BatchTransportError | None = None
    latency_ms: float | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_batch_body(requests: Sequence[BatchSubRequest]) -> dict[str, dict[str, str]]:
    """Key sub-requests by their submission index."""
    return {str(i): request.to_wire() for i, request in enumerate(requests)}


def demultiplex(raw: Any, count: int, ref_id: str | None = None) -> list[BatchResponse | None]:
    """Map a raw batch response back onto submission order.

    Args:
        raw: Decoded batch response object
        count: Number of sub-requests that were sent
        ref_id: RefID for error context

    Returns:
        List of length ``count`` with classified responses by index

    Raises:
        BatchTransportError: If the envelope is not an index-keyed object
    """
    if not isinstance(raw, dict):
        raise BatchTransportError("Batch response is not a JSON object", ref_id=ref_id)

    responses: list[BatchResponse | None] = [None] * count
    for key, value in raw.items():
        try:
            index = int(key)
        except (TypeError, ValueError) as e:
            raise BatchTransportError(
                f"Batch response has non-index key {key!r}", ref_id=ref_id
            ) from e
        if 0 <= index < count:
            responses[index] = classify_sub_response(value)
    return responses


class BatchExecutor:
    """Executes per-RefID batch calls with bounded concurrency."""

    def __init__(
        self,
        transport: PostTransport,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._transport = transport
        self._max_concurrency = max_concurrency

    async def execute(
        self, requests_by_ref_id: Mapping[str, Sequence[BatchSubRequest]]
    ) -> dict[str, BatchOutcome]:
        """Execute one batch call per RefID.

        Args:
            requests_by_ref_id: Ordered sub-requests per RefID

        Returns:
            BatchOutcome per RefID, same keys as the input
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(ref_id: str, requests: Sequence[BatchSubRequest]) -> BatchOutcome:
            async with semaphore:
                return await self.execute_one(ref_id, requests)

        ref_ids = list(requests_by_ref_id)
        outcomes = await asyncio.gather(
            *(_bounded(ref_id, requests_by_ref_id[ref_id]) for ref_id in ref_ids)
        )
        return dict(zip(ref_ids, outcomes, strict=True))

    async def execute_one(self, ref_id: str, requests: Sequence[BatchSubRequest]) -> BatchOutcome:
        count = len(requests)
        if count == 0:
            return BatchOutcome(ref_id=ref_id)

        start = perf_counter()
        try:
            raw = await self._transport.post(BATCH_PATH, json_body=build_batch_body(requests))
            responses = demultiplex(raw, count, ref_id=ref_id)
        except TransportError as e:
            error = BatchTransportError(f"Batch request failed: {e}", ref_id=ref_id)
            return BatchOutcome(ref_id=ref_id, responses=[None] * count, error=error)
        except BatchTransportError as e:
            return BatchOutcome(ref_id=ref_id, responses=[None] * count, error=e)

        return BatchOutcome(
            ref_id=ref_id,
            responses=responses,
            latency_ms=(perf_counter() - start) * 1000.0,
        )
