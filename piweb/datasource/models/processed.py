"""Processed query: one resolved path segment of a host query."""

from __future__ import annotations

from dataclasses import dataclass

from .batch import BatchResponse, BatchSubRequest


@dataclass
class ProcessedQuery:
    """Per-segment request state for one ``query_data`` call.

    Created during query processing, filled with the classified response after
    the batch call, and discarded once frames are assembled. ``web_id`` and
    ``batch_request`` are ``None`` when resolution failed; ``response`` stays
    ``None`` until the batch for the owning RefID succeeds.
    """

    label: str
    full_target_path: str
    uid: str = ""
    web_id: str | None = None
    interval_ns: int = 0
    is_pi_point: bool = False
    point_type: str = ""
    digital_states: bool = False
    streamable: bool = False
    batch_request: BatchSubRequest | None = None
    response: BatchResponse | None = None
    error: str | None = None

    @property
    def resolved(self) -> bool:
        return self.batch_request is not None

    @property
    def executed_query_string(self) -> str:
        return self.batch_request.resource if self.batch_request else ""
