"""Streaming channel registry entry."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StreamChannelConstruct:
    """State needed by the push subsystem to re-poll a single WebID."""

    web_id: str
    interval_ns: int
