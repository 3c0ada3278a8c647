"""Streaming channel registry.

Every streamable frame gets a freshly minted channel id; the registry keeps
the WebID and interval needed to re-poll it. Channels are never deduplicated
or updated in place and live until the datasource instance is disposed.
"""

from __future__ import annotations

import asyncio
import uuid

from ..config import CHANNEL_SCOPE
from ..models.channel import StreamChannelConstruct


def channel_address(uid: str, channel_id: str) -> str:
    """Host channel address ``ds/<datasource uid>/<channel id>``."""
    return f"{CHANNEL_SCOPE}/{uid}/{channel_id}"


class StreamChannelRegistry:
    """Lock-guarded channel id -> StreamChannelConstruct table."""

    def __init__(self) -> None:
        self._channels: dict[str, StreamChannelConstruct] = {}
        self._lock = asyncio.Lock()

    async def register(self, uid: str, web_id: str, interval_ns: int) -> str:
        """Mint a channel for a WebID and return its address."""
        channel_id = str(uuid.uuid4())
        construct = StreamChannelConstruct(web_id=web_id, interval_ns=interval_ns)
        async with self._lock:
            self._channels[channel_id] = construct
        return channel_address(uid, channel_id)

    async def get(self, channel_id: str) -> StreamChannelConstruct | None:
        """Look up a channel by id or by full ``ds/<uid>/<id>`` address."""
        channel_id = channel_id.rsplit("/", 1)[-1]
        async with self._lock:
            return self._channels.get(channel_id)

    async def clear(self) -> None:
        async with self._lock:
            self._channels.clear()

    def __len__(self) -> int:
        return len(self._channels)
