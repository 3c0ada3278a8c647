"""PI Web API datasource: the query pipeline.

Architecture:
    ``query_data`` runs translate -> resolve -> batch -> classify -> assemble:

    1. Decode each host query into a Query
    2. Expand the target into path segments and resolve each to a WebID
       (cache first), building one batch sub-request per resolved segment
    3. Send one batch call per RefID and map responses back by index
    4. Classify each sub-response into a content variant
    5. Assemble one frame per segment, minting stream channels where enabled

Failure isolation:
    - A query that cannot be decoded yields an errored DataResponse
    - A ResolutionError affects only its segment (empty frame with a notice)
    - A BatchTransportError affects only its RefID
    - Error sub-responses become empty frames with notices
    ``query_data`` never raises for partial failures; cancellation propagates.

Lifecycle:
    The WebID cache eviction timer starts with the first query (or ``start``)
    and is stopped by ``dispose``, which also drops all stream channels and
    closes the HTTP session.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from .api.uri_builder import build_resource_url
from .core.exceptions import QueryDecodeError, ResolutionError
from .core.settings import DataSourceSettings
from .models.batch import BatchSubRequest
from .models.frame import DataResponse, QueryDataResponse
from .models.processed import ProcessedQuery
from .models.query import Query
from .runtime.batch import BatchExecutor
from .runtime.channels import StreamChannelRegistry
from .runtime.frames import FrameAssembler
from .runtime.rest.transport import RESTTransport
from .runtime.telemetry import (
    log_batch_completed,
    log_batch_error,
    log_channel_registered,
    log_query_decode_error,
    log_resolution_error,
    log_sub_response_error,
)
from .runtime.webid import EvictionTimer, WebIDCache, WebIDResolver


class PIWebAPIDatasource:
    """One datasource instance bound to a PI Web API server."""

    def __init__(
        self,
        settings: DataSourceSettings,
        *,
        transport: RESTTransport | None = None,
        cache: WebIDCache | None = None,
        channels: StreamChannelRegistry | None = None,
    ) -> None:
        """Initialize the datasource.

        Args:
            settings: Instance settings
            transport: REST transport (defaults to one built from settings)
            cache: WebID cache (defaults to one using the settings TTL)
            channels: Stream channel registry (defaults to a new registry)
        """
        self.settings = settings
        self._transport = transport or RESTTransport.from_settings(settings)
        self.cache = cache or WebIDCache(ttl=settings.webid_cache_ttl)
        self.resolver = WebIDResolver(self._transport, self.cache)
        self.eviction = EvictionTimer(self.cache, interval=settings.eviction_interval)
        self.channels = channels or StreamChannelRegistry()
        self._batch = BatchExecutor(self._transport, max_concurrency=settings.max_concurrency)
        self._assembler = FrameAssembler(self.channels)

    async def start(self) -> None:
        """Start background maintenance (cache eviction)."""
        self.eviction.start()

    async def dispose(self) -> None:
        """Stop background work and release all instance state."""
        await self.eviction.stop()
        await self.channels.clear()
        await self.cache.clear()
        await self._transport.close()

    async def query_data(
        self,
        queries: Iterable[Query | Mapping[str, Any]],
        *,
        datasource_uid: str | None = None,
    ) -> QueryDataResponse:
        """Run a set of host queries and return frames per RefID.

        Args:
            queries: Host queries, decoded or as raw JSON mappings
            datasource_uid: Datasource UID for channel addresses
                (defaults to ``settings.uid``)

        Returns:
            QueryDataResponse with an entry for every RefID
        """
        self.eviction.start()
        uid = datasource_uid if datasource_uid is not None else self.settings.uid

        decoded: list[Query] = []
        decode_errors: dict[str, str] = {}
        for raw in queries:
            try:
                decoded.append(self.decode_query(raw))
            except QueryDecodeError as e:
                log_query_decode_error(ref_id=e.ref_id or "", error_message=str(e))
                decode_errors[e.ref_id or ""] = str(e)

        semaphore = asyncio.Semaphore(self.settings.max_concurrency)
        expanded = await asyncio.gather(*(self.process_query(q, uid, semaphore) for q in decoded))
        processed: dict[str, list[ProcessedQuery]] = {
            query.ref_id: segments for query, segments in zip(decoded, expanded, strict=True)
        }

        await self.batch_request(processed)

        response = QueryDataResponse()
        for ref_id, segments in processed.items():
            data = await self._assembler.assemble(ref_id, segments)
            for frame, segment in zip(data.frames, segments, strict=True):
                if frame.meta.channel:
                    log_channel_registered(
                        channel=frame.meta.channel,
                        web_id=frame.meta.web_id or "",
                        interval_ns=segment.interval_ns,
                    )
            response.responses[ref_id] = data
        for ref_id, message in decode_errors.items():
            response.responses.setdefault(ref_id, DataResponse(error=message))
        return response

    @staticmethod
    def decode_query(raw: Query | Mapping[str, Any]) -> Query:
        """Decode a host query.

        Raises:
            QueryDecodeError: If the mapping does not validate as a Query
        """
        if isinstance(raw, Query):
            return raw
        if not isinstance(raw, Mapping):
            raise QueryDecodeError(f"Invalid query: expected an object, got {type(raw).__name__}")
        try:
            return Query.model_validate(dict(raw))
        except ValidationError as e:
            ref_id = raw.get("RefID") or raw.get("ref_id") or ""
            raise QueryDecodeError(f"Invalid query: {e}", ref_id=str(ref_id)) from e

    async def process_query(
        self,
        query: Query,
        uid: str,
        semaphore: asyncio.Semaphore | None = None,
    ) -> list[ProcessedQuery]:
        """Expand a query into resolved segments, in target order."""
        semaphore = semaphore or asyncio.Semaphore(self.settings.max_concurrency)

        async def _segment(label: str, path: str) -> ProcessedQuery:
            segment = ProcessedQuery(
                label=label,
                full_target_path=path,
                uid=uid,
                interval_ns=query.interval,
                is_pi_point=query.pi.is_pi_point,
                digital_states=query.pi.digital_states.enable,
                streamable=query.is_streamable(),
            )
            try:
                async with semaphore:
                    entry = await self.resolver.resolve(path, query.pi.is_pi_point)
            except ResolutionError as e:
                log_resolution_error(
                    ref_id=query.ref_id,
                    path=path,
                    status_code=e.status_code,
                    error_message=str(e),
                )
                segment.error = str(e)
                return segment

            segment.web_id = entry.web_id
            segment.point_type = entry.type
            segment.batch_request = BatchSubRequest(
                resource=build_resource_url(self.settings.url, query, entry.web_id)
            )
            return segment

        targets = query.pi.get_full_target_paths()
        return list(await asyncio.gather(*(_segment(label, path) for label, path in targets)))

    async def batch_request(self, processed: Mapping[str, list[ProcessedQuery]]) -> None:
        """Execute the batch calls and attach responses to resolved segments."""
        resolved = {
            ref_id: [s for s in segments if s.resolved] for ref_id, segments in processed.items()
        }
        outcomes = await self._batch.execute(
            {ref_id: [s.batch_request for s in segments] for ref_id, segments in resolved.items()}
        )

        for ref_id, outcome in outcomes.items():
            segments = resolved[ref_id]
            if outcome.error is not None:
                log_batch_error(
                    ref_id=ref_id,
                    error_type=type(outcome.error).__name__,
                    error_message=str(outcome.error),
                )
                for segment in segments:
                    segment.error = str(outcome.error)
                continue

            if segments:
                log_batch_completed(
                    ref_id=ref_id,
                    sub_requests=len(segments),
                    responses=sum(r is not None for r in outcome.responses),
                    latency_ms=outcome.latency_ms,
                )
            for index, (segment, sub_response) in enumerate(
                zip(segments, outcome.responses, strict=True)
            ):
                segment.response = sub_response
                if sub_response is not None and not sub_response.ok:
                    log_sub_response_error(
                        ref_id=ref_id,
                        index=index,
                        status=sub_response.status,
                        errors=sub_response.content.errors,
                    )

    async def __aenter__(self) -> PIWebAPIDatasource:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.dispose()
