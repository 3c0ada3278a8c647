"""Data models.

Architecture:
    Host-facing models (Query and the frame/response types) are Pydantic v2
    models so the host JSON validates on the way in and serializes on the way
    out. Batch content variants are frozen dataclasses produced by the response
    classifier; ProcessedQuery is a mutable per-call working record.

Model Categories:
    - Inbound: Query, PIWebAPIQuery, QuerySummary, SummaryType, TimeRange
    - Wire: BatchSubRequest, BatchResponse, ContentItem, content variants
    - Working state: ProcessedQuery, StreamChannelConstruct
    - Outbound: DataPoint, Frame, FrameMeta, Notice, DataResponse, QueryDataResponse
"""

from .batch import (
    BatchContent,
    BatchResponse,
    BatchSubRequest,
    ContentItem,
    ErrorContent,
    FlatItemsContent,
    NestedItemsContent,
)
from .channel import StreamChannelConstruct
from .frame import (
    DataPoint,
    DataResponse,
    Frame,
    FrameMeta,
    Notice,
    NoticeSeverity,
    QueryDataResponse,
)
from .processed import ProcessedQuery
from .query import PIWebAPIQuery, Query, QuerySummary, SummaryType, TimeRange

__all__ = [
    "BatchContent",
    "BatchResponse",
    "BatchSubRequest",
    "ContentItem",
    "DataPoint",
    "DataResponse",
    "ErrorContent",
    "FlatItemsContent",
    "Frame",
    "FrameMeta",
    "NestedItemsContent",
    "Notice",
    "NoticeSeverity",
    "PIWebAPIQuery",
    "ProcessedQuery",
    "Query",
    "QueryDataResponse",
    "QuerySummary",
    "StreamChannelConstruct",
    "SummaryType",
    "TimeRange",
]
