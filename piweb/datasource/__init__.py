"""PI Web API Datasource - batched time-series queries against PI Web API."""

from .api import build_query_uri, build_resource_url
from .core import (
    BatchTransportError,
    DataSourceSettings,
    LookupKind,
    PIWebAPIError,
    QueryDecodeError,
    QueryMode,
    RemoteAPIError,
    ResolutionError,
    ResponseKind,
    ResponseShapeError,
    TransportError,
)
from .datasource import PIWebAPIDatasource
from .models import (
    BatchResponse,
    BatchSubRequest,
    ContentItem,
    DataPoint,
    DataResponse,
    ErrorContent,
    FlatItemsContent,
    Frame,
    FrameMeta,
    NestedItemsContent,
    Notice,
    PIWebAPIQuery,
    ProcessedQuery,
    Query,
    QueryDataResponse,
    StreamChannelConstruct,
)
from .runtime import (
    BatchExecutor,
    EvictionTimer,
    FrameAssembler,
    StreamChannelRegistry,
    WebIDCache,
    WebIDResolver,
    classify_sub_response,
)

__version__ = "0.1.0"

__all__ = [
    # Datasource
    "PIWebAPIDatasource",
    "DataSourceSettings",
    # Request construction
    "build_query_uri",
    "build_resource_url",
    # Runtime
    "BatchExecutor",
    "EvictionTimer",
    "FrameAssembler",
    "StreamChannelRegistry",
    "WebIDCache",
    "WebIDResolver",
    "classify_sub_response",
    # Models
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
    "PIWebAPIQuery",
    "ProcessedQuery",
    "Query",
    "QueryDataResponse",
    "StreamChannelConstruct",
    # Enums
    "LookupKind",
    "QueryMode",
    "ResponseKind",
    # Exceptions
    "PIWebAPIError",
    "TransportError",
    "ResolutionError",
    "BatchTransportError",
    "ResponseShapeError",
    "RemoteAPIError",
    "QueryDecodeError",
]
