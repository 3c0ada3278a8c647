"""Core components."""

from .enums import LookupKind, QueryMode, ResponseKind
from .exceptions import (
    BatchTransportError,
    PIWebAPIError,
    QueryDecodeError,
    RemoteAPIError,
    ResolutionError,
    ResponseShapeError,
    TransportError,
)
from .settings import DataSourceSettings

__all__ = [
    "DataSourceSettings",
    "LookupKind",
    "QueryMode",
    "ResponseKind",
    "PIWebAPIError",
    "TransportError",
    "ResolutionError",
    "BatchTransportError",
    "ResponseShapeError",
    "RemoteAPIError",
    "QueryDecodeError",
]
