"""Custom exception hierarchy."""

from __future__ import annotations


class PIWebAPIError(Exception):
    """Base exception for all library errors."""

    pass


class TransportError(PIWebAPIError):
    """HTTP request to PI Web API failed or returned a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResolutionError(PIWebAPIError):
    """Hierarchical path could not be mapped to a WebID.

    Aborts only the affected path segment; sibling segments continue.
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class BatchTransportError(PIWebAPIError):
    """The batch call for a RefID failed to send or its envelope failed to decode."""

    def __init__(self, message: str, ref_id: str | None = None) -> None:
        super().__init__(message)
        self.ref_id = ref_id


class ResponseShapeError(PIWebAPIError):
    """A sub-response's content did not match any known shape."""

    pass


class RemoteAPIError(PIWebAPIError):
    """PI Web API reported a non-200 status with an error payload."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or []


class QueryDecodeError(PIWebAPIError):
    """Host query JSON could not be decoded into a Query."""

    def __init__(self, message: str, ref_id: str | None = None) -> None:
        super().__init__(message)
        self.ref_id = ref_id
