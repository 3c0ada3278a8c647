"""Structured logging for the query pipeline.

The pipeline components return structured results and errors; the datasource
decides what to report and emits it through these helpers.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def log_query_decode_error(*, ref_id: str, error_message: str) -> None:
    """Log a host query that could not be decoded.

    Args:
        ref_id: RefID of the query
        error_message: Validation error text
    """
    logger.error(
        "query_decode_error",
        extra={"ref_id": ref_id, "error_message": error_message},
    )


def log_resolution_error(
    *,
    ref_id: str,
    path: str,
    status_code: int | None,
    error_message: str,
) -> None:
    """Log a path segment whose WebID could not be resolved.

    Args:
        ref_id: RefID owning the segment
        path: Full hierarchical path
        status_code: HTTP status if the server answered
        error_message: Error message
    """
    logger.error(
        "webid_resolution_error",
        extra={
            "ref_id": ref_id,
            "path": path,
            "status_code": status_code,
            "error_message": error_message,
        },
    )


def log_batch_completed(
    *,
    ref_id: str,
    sub_requests: int,
    responses: int,
    latency_ms: float | None = None,
) -> None:
    """Log a completed batch call.

    Args:
        ref_id: RefID the batch belongs to
        sub_requests: Number of sub-requests sent
        responses: Number of sub-responses matched back by index
        latency_ms: Latency in milliseconds (optional)
    """
    logger.info(
        "batch_completed",
        extra={
            "ref_id": ref_id,
            "sub_requests": sub_requests,
            "responses": responses,
            "latency_ms": latency_ms,
        },
    )


def log_batch_error(*, ref_id: str, error_type: str, error_message: str) -> None:
    """Log a batch call that failed for a whole RefID.

    Args:
        ref_id: RefID the batch belongs to
        error_type: Type of error (e.g., "BatchTransportError")
        error_message: Error message
    """
    logger.error(
        "batch_error",
        extra={"ref_id": ref_id, "error_type": error_type, "error_message": error_message},
    )


def log_sub_response_error(*, ref_id: str, index: int, status: int, errors: list[str]) -> None:
    """Log a sub-response that was classified as an error."""
    logger.warning(
        "sub_response_error",
        extra={"ref_id": ref_id, "index": index, "status": status, "errors": errors},
    )


def log_channel_registered(*, channel: str, web_id: str, interval_ns: int) -> None:
    logger.debug(
        "stream_channel_registered",
        extra={"channel": channel, "web_id": web_id, "interval_ns": interval_ns},
    )


def log_cache_evicted(*, entries: int) -> None:
    logger.debug("webid_cache_evicted", extra={"entries": entries})
