"""Batch sub-response classification.

PI Web API returns three content shapes from the batch endpoint without any
discriminant field. The shape is sniffed from the envelope status and the
first element of ``Content.Items``:

    Status != 200                          -> ErrorContent
    Content.Items[0] has no WebId          -> FlatItemsContent
    Content.Items[0] has a WebId           -> NestedItemsContent
    anything else malformed                -> ErrorContent

Summary endpoints wrap every value as ``{"Type", "Value": {...}}``; those
entries are flattened into plain value items tagged with their summary type.

Classification never raises for a malformed sub-response; shape and remote
errors are downgraded to ErrorContent so one bad sub-response still yields a
frame.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ..config import UNPROCESSABLE_RESPONSE_MESSAGE
from ..core.exceptions import RemoteAPIError, ResponseShapeError
from ..models.batch import (
    BatchContent,
    BatchResponse,
    ContentItem,
    ErrorContent,
    FlatItemsContent,
    NestedItemsContent,
)

HTTP_OK = 200


def classify_sub_response(raw: Any) -> BatchResponse:
    """Classify one raw sub-response of a batch call.

    Args:
        raw: Decoded JSON of one batch response entry
            (``{"Status", "Headers", "Content"}``)

    Returns:
        BatchResponse with the classified content variant
    """
    envelope = raw if isinstance(raw, dict) else {}
    status = _as_status(envelope.get("Status"))
    headers = _as_headers(envelope.get("Headers"))

    try:
        content = classify_content(status, envelope.get("Content"))
    except RemoteAPIError as e:
        content = ErrorContent(errors=e.errors or [str(e)])
    except ResponseShapeError as e:
        content = ErrorContent(errors=[str(e)])
    return BatchResponse(status=status, headers=headers, content=content)


def classify_content(status: int, content: Any) -> BatchContent:
    """Select the content variant for a sub-response body.

    Raises:
        RemoteAPIError: Status is not 200
        ResponseShapeError: Content does not match a known shape
    """
    if status != HTTP_OK:
        errors = _extract_errors(content)
        raise RemoteAPIError(
            errors[0] if errors else f"PI Web API returned status {status}",
            status_code=status,
            errors=errors,
        )

    if not isinstance(content, dict):
        raise ResponseShapeError(UNPROCESSABLE_RESPONSE_MESSAGE)

    items = content.get("Items")
    if not isinstance(items, list):
        raise ResponseShapeError(UNPROCESSABLE_RESPONSE_MESSAGE)
    if not items:
        return FlatItemsContent(items=[], units=_as_str(content.get("UnitsAbbreviation")))

    first = items[0]
    if not isinstance(first, dict):
        raise ResponseShapeError(UNPROCESSABLE_RESPONSE_MESSAGE)

    if not isinstance(first.get("WebId"), str):
        return FlatItemsContent(
            items=_parse_items(items),
            units=_as_str(content.get("UnitsAbbreviation")),
        )

    nested = first.get("Items")
    if nested is None:
        nested = []
    if not isinstance(nested, list):
        raise ResponseShapeError(UNPROCESSABLE_RESPONSE_MESSAGE)
    return NestedItemsContent(
        items=_parse_items(nested),
        units=_as_str(first.get("UnitsAbbreviation")),
        web_id=first["WebId"],
        name=_as_str(first.get("Name")),
        path=_as_str(first.get("Path")),
    )


def _parse_items(raw_items: list[Any]) -> list[ContentItem]:
    try:
        return [ContentItem.model_validate(_unwrap_summary(item)) for item in raw_items]
    except ValidationError as e:
        raise ResponseShapeError(UNPROCESSABLE_RESPONSE_MESSAGE) from e


def _unwrap_summary(item: Any) -> Any:
    """Flatten a summary entry ``{"Type": t, "Value": {...}}`` into a value item."""
    if not isinstance(item, dict) or "Timestamp" in item:
        return item
    value = item.get("Value")
    if "Type" not in item or not isinstance(value, dict):
        return item
    return {**value, "SummaryType": _as_str(item["Type"])}


def _extract_errors(content: Any) -> list[str]:
    if not isinstance(content, dict):
        return []
    errors = content.get("Errors")
    if isinstance(errors, list):
        return [str(e) for e in errors]
    message = content.get("Message")
    if isinstance(message, str) and message:
        return [message]
    return []


def _as_status(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    return 0


def _as_headers(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
