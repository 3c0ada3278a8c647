"""Batch request/response models.

PI Web API batch responses carry no discriminant for the content payload, so
the content is one of three closed variants produced by
``runtime.classifier.classify_sub_response``:

- ErrorContent: non-200 status or an unrecognized payload
- FlatItemsContent: ``Content.Items`` is the list of timestamped values
- NestedItemsContent: ``Content.Items[0].Items`` is the list of values
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import BATCH_SUB_REQUEST_METHOD
from ..core.enums import ResponseKind


class BatchSubRequest(BaseModel):
    """One entry of a batch request body."""

    method: str = Field(default=BATCH_SUB_REQUEST_METHOD, alias="Method")
    resource: str = Field(..., alias="Resource")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class ContentItem(BaseModel):
    """A single timestamped value returned by PI Web API.

    Summary endpoints wrap each value as ``{"Type": ..., "Value": {...}}``; the
    classifier unwraps those and keeps the type in ``summary_type``.
    """

    timestamp: str = Field(..., alias="Timestamp")
    # Numeric, string or structured (digital states); passed through as-is
    value: Any = Field(default=None, alias="Value")
    units_abbreviation: str = Field(default="", alias="UnitsAbbreviation")
    good: bool = Field(default=False, alias="Good")
    questionable: bool = Field(default=False, alias="Questionable")
    substituted: bool = Field(default=False, alias="Substituted")
    annotated: bool = Field(default=False, alias="Annotated")
    summary_type: str = Field(default="", alias="SummaryType")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """PI Web API sends ``null`` for unset flags and units; use the defaults."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


@dataclass(frozen=True)
class ErrorContent:
    errors: list[str] = field(default_factory=list)

    kind: ClassVar[ResponseKind] = ResponseKind.ERROR

    @property
    def units(self) -> str:
        return ""

    @property
    def items(self) -> list[ContentItem]:
        return []


@dataclass(frozen=True)
class FlatItemsContent:
    items: list[ContentItem] = field(default_factory=list)
    units: str = ""

    kind: ClassVar[ResponseKind] = ResponseKind.FLAT_ITEMS

    @property
    def errors(self) -> list[str]:
        return []


@dataclass(frozen=True)
class NestedItemsContent:
    items: list[ContentItem] = field(default_factory=list)
    units: str = ""
    web_id: str = ""
    name: str = ""
    path: str = ""

    kind: ClassVar[ResponseKind] = ResponseKind.NESTED_ITEMS

    @property
    def errors(self) -> list[str]:
        return []


BatchContent = ErrorContent | FlatItemsContent | NestedItemsContent


@dataclass(frozen=True)
class BatchResponse:
    """One classified entry of a batch response."""

    status: int
    content: BatchContent
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.content.kind is not ResponseKind.ERROR
