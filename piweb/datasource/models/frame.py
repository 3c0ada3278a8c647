"""Output frames returned to the host."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .batch import ContentItem


class NoticeSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """Message shown alongside a frame."""

    severity: NoticeSeverity = NoticeSeverity.ERROR
    text: str

    model_config = ConfigDict(frozen=True)


class DataPoint(BaseModel):
    """Normalized timestamped value with PI quality flags."""

    timestamp: str
    value: Any = None
    units: str = ""
    good: bool = False
    questionable: bool = False
    substituted: bool = False
    annotated: bool = False
    summary_type: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_item(
        cls,
        item: ContentItem,
        default_units: str = "",
        digital_states: bool = False,
    ) -> DataPoint:
        return cls(
            timestamp=item.timestamp,
            value=render_value(item.value, digital_states),
            units=item.units_abbreviation or default_units,
            good=item.good,
            questionable=item.questionable,
            substituted=item.substituted,
            annotated=item.annotated,
            summary_type=item.summary_type,
        )


def render_value(value: Any, digital_states: bool = False) -> Any:
    """Collapse a digital state ``{"Name", "Value", ...}`` to its name or its code.

    Examples:
        >>> render_value({"Name": "Active", "Value": 1, "IsSystem": False}, True)
        'Active'
        >>> render_value({"Name": "Active", "Value": 1, "IsSystem": False})
        1
        >>> render_value(12.3, True)
        12.3
    """
    if not isinstance(value, dict) or "Name" not in value:
        return value
    if digital_states:
        return value["Name"]
    return value.get("Value")


class FrameMeta(BaseModel):
    executed_query_string: str = ""
    channel: str | None = None
    units: str = ""
    web_id: str | None = None
    # Point or attribute type reported at resolution (e.g. Float32, Digital)
    point_type: str = ""
    path: str = ""

    model_config = ConfigDict(frozen=True)


class Frame(BaseModel):
    """One series of values for a processed query."""

    name: str
    ref_id: str
    points: list[DataPoint] = Field(default_factory=list)
    meta: FrameMeta = Field(default_factory=FrameMeta)
    notices: list[Notice] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def timestamps(self) -> list[str]:
        return [p.timestamp for p in self.points]

    @property
    def values(self) -> list[Any]:
        return [p.value for p in self.points]

    @property
    def has_errors(self) -> bool:
        return any(n.severity is NoticeSeverity.ERROR for n in self.notices)

    def __len__(self) -> int:
        return len(self.points)


class DataResponse(BaseModel):
    """Frames produced for one RefID."""

    frames: list[Frame] = Field(default_factory=list)
    error: str | None = None


class QueryDataResponse(BaseModel):
    """Result of a ``query_data`` call, keyed by RefID."""

    responses: dict[str, DataResponse] = Field(default_factory=dict)

    def __getitem__(self, ref_id: str) -> DataResponse:
        return self.responses[ref_id]

    def __contains__(self, ref_id: object) -> bool:
        return ref_id in self.responses
