"""Query models decoded from the host's query JSON.

The host sends each query as ``{"RefID", "QueryType", "MaxDataPoints",
"Interval", "TimeRange", "JSON"}`` where ``JSON`` holds the PI Web API specific
payload built by the query editor. Field aliases follow the host spelling; the
snake_case names are accepted as well.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from ..config import DEFAULT_SUMMARY_DURATION
from ..core.enums import QueryMode

_NANOS_PER_MILLI = 1_000_000
_RFC3339_UTC = "%Y-%m-%dT%H:%M:%SZ"


class _HostModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """The editor sends ``null`` for untouched options; fall back to defaults."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Toggle(_HostModel):
    enable: bool = False


class RecordedValues(_HostModel):
    enable: bool = False
    max_number: int = Field(default=0, alias="maxNumber")


class SummaryTypeValue(_HostModel):
    value: str = ""
    expandable: bool = False


class SummaryType(_HostModel):
    label: str = ""
    value: SummaryTypeValue = Field(default_factory=SummaryTypeValue)


class QuerySummary(_HostModel):
    basis: str = ""
    interval: str = ""
    nodata: str = ""
    types: list[SummaryType] = Field(default_factory=list)


class PIWebAPIQuery(_HostModel):
    """PI Web API specific part of a query."""

    target: str = ""
    expression: str = ""
    element_path: str = Field(default="", alias="elementPath")
    is_pi_point: bool = Field(default=False, alias="isPiPoint")
    interval_ms: int = Field(default=0, alias="intervalMs")
    max_data_points: int = Field(default=0, alias="maxDataPoints")
    ref_id: str = Field(default="", alias="refId")
    hide: bool = False
    interpolate: Toggle = Field(default_factory=Toggle)
    recorded_values: RecordedValues = Field(default_factory=RecordedValues, alias="recordedValues")
    regex: Toggle = Field(default_factory=Toggle)
    digital_states: Toggle = Field(default_factory=Toggle, alias="digitalStates")
    enable_streaming: Toggle = Field(
        default_factory=Toggle,
        validation_alias=AliasChoices("EnableStreaming", "enableStreaming", "enable_streaming"),
    )
    summary: QuerySummary = Field(default_factory=QuerySummary)
    # Editor state only; never affects the request
    attributes: list[Any] = Field(default_factory=list)
    segments: list[Any] = Field(default_factory=list)

    def is_summary(self) -> bool:
        return self.summary.basis != "" and len(self.summary.types) > 0

    def is_interpolated(self) -> bool:
        return self.interpolate.enable

    def is_recorded_values(self) -> bool:
        return self.recorded_values.enable

    def is_regex(self) -> bool:
        return self.regex.enable

    def is_expression(self) -> bool:
        return self.expression != ""

    def get_summary_duration(self) -> str:
        return self.summary.interval or DEFAULT_SUMMARY_DURATION

    def get_summary_uri_component(self) -> str:
        """Summary type, basis and duration parameters.

        Not emitted for expression queries, even when a summary is configured.
        """
        if self.is_expression():
            return ""
        uri = "".join(f"&summaryType={t.value.value}" for t in self.summary.types)
        uri += f"&summaryBasis={self.summary.basis}"
        uri += f"&summaryDuration={self.get_summary_duration()}"
        return uri

    def get_base_path(self) -> str:
        """Part of the target before the first ``;``."""
        base, sep, _ = self.target.partition(";")
        return base if sep else ""

    def get_targets(self) -> list[str]:
        """Leaves after the first ``;``, empty leaves removed."""
        _, sep, rest = self.target.partition(";")
        if not sep:
            return [self.target] if self.target else []
        return [t for t in rest.split(";") if t]

    def get_full_target_paths(self) -> list[tuple[str, str]]:
        """Expand the target into ``(label, full path)`` pairs.

        Examples:
            >>> PIWebAPIQuery(target="Base;Seg1;Seg2").get_full_target_paths()
            [('Seg1', 'Base|Seg1'), ('Seg2', 'Base|Seg2')]
        """
        if ";" not in self.target:
            return [(_last_component(t), t) for t in self.get_targets()]
        separator = "\\" if self.is_pi_point else "|"
        base = self.get_base_path()
        return [(t, f"{base}{separator}{t}") for t in self.get_targets()]


def _last_component(path: str) -> str:
    return path.replace("|", "\\").rstrip("\\").rsplit("\\", 1)[-1]


class TimeRange(_HostModel):
    start: datetime = Field(..., alias="From")
    end: datetime = Field(..., alias="To")


class Query(_HostModel):
    """One query as received from the host."""

    ref_id: str = Field(default="", alias="RefID")
    query_type: str = Field(default="", alias="QueryType")
    max_data_points: int = Field(default=0, alias="MaxDataPoints")
    # Polling interval in nanoseconds
    interval: int = Field(default=0, alias="Interval")
    time_range: TimeRange = Field(..., alias="TimeRange")
    pi: PIWebAPIQuery = Field(default_factory=PIWebAPIQuery, alias="JSON")

    @property
    def interval_ms(self) -> int:
        return self.interval // _NANOS_PER_MILLI

    def get_interval_time(self) -> int:
        """Sample interval in milliseconds; the query override wins when non-zero."""
        return self.pi.interval_ms or self.interval_ms

    def get_max_data_points(self) -> int:
        return self.pi.max_data_points or self.max_data_points

    def get_time_range_uri_component(self) -> str:
        return (
            f"?startTime={_format_rfc3339(self.time_range.start)}"
            f"&endTime={_format_rfc3339(self.time_range.end)}"
        )

    def streaming_enabled(self) -> bool:
        return self.pi.enable_streaming.enable

    def is_streamable(self) -> bool:
        return not self.pi.is_expression() and self.streaming_enabled()

    @property
    def mode(self) -> QueryMode:
        if self.pi.is_expression():
            if self.pi.is_summary():
                return QueryMode.EXPRESSION_SUMMARY
            return QueryMode.EXPRESSION_INTERVALS
        if self.pi.is_summary():
            return QueryMode.SUMMARY
        if self.pi.is_interpolated():
            return QueryMode.INTERPOLATED
        if self.pi.is_recorded_values():
            return QueryMode.RECORDED
        return QueryMode.PLOT


def _format_rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_RFC3339_UTC)
