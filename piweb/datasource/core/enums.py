"""Core enumerations."""

from __future__ import annotations

from enum import Enum


class QueryMode(str, Enum):
    """Data retrieval mode selected for a query.

    The mode is derived from the query flags, never sent explicitly by the host.
    Precedence for stream queries is summary > interpolated > recorded > plot.
    """

    EXPRESSION_SUMMARY = "expression_summary"
    EXPRESSION_INTERVALS = "expression_intervals"
    SUMMARY = "summary"
    INTERPOLATED = "interpolated"
    RECORDED = "recorded"
    PLOT = "plot"

    @property
    def is_expression(self) -> bool:
        return self in (QueryMode.EXPRESSION_SUMMARY, QueryMode.EXPRESSION_INTERVALS)


class ResponseKind(str, Enum):
    """Shape of a batch sub-response content payload."""

    ERROR = "error"
    FLAT_ITEMS = "flat_items"
    NESTED_ITEMS = "nested_items"


class LookupKind(str, Enum):
    """PI Web API collection used for path to WebID lookups."""

    POINTS = "points"
    ATTRIBUTES = "attributes"
    ELEMENTS = "elements"

    @classmethod
    def for_target(cls, is_pi_point: bool) -> LookupKind:
        return cls.POINTS if is_pi_point else cls.ATTRIBUTES

    @property
    def path(self) -> str:
        return f"/{self.value}"
