"""Query URI construction for PI Web API data endpoints.

Maps one Query to the path plus query string of the PI Web API endpoint that
serves it. The builder is pure: no I/O, no logging.

Decision tree:
    Expression queries use the calculation endpoints:
        /calculation/summary?...[&sampleType=Interval&sampleInterval=<ms>ms]&expression=...
        /calculation/intervals?...&sampleInterval=<ms>ms&expression=...
    All other queries use the stream set endpoints, first match wins:
        summary       /streamsets/summary?...&intervals=<count><summary params>
        interpolated  /streamsets/interpolated?...&interval=<ms>
        recorded      /streamsets/recorded?...&maxCount=<count>
        plot          /streamsets/plot?...&intervals=<count>

Note:
    Summary type/basis/duration parameters are only emitted for non-expression
    queries, so an expression with a summary configured gets the summary
    endpoint and time range but no summary parameters.
"""

from __future__ import annotations

from urllib.parse import quote_plus

from ..config import CALCULATION_PATH, EXPRESSION_SAMPLE_TYPE, STREAMSETS_PATH
from ..core.enums import QueryMode
from ..models.query import Query


def build_query_uri(query: Query) -> str:
    """Build the endpoint path and query string for a query.

    Args:
        query: Decoded host query

    Returns:
        Path plus query string, relative to the PI Web API base URL
    """
    mode = query.mode
    time_range = query.get_time_range_uri_component()

    if mode.is_expression:
        uri = CALCULATION_PATH
        if mode is QueryMode.EXPRESSION_SUMMARY:
            uri += "/summary" + time_range
            if query.pi.is_interpolated():
                uri += (
                    f"&sampleType={EXPRESSION_SAMPLE_TYPE}"
                    f"&sampleInterval={query.get_interval_time()}ms"
                )
        else:
            uri += "/intervals" + time_range
            uri += f"&sampleInterval={query.get_interval_time()}ms"
        uri += "&expression=" + quote_plus(query.pi.expression)
        return uri

    uri = STREAMSETS_PATH
    if mode is QueryMode.SUMMARY:
        uri += "/summary" + time_range + f"&intervals={query.get_max_data_points()}"
        uri += query.pi.get_summary_uri_component()
    elif mode is QueryMode.INTERPOLATED:
        uri += "/interpolated" + time_range + f"&interval={query.get_interval_time()}"
    elif mode is QueryMode.RECORDED:
        uri += "/recorded" + time_range + f"&maxCount={query.get_max_data_points()}"
    else:
        uri += "/plot" + time_range + f"&intervals={query.get_max_data_points()}"
    return uri


def build_resource_url(base_url: str, query: Query, web_id: str) -> str:
    """Fully qualified batch sub-request resource for one resolved segment."""
    return f"{base_url}{build_query_uri(query)}&webid={web_id}"
