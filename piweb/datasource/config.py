"""Shared PI Web API constants.

This module centralizes endpoint paths and defaults used by the URI builder,
the WebID resolver and the batch executor.
"""

from __future__ import annotations

# Endpoint paths (relative to the configured PI Web API base URL)
BATCH_PATH = "/batch"
CALCULATION_PATH = "/calculation"
STREAMSETS_PATH = "/streamsets"

# Batch sub-requests always use GET
BATCH_SUB_REQUEST_METHOD = "GET"

# Summary defaults
DEFAULT_SUMMARY_DURATION = "30s"
EXPRESSION_SAMPLE_TYPE = "Interval"

# WebID cache: entries older than the TTL are never served, and the whole
# table is cleared on every eviction sweep.
WEBID_CACHE_TTL_SECONDS = 300.0
WEBID_EVICTION_INTERVAL_SECONDS = 300.0

# Streaming channel addresses: ds/<datasource uid>/<channel id>
CHANNEL_SCOPE = "ds"

# Message attached to responses that could not be interpreted
UNPROCESSABLE_RESPONSE_MESSAGE = "Could not process response from PI Web API"

# HTTP defaults
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENCY = 8

# Environment variable prefix for DataSourceSettings.from_env()
ENV_PREFIX = "PIWEBAPI_"
