"""Runtime pipeline components.

Architecture:
    - rest/: aiohttp client and base-URL transport
    - webid.py: path -> WebID resolution, cache and eviction timer
    - batch.py: one batch call per RefID, index demultiplexing
    - classifier.py: sub-response shape detection
    - channels.py: streaming channel registry
    - frames.py: frame assembly
    - telemetry.py: structured logging helpers
"""

from .batch import BatchExecutor, BatchOutcome, build_batch_body, demultiplex
from .channels import StreamChannelRegistry, channel_address
from .classifier import classify_content, classify_sub_response
from .frames import FrameAssembler
from .rest import HTTPClient, RESTTransport
from .webid import EvictionTimer, WebIDCache, WebIDCacheEntry, WebIDResolver

__all__ = [
    "BatchExecutor",
    "BatchOutcome",
    "EvictionTimer",
    "FrameAssembler",
    "HTTPClient",
    "RESTTransport",
    "StreamChannelRegistry",
    "WebIDCache",
    "WebIDCacheEntry",
    "WebIDResolver",
    "build_batch_body",
    "channel_address",
    "classify_content",
    "classify_sub_response",
    "demultiplex",
]
