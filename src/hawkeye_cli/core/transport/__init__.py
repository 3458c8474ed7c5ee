"""Investigation API transport: SSE decoding and the ``httpx`` client."""

from hawkeye_cli.core.transport.client import InvestigationClient
from hawkeye_cli.core.transport.sse import (
    ContentType,
    SSEEvent,
    StreamResponse,
    decode_stream_payload,
    iter_sse_events,
    response_to_fragments,
    strip_html,
)

__all__ = [
    "ContentType",
    "InvestigationClient",
    "SSEEvent",
    "StreamResponse",
    "decode_stream_payload",
    "iter_sse_events",
    "response_to_fragments",
    "strip_html",
]
