"""Server-sent event decoding for the investigation stream.

The server answers ``POST /v1/inference/session`` with an SSE body. Each
event is an optional ``event:`` line naming the event type followed by a
``data:`` line holding one JSON-encoded ``StreamResponse``. This module turns
those lines into ``InputFragment`` values for the stream processor:

    lines -> iter_sse_events() -> decode_stream_payload() -> response_to_fragments()
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from hawkeye_cli.core.stream.models import DeltaKind, FragmentCategory, InputFragment

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TYPE = "message"

# Data payloads that carry no JSON and are dropped
_SKIPPED_DATA = frozenset({"[DONE]", ":keepalive"})

_HTML_TAG_RE = re.compile(r"<[^>]+>")
_LINE_BREAK_TAGS = ("<br/>", "<br>", "<br />")


class ContentType:
    """Wire content types understood by the client."""

    PROGRESS_STATUS = "CONTENT_TYPE_PROGRESS_STATUS"
    SOURCES = "CONTENT_TYPE_SOURCES"
    CHAIN_OF_THOUGHT = "CONTENT_TYPE_CHAIN_OF_THOUGHT"
    CHAT_RESPONSE = "CONTENT_TYPE_CHAT_RESPONSE"
    FOLLOW_UP_SUGGESTIONS = "CONTENT_TYPE_FOLLOW_UP_SUGGESTIONS"
    SESSION_NAME = "CONTENT_TYPE_SESSION_NAME"
    ERROR_MESSAGE = "CONTENT_TYPE_ERROR_MESSAGE"
    EXECUTION_TIME = "CONTENT_TYPE_EXECUTION_TIME"
    CHAT_PROMPT = "CONTENT_TYPE_CHAT_PROMPT"


CONTENT_CATEGORIES = {
    ContentType.PROGRESS_STATUS: FragmentCategory.PROGRESS,
    ContentType.SOURCES: FragmentCategory.SOURCE,
    ContentType.CHAIN_OF_THOUGHT: FragmentCategory.REASONING,
    ContentType.CHAT_RESPONSE: FragmentCategory.ANSWER,
    ContentType.FOLLOW_UP_SUGGESTIONS: FragmentCategory.FOLLOW_UP,
    ContentType.SESSION_NAME: FragmentCategory.TITLE,
    ContentType.ERROR_MESSAGE: FragmentCategory.ERROR,
    ContentType.EXECUTION_TIME: FragmentCategory.DURATION,
}

EVENT_DELTA_KINDS = {
    "cot_start": DeltaKind.START,
    "cot_delta": DeltaKind.DELTA,
    "cot_end": DeltaKind.END,
    "chat_delta": DeltaKind.DELTA,
    "chat_full": DeltaKind.FULL,
}


@dataclass(frozen=True)
class SSEEvent:
    """One ``data:`` line together with the event type in effect for it."""

    event: str
    data: str


def iter_sse_events(lines: Iterable[str]) -> Iterator[SSEEvent]:
    """Group raw SSE lines into events.

    A blank line ends an event block and resets the event type to
    ``message``. Comment, ``id:`` and ``retry:`` lines are ignored, as are
    empty data payloads and the ``[DONE]`` / ``:keepalive`` markers.
    """
    event_type = DEFAULT_EVENT_TYPE
    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            event_type = DEFAULT_EVENT_TYPE
            continue
        if line.startswith("event:"):
            event_type = line[len("event:"):].strip()
            continue
        if line.startswith((":", "id:", "retry:")):
            continue
        if not line.startswith("data:"):
            continue

        data = line[len("data:"):].strip()
        if not data or data in _SKIPPED_DATA:
            continue
        yield SSEEvent(event=event_type, data=data)


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class StreamMetadata(_WireModel):
    is_delta: Any = None

    @property
    def is_delta_true(self) -> bool:
        """``is_delta`` arrives as either a JSON bool or the string "true"."""
        if isinstance(self.is_delta, bool):
            return self.is_delta
        if isinstance(self.is_delta, str):
            return self.is_delta == "true"
        return False


class StreamContent(_WireModel):
    content_type: str = ""
    parts: List[str] = []


class StreamMessage(_WireModel):
    id: str = ""
    content: Optional[StreamContent] = None
    metadata: Optional[StreamMetadata] = None
    status: str = ""
    end_turn: bool = False


class StreamResponse(_WireModel):
    """One decoded ``data:`` payload."""

    session_uuid: str = ""
    error: str = ""
    message: Optional[StreamMessage] = None

    @property
    def end_turn(self) -> bool:
        return self.message is not None and self.message.end_turn


def decode_stream_payload(data: str) -> Optional[StreamResponse]:
    """Decode a ``data:`` payload, unwrapping a ``{"result": {...}}`` envelope.

    Returns None for payloads that are not a JSON object of the expected
    shape.
    """
    try:
        record = json.loads(data)
    except (json.JSONDecodeError, ValueError):
        logger.debug("Skipping unparseable stream payload: %.80s", data)
        return None
    if not isinstance(record, dict):
        return None

    envelope = record.get("result")
    if "message" not in record and isinstance(envelope, dict):
        record = envelope

    try:
        return StreamResponse.model_validate(record)
    except ValidationError as exc:
        logger.debug("Skipping malformed stream payload: %s", exc)
        return None


def strip_html(text: str) -> str:
    """Turn ``<br>`` variants into line breaks and drop any other tag."""
    for tag in _LINE_BREAK_TAGS:
        text = text.replace(tag, "\n")
    return _HTML_TAG_RE.sub("", text)


def response_to_fragments(response: StreamResponse, event_type: str = DEFAULT_EVENT_TYPE) -> List[InputFragment]:
    """Map one decoded stream response onto zero or more input fragments."""
    message = response.message
    if message is None or message.content is None:
        return []

    content_type = message.content.content_type
    parts = message.content.parts
    category = CONTENT_CATEGORIES.get(content_type)
    if category is None:
        if content_type:
            logger.debug("Dropping unknown content type %s", content_type)
        return []
    if not parts:
        return []

    delta_kind = EVENT_DELTA_KINDS.get(event_type, DeltaKind.NONE)

    if category is FragmentCategory.SOURCE:
        return [InputFragment(category, part, delta_kind) for part in parts]

    if category is FragmentCategory.ANSWER:
        if delta_kind is DeltaKind.NONE and message.metadata is not None and message.metadata.is_delta_true:
            delta_kind = DeltaKind.DELTA
        payload = strip_html("\n".join(parts))
    elif category in (FragmentCategory.FOLLOW_UP, FragmentCategory.ERROR):
        payload = "\n".join(parts)
    else:
        payload = parts[0]

    return [InputFragment(category, payload, delta_kind)]
