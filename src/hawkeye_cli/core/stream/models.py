"""Typed vocabulary for the investigation stream.

Input side: ``InputFragment`` values produced by the transport, tagged with a
``FragmentCategory`` and a ``DeltaKind``. Fragment payloads for reasoning
steps and sources are small JSON records decoded leniently by
``ReasoningPayload`` / ``SourcePayload``.

Output side: ``OutputBlock`` values emitted by the stream processor, one per
displayable unit, tagged with a ``BlockKind``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_STEP_ID = "_default"
CONTAINER_INSIGHTS_PREFIX = "containerinsights_"


class FragmentCategory(str, Enum):
    """What a fragment carries."""

    PROGRESS = "progress"
    SOURCE = "source"
    REASONING = "reasoning"
    ANSWER = "answer"
    FOLLOW_UP = "follow_up"
    TITLE = "title"
    ERROR = "error"
    DURATION = "duration"


class DeltaKind(str, Enum):
    """Delivery sub-protocol of a fragment.

    START/DELTA/END belong to the incremental protocol. NONE and FULL carry
    the full accumulated text seen so far (legacy snapshots).
    """

    NONE = "none"
    START = "start"
    DELTA = "delta"
    END = "end"
    FULL = "full"


class BlockKind(str, Enum):
    """Kind of a display block emitted by the processor."""

    PROGRESS = "progress"
    REASONING_HEADER = "reasoning_header"
    REASONING_NOTE = "reasoning_note"
    REASONING_LINE = "reasoning_line"
    ANSWER = "answer"
    FOLLOW_UP_HEADER = "follow_up_header"
    FOLLOW_UP_ITEM = "follow_up_item"
    SOURCE = "source"
    TITLE = "title"
    DURATION = "duration"
    BLANK = "blank"
    DIVIDER = "divider"
    TABLE = "table"
    CODE_FENCE_LINE = "code_fence_line"
    CODE_BODY_LINE = "code_body_line"


@dataclass(frozen=True)
class InputFragment:
    """One typed fragment of the live investigation stream."""

    category: FragmentCategory
    payload: str = ""
    delta_kind: DeltaKind = DeltaKind.NONE


@dataclass(frozen=True)
class OutputBlock:
    """A single display block.

    Attributes:
        kind: What the block is.
        text: Raw content (markdown or plain text); empty for Blank/Divider.
        group_id: Reasoning step identity for reasoning blocks.
        finished: True for the last line flushed out of a reasoning step.
        index: 1-based ordinal for follow-up items.
    """

    kind: BlockKind
    text: str = ""
    group_id: str = ""
    finished: bool = False
    index: int = 0


def _load_record(raw: str) -> dict[str, Any] | None:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return data


class _LenientRecord(BaseModel):
    """Base for payload records: unknown keys ignored, values coerced to str."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return str(value)


class ReasoningPayload(_LenientRecord):
    """Decoded reasoning (chain-of-thought) payload."""

    id: str = ""
    description: str = ""
    explanation: str = ""
    investigation: str = ""
    status: str = ""
    cot_status: str = ""

    @classmethod
    def parse(cls, raw: str) -> "ReasoningPayload":
        """Decode *raw*; undecodable payloads become investigation text."""
        data = _load_record(raw)
        if data is None:
            return cls(investigation=raw)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.debug("Reasoning payload failed validation: %s", exc)
            return cls(investigation=raw)

    @property
    def step_id(self) -> str:
        """Identity of the step: id, else description, else a placeholder."""
        return self.id or self.description or DEFAULT_STEP_ID

    @property
    def effective_status(self) -> str:
        return self.cot_status or self.status

    @property
    def is_completed(self) -> bool:
        return "COMPLETED" in self.effective_status.upper()


class SourcePayload(_LenientRecord):
    """Decoded data-source payload."""

    id: str = ""
    category: str = ""
    title: str = ""

    @classmethod
    def parse(cls, raw: str) -> "SourcePayload | None":
        data = _load_record(raw)
        if data is None:
            return None
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.debug("Source payload failed validation: %s", exc)
            return None

    @property
    def label(self) -> str:
        """Display label: title or id, namespace stripped, category prefixed."""
        name = self.title or self.id
        name = name.rsplit(".", 1)[-1]
        if name.startswith(CONTAINER_INSIGHTS_PREFIX):
            name = name[len(CONTAINER_INSIGHTS_PREFIX):]
        if self.category:
            return f"[{self.category}] {name}"
        return name


def parse_source_label(raw: str) -> str:
    """Return the display label for a source payload, or *raw* if undecodable."""
    source = SourcePayload.parse(raw)
    if source is None:
        return raw
    return source.label
