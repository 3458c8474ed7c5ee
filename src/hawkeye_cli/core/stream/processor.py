"""Stream processor: turns investigation fragments into ordered display blocks.

The processor owns all buffering, gating and block-transition rules:

- partial lines are held until a line terminator (or a flush) completes them
- reasoning text is accumulated per step identity, in either the delta
  protocol (start/delta/end) or the legacy snapshot protocol
- progress and source messages are deduplicated, and progress is deferred
  while a delta-mode block is mid-paragraph
- table rows are batched into a single Table block, code fences are tracked

A processor is single-threaded by contract: exactly one consumer calls
``process``/``flush`` for the lifetime of one investigation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from hawkeye_cli.core.stream.models import (
    BlockKind,
    DeltaKind,
    FragmentCategory,
    InputFragment,
    OutputBlock,
    ReasoningPayload,
    parse_source_label,
)

logger = logging.getLogger(__name__)

FOLLOW_UP_HEADER = "Follow-up suggestions:"
TABLE_ROW_PREFIX = "|"
CODE_FENCE_PREFIX = "```"

_TRIVIAL_CONTENT = frozenset({"in progress...", "investigating...", "analyzing...", "thinking..."})
_INCOMPLETE_LIST_ITEM_RE = re.compile(r"[-*]|\d{0,2}\.")


def extract_progress_display(text: str) -> str:
    """Pull the parenthetical description out of a progress message.

    "PromptGate (Preparing Telemetry Sources)" -> "Preparing Telemetry Sources"
    """
    start = text.find("(")
    if start >= 0:
        end = text.rfind(")")
        if end > start:
            return text[start + 1 : end]
    return text


def normalize_progress(display: str) -> str:
    """Collapse progress messages that differ only in their counts."""
    if display.startswith("Found ") and display.endswith(" results"):
        return "Found N results"
    if "result streams" in display:
        return "Analyzing N result streams"
    if "datas" in display and "ources" in display:
        return "Selected N data sources"
    return display


def is_trivial_content(text: str) -> bool:
    """True for placeholder texts that carry no investigation content."""
    trimmed = text.strip()
    return not trimmed or trimmed.lower() in _TRIVIAL_CONTENT


def is_incomplete_list_item(trimmed: str) -> bool:
    """True for a bare list marker the backend may still fill in ("-", "1.")."""
    return _INCOMPLETE_LIST_ITEM_RE.fullmatch(trimmed) is not None


@dataclass
class ProcessorState:
    """Mutable state for one investigation."""

    # Reasoning steps, keyed by step identity
    reasoning_accum: Dict[str, str] = field(default_factory=dict)
    reasoning_buffers: Dict[str, str] = field(default_factory=dict)
    headers_shown: Set[str] = field(default_factory=set)
    active_step: str = ""
    step_active: bool = False
    step_text_active: bool = False
    reasoning_delta_mode: bool = False
    divider_owed: bool = False

    # Shared between reasoning and answer text
    table_rows: List[str] = field(default_factory=list)
    in_code_block: bool = False

    # Answer
    answer_buffer: str = ""
    answer_consumed: int = 0
    answer_streaming: bool = False
    answer_delta_mode: bool = False

    # Gating
    seen_progress: Set[str] = field(default_factory=set)
    seen_sources: Set[str] = field(default_factory=set)
    pending_progress: List[str] = field(default_factory=list)

    last_status: str = ""


class StreamProcessor:
    """Consumes ``InputFragment`` values and emits ordered ``OutputBlock`` lists."""

    def __init__(self) -> None:
        self._state = ProcessorState()

    @property
    def state(self) -> ProcessorState:
        return self._state

    def last_status(self) -> str:
        """Most recent progress text, for a live status indicator."""
        return self._state.last_status

    def process(self, fragment: InputFragment) -> List[OutputBlock]:
        """Handle one fragment and return the blocks it releases."""
        category = fragment.category
        if category is FragmentCategory.PROGRESS:
            return self._handle_progress(fragment)
        if category is FragmentCategory.SOURCE:
            return self._handle_source(fragment)
        if category is FragmentCategory.REASONING:
            return self._handle_reasoning(fragment)
        if category is FragmentCategory.ANSWER:
            return self._handle_answer(fragment)
        if category is FragmentCategory.FOLLOW_UP:
            return self._handle_follow_up(fragment)
        if category is FragmentCategory.TITLE:
            return [OutputBlock(BlockKind.TITLE, fragment.payload)]
        if category is FragmentCategory.DURATION:
            return [OutputBlock(BlockKind.DURATION, fragment.payload.strip())]
        # Error fragments are internal retry diagnostics, never shown.
        return []

    def flush(self) -> List[OutputBlock]:
        """Force out everything still buffered. Returns [] when nothing is pending."""
        state = self._state
        out = self._flush_answer_buffer()
        if state.active_step:
            out.extend(self._flush_step(state.active_step))
        out.extend(self._flush_table())
        out.extend(self._flush_pending_progress())
        state.step_active = False
        state.step_text_active = False
        state.answer_streaming = False
        return out

    # -- Progress -----------------------------------------------------------

    def _handle_progress(self, fragment: InputFragment) -> List[OutputBlock]:
        state = self._state
        display = extract_progress_display(fragment.payload)
        state.last_status = display

        out: List[OutputBlock] = []

        # In the legacy protocol a progress message is the only signal that
        # the current reasoning step or answer block has finished. Flush
        # before dedup so the last line is never lost to a duplicate.
        if state.step_text_active and state.active_step and not state.reasoning_delta_mode:
            flushed = self._flush_step(state.active_step)
            if flushed:
                out.extend(flushed)
                out.append(OutputBlock(BlockKind.BLANK))
            state.step_text_active = False
            state.step_active = False
            state.divider_owed = True

        if state.answer_streaming and not state.answer_delta_mode:
            out.extend(self._flush_answer_buffer())
            out.extend(self._flush_table())
            state.answer_streaming = False

        key = normalize_progress(display)
        if key in state.seen_progress:
            return out
        state.seen_progress.add(key)

        mid_paragraph = (state.step_text_active and state.reasoning_delta_mode) or (
            state.answer_streaming and state.answer_delta_mode
        )
        if mid_paragraph:
            state.pending_progress.append(display)
            return out

        out.append(OutputBlock(BlockKind.PROGRESS, display))
        return out

    # -- Sources ------------------------------------------------------------

    def _handle_source(self, fragment: InputFragment) -> List[OutputBlock]:
        state = self._state
        if state.step_active or state.answer_streaming:
            return []

        label = parse_source_label(fragment.payload)
        if label in state.seen_sources:
            return []
        state.seen_sources.add(label)
        return [OutputBlock(BlockKind.SOURCE, label)]

    # -- Reasoning ----------------------------------------------------------

    def _handle_reasoning(self, fragment: InputFragment) -> List[OutputBlock]:
        state = self._state
        payload = ReasoningPayload.parse(fragment.payload)
        step_id = payload.step_id
        kind = fragment.delta_kind

        out: List[OutputBlock] = []

        # A new delta step ends any answer block still streaming.
        if kind is DeltaKind.START and state.answer_streaming:
            out.extend(self._flush_answer_buffer())
            out.extend(self._flush_table())
            out.extend(self._flush_pending_progress())
            state.answer_streaming = False

        # A late "end" for a step that was already superseded must not
        # produce a divider or steal the active identity.
        is_new_step = bool(state.active_step) and step_id != state.active_step
        is_stale_end = kind is DeltaKind.END and is_new_step
        if is_new_step and not is_stale_end:
            out.extend(self._flush_step(state.active_step))
            state.step_active = False
            state.step_text_active = False
            out.extend(self._flush_pending_progress())
            out.append(OutputBlock(BlockKind.DIVIDER))
            state.divider_owed = False

        if is_stale_end:
            logger.debug("Ignoring late end for step %s (active: %s)", step_id, state.active_step)
        else:
            state.active_step = step_id

        if kind is DeltaKind.START:
            state.reasoning_delta_mode = True
            state.step_active = True
            out.extend(self._show_header(step_id, payload))
            if not is_trivial_content(payload.investigation):
                state.step_text_active = True
                out.extend(self._append_step_text(step_id, payload.investigation))

        elif kind is DeltaKind.DELTA:
            out.extend(self._show_header(step_id, payload))
            if payload.investigation:
                state.step_text_active = True
                out.extend(self._append_step_text(step_id, payload.investigation))

        elif kind is DeltaKind.END:
            if step_id == state.active_step:
                out.extend(self._flush_step(step_id))
                state.step_active = False
                state.step_text_active = False
                out.extend(self._flush_pending_progress())
                state.divider_owed = True

        else:
            state.step_active = True
            out.extend(self._show_header(step_id, payload))

            text = payload.investigation
            if not is_trivial_content(text):
                seen = state.reasoning_accum.get(step_id, "")
                if len(text) > len(seen):
                    state.step_text_active = True
                    state.reasoning_accum[step_id] = text
                    out.extend(self._append_step_text(step_id, text[len(seen):]))

            # Duplicate snapshots without growth are normal while the backend
            # streams character by character; only completion flushes.
            if payload.is_completed:
                out.extend(self._flush_step(step_id))
                state.step_active = False
                state.step_text_active = False
                state.divider_owed = True
                out.extend(self._flush_pending_progress())

        return out

    def _show_header(self, step_id: str, payload: ReasoningPayload) -> List[OutputBlock]:
        state = self._state
        if step_id in state.headers_shown or not payload.description:
            return []
        state.headers_shown.add(step_id)
        out = [OutputBlock(BlockKind.REASONING_HEADER, payload.description, group_id=step_id)]
        if payload.explanation:
            out.append(OutputBlock(BlockKind.REASONING_NOTE, payload.explanation, group_id=step_id))
        return out

    def _append_step_text(self, step_id: str, text: str) -> List[OutputBlock]:
        state = self._state
        lines, remainder = self._split_lines(
            state.reasoning_buffers.get(step_id, "") + text,
            skip_blank=True,
            hold_list_markers=True,
        )
        state.reasoning_buffers[step_id] = remainder
        out: List[OutputBlock] = []
        for line in lines:
            out.extend(self._route_line(line, BlockKind.REASONING_LINE, step_id))
        return out

    def _flush_step(self, step_id: str) -> List[OutputBlock]:
        """Emit everything buffered for *step_id*, then any pending table rows."""
        state = self._state
        buffered = state.reasoning_buffers.pop(step_id, "")
        out: List[OutputBlock] = []
        for line in buffered.split("\n"):
            if line.strip():
                out.extend(self._route_line(line, BlockKind.REASONING_LINE, step_id))
        out.extend(self._flush_table())

        for i in range(len(out) - 1, -1, -1):
            if out[i].kind is BlockKind.REASONING_LINE:
                last = out[i]
                out[i] = OutputBlock(last.kind, last.text, group_id=last.group_id, finished=True)
                break
        return out

    # -- Answer -------------------------------------------------------------

    def _handle_answer(self, fragment: InputFragment) -> List[OutputBlock]:
        state = self._state
        out: List[OutputBlock] = []

        if state.step_active or state.step_text_active:
            if state.active_step:
                out.extend(self._flush_step(state.active_step))
            state.step_active = False
            state.step_text_active = False
            out.append(OutputBlock(BlockKind.DIVIDER))
            state.divider_owed = False
        elif state.divider_owed and not state.answer_streaming:
            out.append(OutputBlock(BlockKind.DIVIDER))
            state.divider_owed = False

        if not state.answer_streaming:
            out.extend(self._flush_pending_progress())
        state.answer_streaming = True
        state.answer_delta_mode = fragment.delta_kind is DeltaKind.DELTA

        if state.answer_delta_mode:
            new_text = fragment.payload
            state.answer_consumed += len(new_text)
        elif len(fragment.payload) > state.answer_consumed:
            new_text = fragment.payload[state.answer_consumed:]
            state.answer_consumed = len(fragment.payload)
        else:
            new_text = ""

        if not new_text:
            return out

        lines, state.answer_buffer = self._split_lines(
            state.answer_buffer + new_text,
            skip_blank=False,
            hold_list_markers=False,
        )
        for line in lines:
            out.extend(self._route_line(line, BlockKind.ANSWER))
        return out

    def _flush_answer_buffer(self) -> List[OutputBlock]:
        state = self._state
        buffered = state.answer_buffer
        state.answer_buffer = ""
        if not buffered.strip():
            return []
        return self._route_line(buffered, BlockKind.ANSWER)

    # -- Follow-ups ---------------------------------------------------------

    def _handle_follow_up(self, fragment: InputFragment) -> List[OutputBlock]:
        state = self._state
        out = self._flush_answer_buffer()
        out.extend(self._flush_table())
        out.extend(self._flush_pending_progress())
        state.answer_streaming = False
        state.step_active = False
        state.step_text_active = False

        out.append(OutputBlock(BlockKind.BLANK))
        out.append(OutputBlock(BlockKind.FOLLOW_UP_HEADER, FOLLOW_UP_HEADER))
        index = 0
        for line in fragment.payload.split("\n"):
            if line.strip():
                index += 1
                out.append(OutputBlock(BlockKind.FOLLOW_UP_ITEM, line, index=index))
        return out

    # -- Shared line handling -------------------------------------------------

    @staticmethod
    def _split_lines(
        combined: str, *, skip_blank: bool, hold_list_markers: bool
    ) -> Tuple[List[str], str]:
        """Split *combined* into complete lines and the text still buffered.

        The last segment (no terminator yet) is always buffered. With
        *hold_list_markers*, a bare list marker and everything after it stay
        buffered too, since the backend replaces such placeholders later.
        """
        segments = combined.split("\n")
        complete: List[str] = []
        for i, line in enumerate(segments[:-1]):
            line = line.rstrip("\r")
            trimmed = line.strip()
            if not trimmed and skip_blank:
                continue
            if hold_list_markers and is_incomplete_list_item(trimmed):
                return complete, "\n".join(segments[i:])
            complete.append(line)
        return complete, segments[-1]

    def _route_line(self, line: str, kind: BlockKind, group_id: str = "") -> List[OutputBlock]:
        """Classify one complete line as table row, code fence, code body or text."""
        state = self._state
        trimmed = line.strip()

        if trimmed.startswith(TABLE_ROW_PREFIX) and not state.in_code_block:
            state.table_rows.append(line)
            return []

        out = self._flush_table()
        if trimmed.startswith(CODE_FENCE_PREFIX):
            state.in_code_block = not state.in_code_block
            out.append(OutputBlock(BlockKind.CODE_FENCE_LINE, line, group_id=group_id))
        elif state.in_code_block:
            out.append(OutputBlock(BlockKind.CODE_BODY_LINE, line, group_id=group_id))
        else:
            out.append(OutputBlock(kind, line, group_id=group_id))
        return out

    def _flush_table(self) -> List[OutputBlock]:
        state = self._state
        if not state.table_rows:
            return []
        rows = state.table_rows
        state.table_rows = []
        return [OutputBlock(BlockKind.TABLE, "\n".join(rows))]

    def _flush_pending_progress(self) -> List[OutputBlock]:
        state = self._state
        if not state.pending_progress:
            return []
        out = [OutputBlock(BlockKind.PROGRESS, display) for display in state.pending_progress]
        state.pending_progress = []
        return out
