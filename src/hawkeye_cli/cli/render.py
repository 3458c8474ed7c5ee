"""Terminal rendering of stream processor output blocks.

``BlockRenderer`` maps each ``OutputBlock`` kind onto ``rich`` renderables.
It holds no stream state of its own: everything it prints is decided by
the processor, in the order the processor emitted it.
"""

import re
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from hawkeye_cli.core.stream.models import BlockKind, OutputBlock

HEADER_PREFIX = "  🔍 "
NOTE_PREFIX = "     ↳ "
REASONING_INDENT = "    "
ANSWER_INDENT = "  "
PROGRESS_PREFIX = "  ● "
FOLLOW_UP_PREFIX = "  💡 "
FOLLOW_UP_ITEM_INDENT = "     "
SOURCE_PREFIX = "  📎 "
TITLE_PREFIX = "  📛 "
DURATION_PREFIX = "  ⏱  "
DIVIDER = "  " + "─" * 44

_INLINE_RE = re.compile(r"\*\*(?P<bold>[^*]+)\*\*|`(?P<code>[^`]+)`")
_SEPARATOR_CELL_RE = re.compile(r":?-{1,}:?")
_INTEGER_RE = re.compile(r"[+-]?\d+")


def format_duration(ms: str) -> str:
    """Human-readable execution time from a millisecond count.

    Non-numeric input is returned unchanged.

    Example:
        >>> format_duration("1500")
        '1.5s'
        >>> format_duration("125000")
        '2m 5s'
    """
    value = ms.strip()
    if not _INTEGER_RE.fullmatch(value):
        return ms
    millis = int(value)

    if millis < 1000:
        return f"{millis}ms"

    seconds, remaining_ms = divmod(millis, 1000)
    if seconds < 60:
        if remaining_ms > 0:
            return f"{seconds}.{remaining_ms // 100}s"
        return f"{seconds}s"

    minutes, remaining_sec = divmod(seconds, 60)
    if minutes < 60:
        if remaining_sec > 0:
            return f"{minutes}m {remaining_sec}s"
        return f"{minutes}m"

    hours, remaining_min = divmod(minutes, 60)
    if remaining_min > 0:
        return f"{hours}h {remaining_min}m"
    return f"{hours}h"


def inline_text(text: str, style: str = "", prefix: str = "") -> Text:
    """Build a ``Text`` with ``**bold**`` and `` `code` `` spans highlighted."""
    result = Text(prefix, style=style)
    pos = 0
    for match in _INLINE_RE.finditer(text):
        result.append(text[pos : match.start()], style=style)
        if match.group("bold") is not None:
            result.append(match.group("bold"), style=f"{style} bold".strip())
        else:
            result.append(match.group("code"), style=f"{style} cyan".strip())
        pos = match.end()
    result.append(text[pos:], style=style)
    return result


def parse_table_rows(text: str) -> List[List[str]]:
    """Split pipe-delimited rows into cells, dropping ``|---|`` separator rows."""
    rows: List[List[str]] = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if line.startswith("|"):
            line = line[1:]
        if line.endswith("|"):
            line = line[:-1]
        cells = [cell.strip() for cell in line.split("|")]
        if cells and all(_SEPARATOR_CELL_RE.fullmatch(cell) for cell in cells):
            continue
        rows.append(cells)
    return rows


def build_table(text: str) -> Optional[Table]:
    """``rich`` table for a batch of pipe rows; the first row is the header."""
    rows = parse_table_rows(text)
    if not rows:
        return None
    width = max(len(row) for row in rows)
    header, body = rows[0], rows[1:]

    table = Table(show_header=True, header_style="bold", padding=(0, 1))
    for i in range(width):
        table.add_column(Text(header[i] if i < len(header) else ""))
    for row in body:
        padded = row + [""] * (width - len(row))
        table.add_row(*(Text(cell) for cell in padded))
    return table


class BlockRenderer:
    """Prints ``OutputBlock`` values to a ``rich`` console.

    Args:
        console: Target console.
        show_progress: Print Progress blocks. Disabled while a live spinner
            is already showing the latest status.
    """

    def __init__(self, console: Console, *, show_progress: bool = True):
        self.console = console
        self.show_progress = show_progress

    def render_all(self, blocks) -> None:
        for block in blocks:
            self.render(block)

    def render(self, block: OutputBlock) -> None:
        kind = block.kind
        print_ = self.console.print

        if kind is BlockKind.PROGRESS:
            if self.show_progress:
                print_(Text(PROGRESS_PREFIX + block.text, style="dim"))
        elif kind is BlockKind.REASONING_HEADER:
            print_(Text(HEADER_PREFIX + block.text, style="bold cyan"))
        elif kind is BlockKind.REASONING_NOTE:
            print_(Text(NOTE_PREFIX + block.text, style="dim italic"))
        elif kind is BlockKind.REASONING_LINE:
            print_(inline_text(block.text, style="dim", prefix=REASONING_INDENT))
        elif kind is BlockKind.ANSWER:
            print_(inline_text(block.text, prefix=ANSWER_INDENT))
        elif kind is BlockKind.FOLLOW_UP_HEADER:
            print_(Text(FOLLOW_UP_PREFIX + block.text, style="bold yellow"))
        elif kind is BlockKind.FOLLOW_UP_ITEM:
            print_(inline_text(block.text, prefix=f"{FOLLOW_UP_ITEM_INDENT}{block.index}. "))
        elif kind is BlockKind.SOURCE:
            print_(Text(SOURCE_PREFIX + block.text, style="dim"))
        elif kind is BlockKind.TITLE:
            print_(Text(TITLE_PREFIX + block.text, style="bold"))
        elif kind is BlockKind.DURATION:
            print_(Text(DURATION_PREFIX + format_duration(block.text), style="dim"))
        elif kind is BlockKind.BLANK:
            print_()
        elif kind is BlockKind.DIVIDER:
            print_(Text(DIVIDER, style="dim"))
        elif kind is BlockKind.TABLE:
            table = build_table(block.text)
            if table is not None:
                print_(table)
        elif kind in (BlockKind.CODE_FENCE_LINE, BlockKind.CODE_BODY_LINE):
            indent = REASONING_INDENT if block.group_id else ANSWER_INDENT
            style = "dim" if kind is BlockKind.CODE_FENCE_LINE else "green"
            print_(Text(indent + block.text, style=style))

    # -- Session framing ------------------------------------------------------

    def render_header(self, prompt: str, session_id: str, console_url: str = "") -> None:
        self.console.print()
        self.console.print(Text.assemble(("  Investigating: ", "bold"), prompt))
        self.console.print(Text(f"  Session: {session_id}", style="dim"))
        if console_url:
            self.console.print(Text(f"  Console: {console_url}", style="dim"))
        self.console.print()

    def render_footer(self, session_id: str, console_url: str = "") -> None:
        self.console.print()
        self.console.print(Text(f"  ✓ Investigation complete (session {session_id})", style="bold green"))
        if console_url:
            self.console.print(Text(f"  View in console: {console_url}", style="dim"))
