"""Text helpers for console tables: title shortening, OSC 8 links and visual width."""

import os
import re
from typing import List, Sequence

ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*[a-zA-Z]|\x1b\]8;;[^\x07\x1b]*\x1b\\')
SQUARE_BRACKET_PREFIX_RE = re.compile(r'^\s*\[[^\]]+\]\s*')
NUMBERS_PREFIX_RE = re.compile(r'^\s*\d+\s*')
SPACES_RE = re.compile(r'\s+')

MAX_TITLE_LENGTH = 30


def shorten_title(title: str) -> str:
    """Strip "[Area]" prefixes, dashes and leading work item numbers, then cut to 30 chars."""
    if not title:
        return title or ''
    cleaned = SQUARE_BRACKET_PREFIX_RE.sub('', title)
    cleaned = cleaned.replace('-', ' ')
    cleaned = NUMBERS_PREFIX_RE.sub('', cleaned)
    cleaned = SPACES_RE.sub(' ', cleaned).strip()
    if len(cleaned) > MAX_TITLE_LENGTH:
        cleaned = f"{cleaned[:MAX_TITLE_LENGTH - 3]}..."
    return cleaned


def create_link(text: str, url: str) -> str:
    """Wrap text in an OSC 8 hyperlink; terminals without support show the text only."""
    return f"\x1b]8;;{url}\x1b\\{text}\x1b]8;;\x1b\\"


def supports_links() -> bool:
    """Best-effort detection of OSC 8 capable terminals."""
    program = os.environ.get('TERM_PROGRAM', '')
    if program in ('vscode', 'Windows Terminal', 'iTerm.app'):
        return True
    if os.environ.get('WT_SESSION'):
        return True
    term = os.environ.get('TERM', '')
    return 'xterm' in term or 'screen' in term


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub('', text or '')


def visual_width(text: str) -> int:
    """Printed width, ignoring colour codes and hyperlink escapes."""
    return len(strip_ansi(text))


def truncate(text: str, width: int) -> str:
    """Cut text to a visual width, ending in "...".

    Escape sequences cannot be cut safely, so text carrying them loses its
    formatting when it has to be truncated.
    """
    text = text or ''
    if visual_width(text) <= width:
        return text
    plain = strip_ansi(text)
    if width <= 3:
        return plain[:width]
    return plain[:width - 3] + '...'


def pad(text: str, width: int) -> str:
    return text + ' ' * max(0, width - visual_width(text))


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]], max_widths: Sequence[int]) -> List[str]:
    """Lay out a " | " separated table.

    A max width of -1 leaves the column unbounded. Rows whose length differs
    from the header are skipped.

    Raises:
        ValueError: If headers and max_widths differ in length
    """
    if len(headers) != len(max_widths):
        raise ValueError("Headers and max_widths must have the same length.")

    rows = [row for row in rows if len(row) == len(headers)]

    widths = []
    for i, header in enumerate(headers):
        limit = max_widths[i]
        width = visual_width(header) if limit == -1 else min(visual_width(header), limit)
        for row in rows:
            content = visual_width(row[i] or '')
            width = max(width, content if limit == -1 else min(content, limit))
        widths.append(width)

    def render(cells):
        rendered = []
        for i, cell in enumerate(cells):
            cell = cell or ''
            if max_widths[i] != -1:
                cell = truncate(cell, widths[i])
            rendered.append(pad(cell, widths[i]))
        return ' | '.join(rendered)

    lines = [render(headers), '-+-'.join('-' * w for w in widths)]
    lines.extend(render(row) for row in rows)
    return lines
