"""Markdown -> prompt records.

A single forward pass over the document lines, written as a fold over an
explicit state: either no record is open, or one ``_OpenRecord`` is being
filled. Each trimmed line is classified, and a transition function returns
the next state, the next cursor, and possibly a finished record. Fenced
blocks are consumed by a sub-scan that hands back the captured text plus the
cursor past the closing fence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from promptfeed.models import Record, SourceDescriptor
from promptfeed.utils import get_logger, resolve_relative_url

logger = get_logger(__name__)

_HEADING_PREFIX = "##"
_FENCE_MARKERS = ("```", "~~~")
_QUOTE_PREFIX = ">"

_MD_IMG_RE = re.compile(r"!\[.*?\]\((.*?)\)")
_IMG_TITLE_RE = re.compile(r"\s+[\"'(].*$")
_HTML_IMG_RE = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"']", re.IGNORECASE)


class LineKind(str, Enum):
    HEADING = "heading"
    FENCE_OPEN = "fence_open"
    QUOTE = "quote"
    OTHER = "other"


@dataclass(frozen=True)
class _OpenRecord:
    title: str
    preview: str = ""
    body: str = ""
    # previous line belonged to a blockquote run
    in_quote: bool = False


def _fence_marker(line: str) -> Optional[str]:
    for marker in _FENCE_MARKERS:
        if line.startswith(marker):
            return marker
    return None


def classify(line: str) -> LineKind:
    """Classify an already-trimmed line."""
    if line.startswith(_HEADING_PREFIX):
        return LineKind.HEADING
    if _fence_marker(line):
        return LineKind.FENCE_OPEN
    if line.startswith(_QUOTE_PREFIX):
        return LineKind.QUOTE
    return LineKind.OTHER


def find_image(line: str) -> Optional[str]:
    """Return the first image URL on the line: markdown syntax wins over <img>."""
    m = _MD_IMG_RE.search(line)
    if m:
        # drop an optional link title: ![x](a.png "title")
        target = _IMG_TITLE_RE.sub("", m.group(1).strip()).strip("<>").strip()
        return target or None
    m = _HTML_IMG_RE.search(line)
    if m:
        return m.group(1).strip() or None
    return None


def scan_fence(lines: Sequence[str], start: int, marker: str) -> Tuple[str, int]:
    """Capture the body of the fence opened at ``lines[start]``.

    Returns the trimmed captured text and the index of the first line after
    the closing fence (or ``len(lines)`` when the fence never closes).
    """
    i = start + 1
    captured: List[str] = []
    while i < len(lines) and not lines[i].strip().startswith(marker):
        captured.append(lines[i])
        i += 1
    return "\n".join(captured).strip(), min(i + 1, len(lines))


def _append_block(body: str, text: str) -> str:
    return f"{body}\n\n{text}" if body else text


def _append_quote_line(body: str, text: str, continuing: bool) -> str:
    if not body:
        return text
    return f"{body}\n{text}" if continuing else f"{body}\n\n{text}"


def _with_preview(state: _OpenRecord, line: str, base_url: str) -> _OpenRecord:
    if state.preview:
        return state
    url = find_image(line)
    if not url:
        return state
    return replace(state, preview=resolve_relative_url(url, base_url))


def _finalize(state: Optional[_OpenRecord], template: Record) -> Optional[Record]:
    if state is None:
        return None
    rec = template.model_copy(update={"title": state.title, "preview": state.preview, "body": state.body})
    return rec if rec.is_valid else None


def _step(
    state: Optional[_OpenRecord],
    lines: Sequence[str],
    cursor: int,
    base_url: str,
    template: Record,
) -> Tuple[Optional[_OpenRecord], int, Optional[Record]]:
    line = lines[cursor].strip()
    kind = classify(line)

    if kind is LineKind.HEADING:
        title = re.sub(r"^#+\s*", "", line).strip()
        return _OpenRecord(title=title), cursor + 1, _finalize(state, template)

    if state is None:
        return None, cursor + 1, None

    state = _with_preview(state, line, base_url)

    if kind is LineKind.FENCE_OPEN:
        text, nxt = scan_fence(lines, cursor, _fence_marker(line))
        body = _append_block(state.body, text) if text else state.body
        return replace(state, body=body, in_quote=False), nxt, None

    if kind is LineKind.QUOTE:
        content = re.sub(r"^>\s*", "", line).strip()
        body = _append_quote_line(state.body, content, state.in_quote) if content else state.body
        return replace(state, body=body, in_quote=True), cursor + 1, None

    return replace(state, in_quote=False), cursor + 1, None


def record_template(source: SourceDescriptor) -> Record:
    """Per-source field defaults every extracted record starts from."""
    return Record(
        attribution=source.default_attribution,
        origin_link=source.origin_link,
        mode=source.mode,
        category=source.category,
        sub_category=source.sub_category,
    )


def extract(document: str, source: SourceDescriptor) -> List[Record]:
    """Extract prompt records from ``document`` in heading order.

    Headings (``##`` and deeper) open a record; images, fenced blocks and
    blockquotes below it fill it in. Records with a title but neither body
    nor preview are dropped. Never raises on odd markdown.
    """
    lines = (document or "").replace("\r\n", "\n").split("\n")
    template = record_template(source)
    base_url = source.base_url

    records: List[Record] = []
    state: Optional[_OpenRecord] = None
    cursor = 0
    while cursor < len(lines):
        state, cursor, done = _step(state, lines, cursor, base_url, template)
        if done is not None:
            records.append(done)

    last = _finalize(state, template)
    if last is not None:
        records.append(last)

    logger.debug("extract: source=%s lines=%d records=%d", source.name, len(lines), len(records))
    return records
