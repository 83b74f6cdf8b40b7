"""Reference dedup: drop candidates already present in a known collection."""

from __future__ import annotations

from typing import List, Sequence, Set

from promptfeed.models import Record
from promptfeed.utils import get_logger

logger = get_logger(__name__)


def _index(reference: Sequence[Record]) -> tuple[Set[str], Set[str]]:
    titles = {r.title for r in reference}
    bodies = {r.body for r in reference if r.body}
    return titles, bodies


def is_known(candidate: Record, titles: Set[str], bodies: Set[str]) -> bool:
    # exact title match, or an identical non-empty body under any title
    if candidate.title in titles:
        return True
    return bool(candidate.body) and candidate.body in bodies


def filter_new(candidates: Sequence[Record], reference: Sequence[Record]) -> List[Record]:
    if not reference:
        logger.info("dedup.reference: empty reference, kept=%d", len(candidates))
        return list(candidates)

    titles, bodies = _index(reference)
    out = [c for c in candidates if not is_known(c, titles, bodies)]
    logger.info("dedup.reference: kept=%d from=%d (reference=%d)", len(out), len(candidates), len(reference))
    return out
