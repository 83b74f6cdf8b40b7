"""Load the previously known prompt collection used as the dedup reference."""

from __future__ import annotations

import json
import os
from typing import List, Optional

from pydantic import ValidationError

from promptfeed.models import Record
from promptfeed.utils import get_logger, load_file

logger = get_logger(__name__)


def _dedup_view(entry: dict) -> Optional[Record]:
    """Keep just title and body when other fields are unusable."""
    title = entry.get("title")
    if not isinstance(title, str) or not title:
        return None
    body = entry.get("body", entry.get("prompt"))
    return Record(title=title, body=body if isinstance(body, str) else "")


def load_reference(path: str) -> List[Record]:
    """Read a JSON array of records; any failure degrades to an empty list."""
    if not path or not os.path.exists(path):
        logger.info("reference not found path=%s, assuming empty library", path)
        return []

    try:
        raw = json.loads(load_file(path))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("could not read reference path=%s (%s), assuming empty library", path, e)
        return []

    if not isinstance(raw, list):
        logger.warning("reference path=%s is not a JSON array, assuming empty library", path)
        return []

    records: List[Record] = []
    skipped = 0
    for entry in raw:
        if not isinstance(entry, dict):
            skipped += 1
            continue
        try:
            records.append(Record.model_validate(entry))
        except ValidationError:
            rec = _dedup_view(entry)
            if rec is None:
                skipped += 1
            else:
                records.append(rec)

    logger.info("loaded reference prompts=%d skipped=%d path=%s", len(records), skipped, path)
    return records
