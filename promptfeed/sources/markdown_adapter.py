"""Fetch a markdown README over HTTP."""

from __future__ import annotations

import time

import requests

from promptfeed.models import SourceDescriptor
from promptfeed.utils import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "promptfeed/0.1"


class FetchError(RuntimeError):
    """The document could not be retrieved; ``reason`` is operator-facing."""

    def __init__(self, source_name: str, reason: str):
        super().__init__(f"{source_name}: {reason}")
        self.source_name = source_name
        self.reason = reason


def fetch(source: SourceDescriptor, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Retrieve the document text for ``source`` with a single GET."""
    logger.info("fetching source=%s url=%s", source.name, source.url)
    t0 = time.monotonic()
    try:
        r = requests.get(source.url, timeout=timeout, headers={"User-Agent": USER_AGENT})
    except requests.RequestException as e:
        raise FetchError(source.name, f"{type(e).__name__}: {e}") from e

    if not r.ok:
        raise FetchError(source.name, f"HTTP Error {r.status_code}")

    # raw.githubusercontent.com serves text/plain without a charset
    if not r.encoding or r.encoding.lower() == "iso-8859-1":
        r.encoding = "utf-8"
    text = r.text
    logger.info("fetched source=%s chars=%d took_ms=%d", source.name, len(text), int((time.monotonic() - t0) * 1000))
    return text
