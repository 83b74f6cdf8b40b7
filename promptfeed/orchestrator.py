import copy
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

import yaml

from promptfeed.extractor import extract
from promptfeed.models import Record, SourceDescriptor
from promptfeed.reference import load_reference
from promptfeed.sources import markdown_adapter
from promptfeed.sources.markdown_adapter import FetchError
from promptfeed.stages.dedup import filter_new
from promptfeed.utils import write_output, validate_config, normalize_http_url, get_logger

logger = get_logger(__name__)

STATUS_OK = "ok"
STATUS_FETCH_FAILED = "fetch_failed"

DEFAULT_CONFIG: Dict[str, Any] = {
    "source": {
        "name": "songguoxs",
        "url": "https://raw.githubusercontent.com/songguoxs/gpt4o-image-prompts/refs/heads/master/README.md",
        "default_author": "songguoxs",
        "mode": "edit",
        "category": "生活",
        "sub_category": "",
    },
    "reference_path": "extension/prompts.json",
    "output_path": "extension/daily-add.json",
    "fetch": {"timeout": 30},
}


@dataclass
class RunResult:
    status: str
    output_path: str
    extracted: int = 0
    new_records: List[Record] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def _load_config(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return copy.deepcopy(DEFAULT_CONFIG)
    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    return cfg


def _apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    if not overrides:
        return
    if overrides.get("reference_path") is not None:
        cfg["reference_path"] = overrides["reference_path"]
    if overrides.get("output_path") is not None:
        cfg["output_path"] = overrides["output_path"]
    if overrides.get("fetch_timeout") is not None:
        cfg.setdefault("fetch", {})["timeout"] = float(overrides["fetch_timeout"])  # type: ignore[arg-type]


def source_from_config(source_cfg: Dict[str, Any]) -> SourceDescriptor:
    url = normalize_http_url(source_cfg["url"])
    if url is None:
        raise ValueError(f"Config validation error: invalid source url {source_cfg['url']!r} at ['source', 'url']")
    extras = {k: source_cfg[k] for k in ("mode", "category", "sub_category") if k in source_cfg}
    return SourceDescriptor(
        name=source_cfg["name"],
        url=url,
        default_attribution=source_cfg.get("default_author", ""),
        **extras,
    )


def _execute_pipeline(cfg: Dict[str, Any]) -> RunResult:
    """Reference -> fetch -> extract -> dedup -> write, exactly one write at the end."""
    source = source_from_config(cfg["source"])
    output_path = cfg["output_path"]
    timeout = float(cfg.get("fetch", {}).get("timeout", markdown_adapter.DEFAULT_TIMEOUT))
    logger.info("config loaded source=%s reference=%s output=%s", source.name, cfg["reference_path"], output_path)

    reference = load_reference(cfg["reference_path"])

    result = RunResult(status=STATUS_OK, output_path=output_path)
    try:
        document = markdown_adapter.fetch(source, timeout=timeout)
    except FetchError as e:
        logger.error("failed to fetch %s: %s", e.source_name, e.reason)
        result.status = STATUS_FETCH_FAILED
        result.reason = e.reason
    else:
        t0 = time.monotonic()
        candidates = extract(document, source)
        result.extracted = len(candidates)
        logger.info("extracted items=%d took_ms=%d", len(candidates), int((time.monotonic() - t0) * 1000))

        result.new_records = filter_new(candidates, reference)
        logger.info("new prompts=%d", len(result.new_records))

    write_output(result.new_records, output_path)
    logger.info("output written path=%s records=%d status=%s", output_path, len(result.new_records), result.status)
    return result


def run_once(
    config_path: Optional[str] = None,
    *,
    overrides: Optional[Dict[str, Any]] = None,
) -> RunResult:
    """Execute pipeline once with given config file path (or the built-in default)."""
    run_id = uuid.uuid4().hex[:8]
    logger.info("=== run start id=%s ===", run_id)

    try:
        cfg = _load_config(config_path)
        _apply_overrides(cfg, overrides)
        validate_config(cfg)
        return _execute_pipeline(cfg)

    except Exception as e:
        logger.error("Pipeline execution failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
