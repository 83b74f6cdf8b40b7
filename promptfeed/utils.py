import os
import re
import json
import datetime as dt
import logging
import tempfile
from logging.handlers import TimedRotatingFileHandler
from jsonschema import validate, Draft202012Validator
from jsonschema.exceptions import ValidationError
from typing import Optional, Any, Sequence
from pydantic import TypeAdapter, HttpUrl

# ---------- URL helpers ----------

_HTTP_URL_ADAPTER = TypeAdapter(HttpUrl)
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

def normalize_http_url(value: Any) -> Optional[str]:
    """Try to normalize a value into a valid http(s) URL string.

    - Trims whitespace
    - Adds scheme when missing (defaults to https://)
    - Supports protocol-relative form (//example.com)
    Returns normalized string on success; otherwise None.
    """
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    if s.startswith("//"):
        s = "https:" + s
    # If no scheme present, assume https
    if not re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*://", s):
        s = "https://" + s
    try:
        _HTTP_URL_ADAPTER.validate_python(s)
        return s
    except Exception:
        return None

def has_scheme(url: str) -> bool:
    return bool(_SCHEME_RE.match(url or ""))

def resolve_relative_url(url: str, base_url: str) -> str:
    """Join an image path found in a document onto the document's base.

    Best-effort only: ``../`` segments and query strings are passed through.
    """
    url = (url or "").strip()
    if has_scheme(url):
        return url
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("./"):
        url = url[2:]
    base = base_url.rstrip("/")
    if url.startswith("/"):
        return base + url
    return f"{base}/{url}"

# ---------- Config validation ----------

def load_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()

def validate_config(cfg: dict):
    here = os.path.dirname(os.path.abspath(__file__))
    schema_path = os.path.join(here, "schemas", "config.schema.json")
    schema = json.loads(load_file(schema_path))
    try:
        validate(instance=cfg, schema=schema, cls=Draft202012Validator)
    except ValidationError as e:
        raise ValueError(f"Config validation error: {e.message} at {list(e.path)}") from e

# ---------- Output writer ----------

def write_output(records: Sequence[Any], path: str) -> str:
    """Serialize records as a JSON array and atomically place it at ``path``.

    The payload is fully rendered before anything touches the target, so a
    failure never leaves a truncated file behind.
    """
    payload = [r.model_dump(by_alias=True) for r in records]
    text = json.dumps(payload, ensure_ascii=False, indent=4)

    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".promptfeed-", suffix=".json", dir=out_dir)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return path

# ---------- Logging ----------

_LOGGER_INITIALIZED = False

class JsonFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": dt.datetime.fromtimestamp(record.created, dt.timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)

def _build_logger():
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    # Default to a local, writable logs directory
    log_dir = os.getenv("LOG_DIR", "logs")
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"

    os.makedirs(log_dir, exist_ok=True)
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    ch = logging.StreamHandler()
    ch.setLevel(logger.level)

    fh = TimedRotatingFileHandler(os.path.join(log_dir, "promptfeed.log"), when="D", backupCount=7, encoding="utf-8")
    fh.setLevel(logger.level)

    if json_mode:
        fmt = JsonFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    ch.setFormatter(fmt)
    fh.setFormatter(fmt)
    logger.addHandler(ch)
    logger.addHandler(fh)

    _LOGGER_INITIALIZED = True

def get_logger(name: str = None) -> logging.Logger:
    _build_logger()
    return logging.getLogger(name if name else __name__)
