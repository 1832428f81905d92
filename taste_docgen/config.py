from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
OUTPUT_DIR = PROJECT_ROOT / "output"
LOG_DIR = PROJECT_ROOT / "logs"
DEFAULT_SETTINGS_PATH = OUTPUT_DIR / "settings.json"
SETTINGS_PATH_ENV = "TDG_SETTINGS_PATH"

LOG_FILE_PREFIX = "docgen"
LOG_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

HOOK_OPEN = "<"
HOOK_CLOSE = "/>"
DEFAULT_TAG = "TDG:"
TEMPLATE_VERB = "template"
DOCUMENT_VERB = "document"

STYLE_ID_SUFFIX = "_tdg"
DEFAULT_IMAGE_CONTENT_TYPE = "image/png"

DEFAULT_TEMPLATE_PROCESSOR_BINARY = "template-processor"
DEFAULT_TEMPLATE_PROFILE = "md2docx"
DEFAULT_SYSTEM_OBJECT_EXPORTER_BINARY = "Opus2.SystemObjectCLIExporter"
DEFAULT_SYSTEM_OBJECT_TYPES = (
    "On-board memory",
    "On-board parameter",
    "File System",
    "Event definition",
    "Housekeeping parameter report structure",
)
DEFAULT_PROCESS_TIMEOUT_SEC: float | None = None
WORKING_DIR_PREFIX = "tdg_"


def ensure_base_dirs() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)


def build_log_path(ts: datetime | None = None) -> Path:
    if ts is None:
        ts = datetime.now()
    name = f"{LOG_FILE_PREFIX}_{ts.strftime(LOG_TIMESTAMP_FORMAT)}.log"
    return LOG_DIR / name


def resolve_settings_path(path: str | Path | None = None) -> Path:
    if path:
        return Path(path)
    env = os.environ.get(SETTINGS_PATH_ENV)
    if env:
        return Path(env)
    return DEFAULT_SETTINGS_PATH


def cleanup_logs(retention_days: int = 5, now: datetime | None = None) -> int:
    if retention_days <= 0:
        return 0
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        return 0
    base_time = now or datetime.now()
    cutoff = base_time.timestamp() - retention_days * 86400
    removed = 0
    for path in LOG_DIR.glob(f"{LOG_FILE_PREFIX}_*.log"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except OSError:
            continue
    return removed
