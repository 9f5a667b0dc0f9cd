"""
JSON file persistence with atomic writes.

Writes go to a temp file in the target directory, are flushed and fsynced,
then moved over the target with os.replace so readers never see a partial file.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)


def read_json(path: Path, default: Any) -> Any:
    """Load JSON from path; missing, unreadable or corrupt files return default."""
    if not path.exists():
        return default
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("json_store_read_failed", path=str(path), error=str(e))
        return default


def write_json_atomic(path: Path, obj: Any) -> None:
    """Serialize obj to path via temp-file-then-rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise
