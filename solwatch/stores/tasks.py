"""Analytic task definitions persisted to analyticTasks.json in the storage directory."""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from solwatch.solwatch_logging import get_logger
from solwatch.stores.json_store import read_json, write_json_atomic

logger = get_logger(__name__)

TASKS_FILE = "analyticTasks.json"


@dataclass(frozen=True)
class AnalyticTask:
    id: str
    name: str
    params: dict[str, Any] = field(default_factory=dict)
    created_at: int = 0  # unix ms


class AnalyticTaskService:
    """Task list mirrored to disk; mutations hold a lock across update and save."""

    def __init__(self, storage_dir: Path | str) -> None:
        self._path = Path(storage_dir) / TASKS_FILE
        self._lock = threading.Lock()
        self._tasks = self._load()

    def _load(self) -> list[AnalyticTask]:
        raw = read_json(self._path, [])
        tasks: list[AnalyticTask] = []
        for item in raw if isinstance(raw, list) else []:
            try:
                tasks.append(
                    AnalyticTask(
                        id=str(item["id"]),
                        name=item["name"],
                        params=dict(item.get("params") or {}),
                        created_at=int(item.get("created_at") or 0),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("task_entry_skipped", path=str(self._path))
        return tasks

    def _save(self) -> None:
        write_json_atomic(self._path, [asdict(t) for t in self._tasks])

    def list(self) -> list[AnalyticTask]:
        with self._lock:
            return list(self._tasks)

    def get(self, task_id: str) -> AnalyticTask | None:
        with self._lock:
            return next((t for t in self._tasks if t.id == task_id), None)

    def create(self, name: str, params: dict[str, Any] | None = None) -> AnalyticTask:
        name = (name or "").strip()
        if not name:
            raise ValueError("name required")
        task = AnalyticTask(
            id=uuid.uuid4().hex,
            name=name,
            params=dict(params or {}),
            created_at=int(time.time() * 1000),
        )
        with self._lock:
            self._tasks.append(task)
            self._save()
        logger.info("task_created", task_id=task.id, name=name)
        return task

    def remove(self, task_id: str) -> bool:
        with self._lock:
            before = len(self._tasks)
            self._tasks = [t for t in self._tasks if t.id != task_id]
            removed = len(self._tasks) < before
            if removed:
                self._save()
        return removed
