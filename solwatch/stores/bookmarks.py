"""Token bookmarks persisted to tokmarks.json in the storage directory."""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

from solwatch.solwatch_logging import get_logger
from solwatch.stores.json_store import read_json, write_json_atomic
from solwatch.utils.address_utils import normalize_address

logger = get_logger(__name__)

BOOKMARKS_FILE = "tokmarks.json"


@dataclass(frozen=True)
class TokenBookmark:
    mint: str
    label: str
    added_at: str  # ISO 8601


class TokMarkService:
    """Bookmarks kept in memory and rewritten to disk on every change; thread-safe."""

    def __init__(self, storage_dir: Path | str) -> None:
        self._path = Path(storage_dir) / BOOKMARKS_FILE
        self._lock = threading.Lock()
        self._bookmarks = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[TokenBookmark]:
        raw = read_json(self._path, [])
        bookmarks: list[TokenBookmark] = []
        for item in raw if isinstance(raw, list) else []:
            try:
                bookmarks.append(
                    TokenBookmark(mint=item["mint"], label=item.get("label", ""), added_at=item["added_at"])
                )
            except (KeyError, TypeError, AttributeError):
                logger.warning("bookmark_entry_skipped", path=str(self._path))
        return bookmarks

    def _save(self) -> None:
        write_json_atomic(self._path, [asdict(b) for b in self._bookmarks])

    def list(self) -> list[TokenBookmark]:
        with self._lock:
            return list(self._bookmarks)

    def add(self, mint: str, label: str = "") -> TokenBookmark:
        """Bookmark mint; an existing bookmark for the same mint is returned unchanged."""
        mint = normalize_address(mint)
        with self._lock:
            for b in self._bookmarks:
                if b.mint == mint:
                    return b
            bookmark = TokenBookmark(
                mint=mint,
                label=label.strip(),
                added_at=datetime.now(timezone.utc).isoformat(),
            )
            self._bookmarks.append(bookmark)
            self._save()
        logger.info("bookmark_added", mint=mint)
        return bookmark

    def remove(self, mint: str) -> bool:
        with self._lock:
            before = len(self._bookmarks)
            self._bookmarks = [b for b in self._bookmarks if b.mint != mint.strip()]
            removed = len(self._bookmarks) < before
            if removed:
                self._save()
        return removed

    def clear(self) -> None:
        with self._lock:
            self._bookmarks = []
            self._save()
