"""In-memory frame store and alert store."""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Any

ALERT_INFO = "info"
ALERT_WARNING = "warning"
ALERT_CRITICAL = "critical"
ALERT_LEVELS = (ALERT_INFO, ALERT_WARNING, ALERT_CRITICAL)


@dataclass(frozen=True)
class Frame:
    id: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0  # unix ms
    seq: int = 0  # insertion order, breaks timestamp ties


class OutframeService:
    def __init__(self, max_frames: int | None = None) -> None:
        self._frames: list[Frame] = []
        self._seq = itertools.count()
        self._max_frames = max_frames

    def add_frame(self, frame_id: str, payload: dict[str, Any]) -> Frame:
        frame = Frame(
            id=frame_id,
            payload=dict(payload),
            timestamp=int(time.time() * 1000),
            seq=next(self._seq),
        )
        self._frames.append(frame)
        if self._max_frames is not None and len(self._frames) > self._max_frames:
            del self._frames[: len(self._frames) - self._max_frames]
        return frame

    def get_latest(self, frame_id: str, count: int = 1) -> list[Frame]:
        """Newest first."""
        matching = [f for f in self._frames if f.id == frame_id]
        matching.sort(key=lambda f: (f.timestamp, f.seq), reverse=True)
        return matching[: max(0, count)]

    def get_recent(self, count: int) -> list[Frame]:
        """Newest first across all ids."""
        ordered = sorted(self._frames, key=lambda f: (f.timestamp, f.seq), reverse=True)
        return ordered[: max(0, count)]

    def clear(self, frame_id: str | None = None) -> None:
        if frame_id:
            self._frames = [f for f in self._frames if f.id != frame_id]
        else:
            self._frames = []


@dataclass(frozen=True)
class Alert:
    level: str
    message: str
    timestamp: int  # unix ms


def alert_level_for(count: int) -> str:
    if count > 10:
        return ALERT_CRITICAL
    if count > 5:
        return ALERT_WARNING
    return ALERT_INFO


class AlertService:
    def __init__(self) -> None:
        self._alerts: list[Alert] = []

    def push(self, message: str, count: int) -> Alert:
        alert = Alert(level=alert_level_for(count), message=message, timestamp=int(time.time() * 1000))
        self._alerts.append(alert)
        return alert

    def get_all(self) -> list[Alert]:
        return list(self._alerts)

    def clear(self, level: str | None = None) -> None:
        if level:
            self._alerts = [a for a in self._alerts if a.level != level]
        else:
            self._alerts = []
