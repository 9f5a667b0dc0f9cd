"""Weekday x hour activity heatmap for the last 7 days (UTC, weekday 0 = Sunday)."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.models import SignatureInfo

HEATMAP_SIGNATURE_LIMIT = 1000
WEEK_SEC = 7 * 24 * 3600


@dataclass(frozen=True)
class HeatmapPoint:
    weekday: int
    hour: int
    count: int


def build_heatmap(sigs: list[SignatureInfo], now: float) -> list[HeatmapPoint]:
    """168 points ordered (weekday, hour); signatures older than a week are skipped."""
    week_ago = now - WEEK_SEC
    counts: dict[tuple[int, int], int] = {}
    for s in sigs:
        if not s.block_time or s.block_time < week_ago:
            continue
        dt = datetime.fromtimestamp(s.block_time, tz=timezone.utc)
        key = ((dt.weekday() + 1) % 7, dt.hour)
        counts[key] = counts.get(key, 0) + 1
    return [
        HeatmapPoint(weekday=day, hour=hour, count=counts.get((day, hour), 0))
        for day in range(7)
        for hour in range(24)
    ]


class TokenActivityHeatmap:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def generate(self, mint: str, *, now: float | None = None) -> list[HeatmapPoint]:
        sigs = await self._client.get_signatures_for_address(mint, limit=HEATMAP_SIGNATURE_LIMIT)
        return build_heatmap(sigs, time.time() if now is None else now)
