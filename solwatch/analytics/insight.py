"""
Insight analyzers for a mint.

- TokenActivityAnalyzer: transactions per hour over the last 24 hours.
- TokenDeepAnalyzer: holder count, summed balances, average and active holders.
- TokenPatternDetector: flags large spl-token transfers and token-swap events.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.models import SignatureInfo
from solwatch.rpc.parser import (
    SPL_TOKEN_SWAP_PROGRAM,
    program_names,
    spl_transfers,
    token_account_balance,
)

ACTIVITY_SIGNATURE_LIMIT = 1000
ACTIVITY_WINDOW_HOURS = 24
LARGE_TRANSFER_THRESHOLD = 1_000_000
DEFAULT_PATTERN_LIMIT = 100

PATTERN_LARGE_TRANSFER = "large-transfer"
PATTERN_SWAP_EVENT = "swap-event"


@dataclass(frozen=True)
class ActivityPoint:
    timestamp: int  # bucket start, unix ms
    transfers: int


@dataclass(frozen=True)
class DeepMetrics:
    holder_count: int
    total_supply: float
    avg_balance: float
    active_holders: int


@dataclass(frozen=True)
class PatternAlert:
    signature: str
    pattern: str
    slot: int | None


def bucket_hourly_activity(sigs: list[SignatureInfo], now: float) -> list[ActivityPoint]:
    """24 hourly buckets ending at now; signatures without block time or older are ignored."""
    window_start = now - ACTIVITY_WINDOW_HOURS * 3600
    buckets = [0] * ACTIVITY_WINDOW_HOURS
    for s in sigs:
        if not s.block_time or s.block_time < window_start:
            continue
        hour = int((s.block_time - window_start) // 3600)
        if 0 <= hour < ACTIVITY_WINDOW_HOURS:
            buckets[hour] += 1
    return [
        ActivityPoint(timestamp=int((window_start + h * 3600) * 1000), transfers=count)
        for h, count in enumerate(buckets)
    ]


class TokenActivityAnalyzer:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def analyze(self, mint: str, *, now: float | None = None) -> list[ActivityPoint]:
        sigs = await self._client.get_signatures_for_address(mint, limit=ACTIVITY_SIGNATURE_LIMIT)
        return bucket_hourly_activity(sigs, time.time() if now is None else now)


class TokenDeepAnalyzer:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def analyze(self, mint: str) -> DeepMetrics:
        accounts = await self._client.get_parsed_token_accounts_by_mint(mint)
        balances = [token_account_balance(a) for a in accounts]
        total = sum(balances)
        holder_count = len(balances)
        return DeepMetrics(
            holder_count=holder_count,
            total_supply=total,
            avg_balance=total / holder_count if holder_count else 0.0,
            active_holders=sum(1 for b in balances if b > 0),
        )


class TokenPatternDetector:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def detect(self, mint: str, limit: int = DEFAULT_PATTERN_LIMIT) -> list[PatternAlert]:
        sigs = await self._client.get_signatures_for_address(mint, limit=limit)
        txs = await self._client.get_parsed_transactions([s.signature for s in sigs])
        alerts: list[PatternAlert] = []
        for sig, tx in txs:
            if not tx:
                continue
            slot = tx.get("slot")
            for t in spl_transfers(tx, sig):
                if t.amount > LARGE_TRANSFER_THRESHOLD:
                    alerts.append(PatternAlert(sig, PATTERN_LARGE_TRANSFER, slot))
            for program in program_names(tx):
                if program == SPL_TOKEN_SWAP_PROGRAM:
                    alerts.append(PatternAlert(sig, PATTERN_SWAP_EVENT, slot))
        return alerts
