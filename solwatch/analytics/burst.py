"""
Burst predictor: a naive confidence that the next hour sees a burst, from how
evenly balances are spread across the mint's token accounts.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.parser import token_account_balance


@dataclass(frozen=True)
class BurstPrediction:
    mint: str
    start: int  # unix seconds
    end: int
    confidence: float


def predict_burst(mint: str, amounts: list[float], now: float) -> BurstPrediction:
    avg = sum(amounts) / (len(amounts) or 1)
    peak = max([*amounts, 1.0])
    start = now + 3600
    end = start + 3600
    return BurstPrediction(
        mint=mint,
        start=int(start),
        end=int(end),
        confidence=min(1.0, avg / peak),
    )


class TokenBurstPredictor:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def predict(self, mint: str, *, now: float | None = None) -> BurstPrediction:
        accounts = await self._client.get_parsed_token_accounts_by_mint(mint)
        amounts = [token_account_balance(a) for a in accounts]
        return predict_burst(mint, amounts, time.time() if now is None else now)
