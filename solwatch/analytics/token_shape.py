"""
Token distribution shape: mean, median, population variance and skewness of
holder balances for a mint.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.parser import token_account_balance


@dataclass(frozen=True)
class ShapeMetrics:
    mean_balance: float
    median_balance: float
    variance: float
    skewness: float


def compute_shape(values: list[float]) -> ShapeMetrics:
    """Empty input gives all zeros; zero variance gives skewness 0."""
    if not values:
        return ShapeMetrics(0.0, 0.0, 0.0, 0.0)
    arr = np.asarray(values, dtype=float)
    mean = float(arr.mean())
    variance = float(arr.var())
    if variance > 0:
        skewness = float((((arr - mean) / np.sqrt(variance)) ** 3).mean())
    else:
        skewness = 0.0
    return ShapeMetrics(
        mean_balance=mean,
        median_balance=float(np.median(arr)),
        variance=variance,
        skewness=skewness,
    )


class TokenShapeService:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def analyze_distribution(self, mint: str) -> ShapeMetrics:
        accounts = await self._client.get_parsed_token_accounts_by_mint(mint)
        return compute_shape([token_account_balance(a) for a in accounts])
