"""
Price drift between two ticker vendors.

DriftFetcher reads `{base_url}/tickers/{symbol}?source={vendor}` for two
vendors concurrently; DriftEvaluator turns a pair of prices into a percentage
deviation against their mean and an alert/stable status.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import httpx

from solwatch.core.exceptions import RpcError
from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)

DEFAULT_THRESHOLD_PERCENT = 1.5
STATUS_ALERT = "alert"
STATUS_STABLE = "stable"


@dataclass(frozen=True)
class SourcePrice:
    value: float
    label: str


@dataclass(frozen=True)
class DriftResult:
    from_label: str
    to_label: str
    base_price: float
    compare_price: float
    deviation: float  # percent, 3 dp
    status: str


class DriftFetcher:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: float = 15.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def get_price(self, symbol: str, vendor: str) -> float:
        """Price from one vendor; 0 when the payload has none. Non-2xx raises RpcError."""
        try:
            resp = await self._http.get(
                f"{self._base_url}/tickers/{symbol}", params={"source": vendor}
            )
        except httpx.HTTPError as e:
            raise RpcError(f"Unable to fetch from {vendor}: {e}") from e
        if not resp.is_success:
            raise RpcError(f"Unable to fetch from {vendor}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise RpcError(f"Unable to fetch from {vendor}: invalid JSON") from e
        price = payload.get("price") if isinstance(payload, dict) else None
        return float(price) if price is not None else 0.0

    async def compare(self, symbol: str, vendor_a: str, vendor_b: str) -> dict[str, float]:
        price_a, price_b = await asyncio.gather(
            self.get_price(symbol, vendor_a),
            self.get_price(symbol, vendor_b),
        )
        return {vendor_a: price_a, vendor_b: price_b}


class DriftEvaluator:
    def __init__(self, threshold_percent: float = DEFAULT_THRESHOLD_PERCENT) -> None:
        self.threshold = threshold_percent

    def evaluate(self, base: SourcePrice, compare: SourcePrice) -> DriftResult:
        average = (base.value + compare.value) / 2
        deviation = (base.value - compare.value) / average * 100 if average else 0.0
        status = STATUS_ALERT if abs(deviation) > self.threshold else STATUS_STABLE
        if status == STATUS_ALERT:
            logger.warning(
                "price_drift_alert",
                base=base.label,
                compare=compare.label,
                deviation=round(deviation, 3),
            )
        return DriftResult(
            from_label=base.label,
            to_label=compare.label,
            base_price=base.value,
            compare_price=compare.value,
            deviation=round(deviation, 3),
            status=status,
        )
