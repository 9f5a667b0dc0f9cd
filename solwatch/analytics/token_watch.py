"""
Token watch for a wallet: per-mint received/sent tallies and large
("suspicious") spl-token transfers over its recent transactions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.models import SplTransfer
from solwatch.rpc.parser import spl_transfers
from solwatch.utils.address_utils import normalize_address

SIGNATURE_WINDOW = 200
DEFAULT_SUSPICIOUS_THRESHOLD = 1_000_000


@dataclass(frozen=True)
class TokenGroup:
    mint: str
    total_received: float
    total_sent: float


@dataclass(frozen=True)
class SuspiciousEvent:
    signature: str
    mint: str | None
    amount: float
    direction: str  # "in" | "out"


@dataclass(frozen=True)
class TokenAnalysis:
    groups: list[TokenGroup] = field(default_factory=list)
    suspicious: list[SuspiciousEvent] = field(default_factory=list)


class TokenWatchService:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def _recent_transfers(self, address: str) -> list[SplTransfer]:
        sigs = await self._client.get_signatures_for_address(address, limit=SIGNATURE_WINDOW)
        txs = await self._client.get_parsed_transactions([s.signature for s in sigs])
        transfers: list[SplTransfer] = []
        for sig, tx in txs:
            if tx:
                transfers.extend(spl_transfers(tx, sig))
        return transfers

    @staticmethod
    def _group(address: str, transfers: list[SplTransfer]) -> list[TokenGroup]:
        tally: dict[str, dict[str, float]] = {}
        for t in transfers:
            mint = t.mint or "unknown"
            bucket = tally.setdefault(mint, {"recv": 0.0, "sent": 0.0})
            bucket["recv" if t.destination == address else "sent"] += t.amount
        return [
            TokenGroup(mint=mint, total_received=v["recv"], total_sent=v["sent"])
            for mint, v in tally.items()
        ]

    @staticmethod
    def _suspicious(address: str, transfers: list[SplTransfer], threshold: float) -> list[SuspiciousEvent]:
        return [
            SuspiciousEvent(
                signature=t.signature,
                mint=t.mint,
                amount=t.amount,
                direction="in" if t.destination == address else "out",
            )
            for t in transfers
            if t.amount >= threshold
        ]

    async def group_by_token(self, address: str) -> list[TokenGroup]:
        address = normalize_address(address)
        return self._group(address, await self._recent_transfers(address))

    async def detect_suspicious(
        self, address: str, threshold: float = DEFAULT_SUSPICIOUS_THRESHOLD
    ) -> list[SuspiciousEvent]:
        address = normalize_address(address)
        return self._suspicious(address, await self._recent_transfers(address), threshold)

    async def analyze_token(self, address: str) -> TokenAnalysis:
        """Groups and suspicious events from a single pass over recent transfers."""
        address = normalize_address(address)
        transfers = await self._recent_transfers(address)
        return TokenAnalysis(
            groups=self._group(address, transfers),
            suspicious=self._suspicious(address, transfers, DEFAULT_SUSPICIOUS_THRESHOLD),
        )
