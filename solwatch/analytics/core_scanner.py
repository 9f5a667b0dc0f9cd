"""
Core token scanner: holder counts, recent spl-token transfers, and a simple
risk score (transfer volume relative to supply, scaled by holder count).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.parser import spl_transfers, token_account_balance
from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TRANSFER_LIMIT = 50
RISK_TRANSFER_LIMIT = 100


@dataclass(frozen=True)
class Holdings:
    holder_count: int
    total_supply: float


@dataclass(frozen=True)
class TransferRecord:
    signature: str
    amount: float
    timestamp: int  # unix ms; 0 when the node has no block time


@dataclass(frozen=True)
class TokenRiskMetrics:
    total_supply: float
    holder_count: int
    recent_transfers: list[TransferRecord] = field(default_factory=list)
    risk_score: int = 0  # 0-100


def compute_risk_score(total_supply: float, holder_count: int, transfers: list[TransferRecord]) -> int:
    recent_volume = sum(t.amount for t in transfers)
    usage_ratio = recent_volume / total_supply if total_supply else 0.0
    holder_factor = holder_count / 100 if holder_count > 0 else 1
    return min(100, round(usage_ratio * 100 * holder_factor))


class CoreScannerService:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def scan_holdings(self, mint: str) -> Holdings:
        accounts = await self._client.get_parsed_token_accounts_by_mint(mint)
        balances = [token_account_balance(a) for a in accounts]
        return Holdings(
            holder_count=sum(1 for b in balances if b > 0),
            total_supply=sum(balances),
        )

    async def scan_recent_transfers(self, mint: str, limit: int = DEFAULT_TRANSFER_LIMIT) -> list[TransferRecord]:
        """
        Parsed spl-token transfers in the last `limit` transactions touching mint.
        Amounts are scaled by decimals when the instruction carries them
        (transferChecked); plain transfers stay in base units.
        """
        sigs = await self._client.get_signatures_for_address(mint, limit=limit)
        block_times = {s.signature: s.block_time for s in sigs}
        txs = await self._client.get_parsed_transactions([s.signature for s in sigs])
        records: list[TransferRecord] = []
        for sig, tx in txs:
            if not tx:
                continue
            for t in spl_transfers(tx, sig):
                amount = t.amount / 10 ** t.decimals if t.decimals is not None else t.amount
                records.append(
                    TransferRecord(
                        signature=sig,
                        amount=amount,
                        timestamp=(block_times.get(sig) or 0) * 1000,
                    )
                )
        return records

    async def compute_risk(self, mint: str) -> TokenRiskMetrics:
        holdings = await self.scan_holdings(mint)
        transfers = await self.scan_recent_transfers(mint, RISK_TRANSFER_LIMIT)
        score = compute_risk_score(holdings.total_supply, holdings.holder_count, transfers)
        logger.info(
            "token_risk_computed",
            mint=mint,
            holder_count=holdings.holder_count,
            transfer_count=len(transfers),
            risk_score=score,
        )
        return TokenRiskMetrics(
            total_supply=holdings.total_supply,
            holder_count=holdings.holder_count,
            recent_transfers=transfers,
            risk_score=score,
        )
