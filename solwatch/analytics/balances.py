"""
Wallet balances: SOL plus SPL token holdings, and an in-memory history of
captured totals per address.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from solwatch.rpc.client import TOKEN_PROGRAM_ID, LedgerRpcClient
from solwatch.rpc.parser import token_account_balance, token_account_mint
from solwatch.solwatch_logging import get_logger
from solwatch.utils.address_utils import normalize_address

logger = get_logger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000


@dataclass(frozen=True)
class TokenBalance:
    mint: str
    balance: float


@dataclass(frozen=True)
class BalanceInfo:
    sol: float
    tokens: list[TokenBalance] = field(default_factory=list)

    @property
    def token_total(self) -> float:
        return sum(t.balance for t in self.tokens)


@dataclass(frozen=True)
class BalanceSnapshot:
    timestamp: int  # unix ms
    sol: float
    token_total: float
    total_balance: float


class PullBalanceService:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def fetch_balances(self, address: str) -> BalanceInfo:
        """SOL balance and parsed SPL token balances for address."""
        lamports = await self._client.get_balance(address)
        accounts = await self._client.get_parsed_token_accounts_by_owner(
            address, program_id=TOKEN_PROGRAM_ID
        )
        tokens = [
            TokenBalance(mint=token_account_mint(acct) or "", balance=token_account_balance(acct))
            for acct in accounts
        ]
        return BalanceInfo(sol=lamports / LAMPORTS_PER_SOL, tokens=tokens)


class BalanceHistoryService:
    """Records balance snapshots per address for the life of the process."""

    def __init__(self, balances: PullBalanceService) -> None:
        self._balances = balances
        self._history: dict[str, list[BalanceSnapshot]] = {}

    async def capture(self, address: str) -> BalanceSnapshot:
        key = normalize_address(address)
        info = await self._balances.fetch_balances(key)
        snapshot = BalanceSnapshot(
            timestamp=int(time.time() * 1000),
            sol=info.sol,
            token_total=info.token_total,
            total_balance=info.sol + info.token_total,
        )
        self._history.setdefault(key, []).append(snapshot)
        logger.info("balance_captured", address=key, total_balance=snapshot.total_balance)
        return snapshot

    def get_history(self, address: str) -> list[BalanceSnapshot]:
        return list(self._history.get(address.strip(), []))
