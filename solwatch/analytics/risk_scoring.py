"""
Account-size risk scoring and a logged account probe.

RiskScoring maps account data size to a 0-100 score (10 points per KiB).
AccountProbe returns lamports and owner, reporting failures in the result
instead of raising.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any

from solwatch.rpc.client import LedgerRpcClient
from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)

RISK_HIGH = "high"
RISK_MEDIUM = "medium"
RISK_LOW = "low"


@dataclass(frozen=True)
class RiskScore:
    address: str
    score: int
    level: str


@dataclass(frozen=True)
class AgentResult:
    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def account_data_size(account: dict[str, Any] | None) -> int:
    """Byte length of a base64-encoded getAccountInfo value; 0 for missing accounts."""
    if not account:
        return 0
    data = account.get("data")
    if isinstance(data, (list, tuple)) and data and isinstance(data[0], str):
        try:
            return len(base64.b64decode(data[0]))
        except (binascii.Error, ValueError):
            return 0
    if isinstance(data, str):
        try:
            return len(base64.b64decode(data))
        except (binascii.Error, ValueError):
            return 0
    return 0


def score_from_size(size: int) -> tuple[int, str]:
    score = min(100, round(size / 1024 * 10))
    if score > 70:
        return score, RISK_HIGH
    if score > 40:
        return score, RISK_MEDIUM
    return score, RISK_LOW


class RiskScoring:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def compute(self, address: str) -> RiskScore:
        account = await self._client.get_account_info(address)
        score, level = score_from_size(account_data_size(account))
        return RiskScore(address=address, score=score, level=level)


class AccountProbe:
    """Looks up lamports and owner for an address; logs start and end of each run."""

    action_name = "AccountProbe"

    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def run(self, address: str) -> AgentResult:
        logger.info("action_start", action=self.action_name, input=address)
        result = await self._execute(address)
        logger.info(
            "action_end",
            action=self.action_name,
            success=result.success,
            error=result.error,
        )
        return result

    async def _execute(self, address: str) -> AgentResult:
        try:
            account = await self._client.get_account_info(address)
            if not account:
                raise LookupError("Account not found")
            return AgentResult(
                success=True,
                data={"lamports": int(account.get("lamports") or 0), "owner": account.get("owner")},
            )
        except Exception as e:
            return AgentResult(success=False, error=str(e))
