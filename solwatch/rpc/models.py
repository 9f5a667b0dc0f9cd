"""
Data models for ledger RPC output.

Normalized records built from raw JSON-RPC result items; these are the units
handed to watcher callbacks and analytics services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SignatureInfo:
    """
    Normalized transaction signature info from getSignaturesForAddress.

    Mirrors the RPC response fields. Only the signature is guaranteed; the
    node may omit slot and blockTime.
    """

    signature: str
    slot: int | None = None
    err: Any = None  # None if success; dict from RPC if failed
    block_time: int | None = None  # Unix timestamp
    memo: str | None = None
    confirmation_status: str | None = None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        slot = item.get("slot")
        block_time = item.get("blockTime")
        return cls(
            signature=item["signature"],
            slot=int(slot) if slot is not None else None,
            err=item.get("err"),
            block_time=int(block_time) if block_time is not None else None,
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "slot": self.slot,
            "err": self.err,
            "block_time": self.block_time,
            "memo": self.memo,
            "confirmation_status": self.confirmation_status,
        }


@dataclass(frozen=True)
class SplTransfer:
    """One parsed spl-token transfer instruction."""

    signature: str
    source: str | None
    destination: str | None
    mint: str | None
    amount: float  # raw base units
    decimals: int | None
    slot: int | None
    block_time: int | None
