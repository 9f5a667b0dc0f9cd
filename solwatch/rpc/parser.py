"""
Helpers for reshaping jsonParsed RPC payloads.

Token accounts and transactions come back as nested dicts; these functions pull
out the few fields the services use and tolerate missing keys.
"""

from __future__ import annotations

from typing import Any

from solwatch.rpc.models import SplTransfer

SPL_TOKEN_PROGRAM = "spl-token"
SPL_TOKEN_SWAP_PROGRAM = "spl-token-swap"


def _parsed_info(account: dict[str, Any]) -> dict[str, Any]:
    data = (account.get("account") or {}).get("data") or {}
    if not isinstance(data, dict):
        return {}
    parsed = data.get("parsed") or {}
    info = parsed.get("info") if isinstance(parsed, dict) else None
    return info if isinstance(info, dict) else {}


def token_account_mint(account: dict[str, Any]) -> str | None:
    """Mint of a jsonParsed token account item ({pubkey, account})."""
    return _parsed_info(account).get("mint")


def token_account_owner(account: dict[str, Any]) -> str | None:
    return _parsed_info(account).get("owner")


def ui_amount(token_amount: dict[str, Any] | None) -> float:
    """
    Human-readable amount from a tokenAmount dict.

    uiAmount is null on some nodes for zero balances; fall back to
    uiAmountString, then amount / 10**decimals.
    """
    if not token_amount:
        return 0.0
    value = token_amount.get("uiAmount")
    if value is not None:
        return float(value)
    text = token_amount.get("uiAmountString")
    if text:
        try:
            return float(text)
        except ValueError:
            pass
    try:
        raw = int(token_amount.get("amount") or 0)
        decimals = int(token_amount.get("decimals") or 0)
    except (TypeError, ValueError):
        return 0.0
    return raw / 10 ** decimals


def token_account_balance(account: dict[str, Any]) -> float:
    return ui_amount(_parsed_info(account).get("tokenAmount"))


def _instructions(tx: dict[str, Any]) -> list[dict[str, Any]]:
    message = ((tx.get("transaction") or {}).get("message")) or {}
    instructions = message.get("instructions") or []
    return [ix for ix in instructions if isinstance(ix, dict)]


def program_names(tx: dict[str, Any]) -> list[str]:
    """Program name of each top-level instruction (parsed instructions only)."""
    return [ix["program"] for ix in _instructions(tx) if ix.get("program")]


def spl_transfers(tx: dict[str, Any], signature: str) -> list[SplTransfer]:
    """
    Extract spl-token transfer / transferChecked instructions from a jsonParsed
    transaction. Amount stays in raw base units; decimals when the node reports them.
    """
    transfers: list[SplTransfer] = []
    slot = tx.get("slot")
    block_time = tx.get("blockTime")
    for ix in _instructions(tx):
        if ix.get("program") != SPL_TOKEN_PROGRAM:
            continue
        parsed = ix.get("parsed")
        if not isinstance(parsed, dict) or parsed.get("type") not in ("transfer", "transferChecked"):
            continue
        info = parsed.get("info") or {}
        token_amount = info.get("tokenAmount") or {}
        raw = info.get("amount", token_amount.get("amount"))
        decimals = info.get("decimals", token_amount.get("decimals"))
        try:
            amount = float(raw) if raw is not None else 0.0
        except (TypeError, ValueError):
            amount = 0.0
        transfers.append(
            SplTransfer(
                signature=signature,
                source=info.get("source"),
                destination=info.get("destination"),
                mint=info.get("mint"),
                amount=amount,
                decimals=int(decimals) if decimals is not None else None,
                slot=int(slot) if slot is not None else None,
                block_time=int(block_time) if block_time is not None else None,
            )
        )
    return transfers
