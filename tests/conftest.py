"""
Pytest fixtures for solwatch tests.

StubRpcClient stands in for LedgerRpcClient: scripted signature pages per
address, canned accounts and transactions, and a record of calls. The API
client fixture builds a fresh app over the stub with a temporary storage dir.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from solwatch.config import Settings
from solwatch.rpc.models import SignatureInfo

# Valid Solana pubkeys (base58, 32 bytes)
WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
WALLET_2 = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
WSOL_MINT = "So11111111111111111111111111111111111111112"


def sig(signature: str, block_time: int | None = None, slot: int | None = None) -> SignatureInfo:
    return SignatureInfo(signature=signature, slot=slot, block_time=block_time)


def token_account(mint: str, owner: str, ui_amount: float, decimals: int = 6) -> dict[str, Any]:
    """jsonParsed token account item as returned by getTokenAccountsByOwner / getProgramAccounts."""
    return {
        "pubkey": WALLET_2,
        "account": {
            "lamports": 2039280,
            "data": {
                "program": "spl-token",
                "parsed": {
                    "type": "account",
                    "info": {
                        "mint": mint,
                        "owner": owner,
                        "tokenAmount": {
                            "amount": str(int(ui_amount * 10 ** decimals)),
                            "decimals": decimals,
                            "uiAmount": ui_amount,
                            "uiAmountString": str(ui_amount),
                        },
                    },
                },
            },
        },
    }


def transfer_tx(
    source: str,
    destination: str,
    amount: int,
    *,
    mint: str | None = None,
    decimals: int | None = None,
    slot: int = 100,
    block_time: int | None = None,
    extra_programs: tuple[str, ...] = (),
) -> dict[str, Any]:
    """jsonParsed transaction with one spl-token transfer (transferChecked when decimals given)."""
    if decimals is None:
        parsed = {"type": "transfer", "info": {"source": source, "destination": destination, "amount": str(amount)}}
    else:
        parsed = {
            "type": "transferChecked",
            "info": {
                "source": source,
                "destination": destination,
                "mint": mint,
                "tokenAmount": {"amount": str(amount), "decimals": decimals},
            },
        }
    instructions = [{"program": "spl-token", "programId": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA", "parsed": parsed}]
    instructions += [{"program": p, "parsed": {"type": "swap", "info": {}}} for p in extra_programs]
    return {
        "slot": slot,
        "blockTime": block_time,
        "transaction": {"message": {"instructions": instructions}},
    }


class StubRpcClient:
    """
    Minimal async stand-in for LedgerRpcClient.

    pages: address -> list of pages (lists of SignatureInfo) or exceptions,
    consumed one per call; the last entry repeats. Addresses without a script
    get `signatures`. Set `gate` to an asyncio.Event to hold fetches open.
    """

    def __init__(self) -> None:
        self.pages: dict[str, list[Any]] = {}
        self.signatures: list[SignatureInfo] = []
        self.transactions: dict[str, dict[str, Any] | None] = {}
        self.accounts_by_mint: list[dict[str, Any]] = []
        self.accounts_by_owner: list[dict[str, Any]] = []
        self.balance = 0
        self.account_info: dict[str, Any] | None = None
        self.parsed_account_info: dict[str, Any] | None = None
        self.token_supply: dict[str, Any] = {"amount": "0", "decimals": 0, "uiAmount": 0.0}
        self.calls: list[tuple[Any, ...]] = []
        self.gate: asyncio.Event | None = None
        self.fetch_started: asyncio.Event | None = None

    async def get_signatures_for_address(self, address, *, limit=10, commitment=None, before=None):
        self.calls.append(("getSignaturesForAddress", address, limit))
        if self.fetch_started is not None:
            self.fetch_started.set()
        if self.gate is not None:
            await self.gate.wait()
        script = self.pages.get(address)
        if script is None:
            return list(self.signatures)[:limit]
        if not script:
            return []
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return list(item)

    async def get_parsed_transactions(self, signatures, *, concurrency=8):
        self.calls.append(("getTransactions", tuple(signatures)))
        return [(s, self.transactions.get(s)) for s in signatures]

    async def get_parsed_token_accounts_by_mint(self, mint):
        self.calls.append(("getProgramAccounts", mint))
        return list(self.accounts_by_mint)

    async def get_parsed_token_accounts_by_owner(self, owner, *, program_id=None):
        self.calls.append(("getTokenAccountsByOwner", owner))
        return list(self.accounts_by_owner)

    async def get_balance(self, address):
        self.calls.append(("getBalance", address))
        return self.balance

    async def get_account_info(self, address, *, encoding="base64"):
        self.calls.append(("getAccountInfo", address, encoding))
        return self.account_info

    async def get_parsed_account_info(self, address):
        self.calls.append(("getAccountInfo", address, "jsonParsed"))
        return self.parsed_account_info

    async def get_token_supply(self, mint):
        self.calls.append(("getTokenSupply", mint))
        return self.token_supply

    async def aclose(self):
        pass


class RecordingLogger:
    """structlog-style logger that keeps (level, event, fields) tuples."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _log(self, level: str, event: str, **kw: Any) -> None:
        self.records.append((level, event, kw))

    def debug(self, event: str, **kw: Any) -> None:
        self._log("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._log("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._log("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._log("error", event, **kw)

    def events(self, level: str | None = None) -> list[str]:
        return [e for lvl, e, _ in self.records if level is None or lvl == level]


@pytest.fixture
def rpc_stub():
    return StubRpcClient()


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        rpc_url="http://rpc.test",
        commitment="confirmed",
        storage_dir=tmp_path,
        port=3000,
        redis_url=None,
        drift_api_url="http://prices.test",
        signer_secret_key=None,
        watch_interval_sec=5.0,
        watch_fetch_limit=10,
    )


@pytest.fixture
def api_app(settings, rpc_stub):
    """Fresh app over the stub RPC client. Lifespan (watcher schedule) is not started."""
    from solwatch.api_server.server import create_app

    return create_app(settings, rpc_client=rpc_stub)


@pytest.fixture
def client(api_app):
    """FastAPI TestClient over api_app."""
    from fastapi.testclient import TestClient

    return TestClient(api_app)
