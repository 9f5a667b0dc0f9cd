"""
Async Solana JSON-RPC client.

Thin wrapper over httpx.AsyncClient that builds JSON-RPC 2.0 bodies, raises
RpcError on transport or RPC-level errors, and returns the `result` (or its
`value` for context-wrapped responses). Address arguments are validated before
any request is sent.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx

from solwatch.core.exceptions import RpcError
from solwatch.rpc.models import SignatureInfo
from solwatch.solwatch_logging import get_logger
from solwatch.utils.address_utils import normalize_address

logger = get_logger(__name__)

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
# SPL token account layout size; mint pubkey sits at offset 0
TOKEN_ACCOUNT_SIZE = 165
DEFAULT_TIMEOUT_SEC = 30.0
MAX_SIGNATURES_LIMIT = 1000


class LedgerRpcClient:
    """Solana JSON-RPC over HTTP. Use as an async context manager or call aclose()."""

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not rpc_url or not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.strip()
        self._commitment = commitment
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))
        self._ids = itertools.count(1)

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def commitment(self) -> str:
        return self._commitment

    async def __aenter__(self) -> "LedgerRpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call; raise RpcError on transport or RPC error."""
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._http.post(self._rpc_url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise RpcError(f"Solana RPC transport error: {e}", method=method) from e
        except ValueError as e:
            raise RpcError(f"Solana RPC returned invalid JSON: {e}", method=method) from e
        if not isinstance(data, dict):
            raise RpcError("Solana RPC returned a non-object response", method=method)
        if data.get("error"):
            err = data["error"]
            message = err.get("message", err) if isinstance(err, dict) else err
            code = err.get("code") if isinstance(err, dict) else None
            raise RpcError(f"Solana RPC error: {message} (code={code})", code=code, method=method)
        if "result" not in data:
            raise RpcError("Solana RPC returned no result", method=method)
        return data["result"]

    @staticmethod
    def _value(result: Any) -> Any:
        if isinstance(result, dict) and "value" in result:
            return result["value"]
        return result

    async def get_signatures_for_address(
        self,
        address: str,
        *,
        limit: int = 10,
        commitment: str | None = None,
        before: str | None = None,
    ) -> list[SignatureInfo]:
        """Most recent signatures for address, newest first."""
        if not (1 <= limit <= MAX_SIGNATURES_LIMIT):
            raise ValueError(f"limit must be between 1 and {MAX_SIGNATURES_LIMIT}")
        opts: dict[str, Any] = {"limit": limit, "commitment": commitment or self._commitment}
        if before is not None:
            opts["before"] = before
        result = await self.call("getSignaturesForAddress", [normalize_address(address), opts])
        items = result if isinstance(result, list) else []
        infos: list[SignatureInfo] = []
        for item in items:
            if not isinstance(item, dict) or "signature" not in item:
                continue
            try:
                infos.append(SignatureInfo.from_rpc_item(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.debug("rpc_signature_item_skipped", error=str(e))
        return infos

    async def get_balance(self, address: str) -> int:
        """Balance in lamports."""
        result = await self.call(
            "getBalance", [normalize_address(address), {"commitment": self._commitment}]
        )
        return int(self._value(result) or 0)

    async def get_account_info(self, address: str, *, encoding: str = "base64") -> dict[str, Any] | None:
        """Raw account (lamports, owner, data, ...) or None when the account does not exist."""
        result = await self.call(
            "getAccountInfo",
            [normalize_address(address), {"encoding": encoding, "commitment": self._commitment}],
        )
        return self._value(result)

    async def get_parsed_account_info(self, address: str) -> dict[str, Any] | None:
        return await self.get_account_info(address, encoding="jsonParsed")

    async def get_token_supply(self, mint: str) -> dict[str, Any]:
        """Token supply value: {amount, decimals, uiAmount, uiAmountString}."""
        result = await self.call(
            "getTokenSupply", [normalize_address(mint), {"commitment": self._commitment}]
        )
        value = self._value(result)
        if not isinstance(value, dict):
            raise RpcError("Solana RPC returned no token supply", method="getTokenSupply")
        return value

    async def get_parsed_token_accounts_by_owner(
        self, owner: str, *, program_id: str = TOKEN_PROGRAM_ID
    ) -> list[dict[str, Any]]:
        """jsonParsed token accounts held by owner: [{pubkey, account}, ...]."""
        result = await self.call(
            "getTokenAccountsByOwner",
            [
                normalize_address(owner),
                {"programId": program_id},
                {"encoding": "jsonParsed", "commitment": self._commitment},
            ],
        )
        value = self._value(result)
        return value if isinstance(value, list) else []

    async def get_parsed_token_accounts_by_mint(self, mint: str) -> list[dict[str, Any]]:
        """jsonParsed token accounts of a mint (every holder account), via getProgramAccounts."""
        result = await self.call(
            "getProgramAccounts",
            [
                TOKEN_PROGRAM_ID,
                {
                    "encoding": "jsonParsed",
                    "commitment": self._commitment,
                    "filters": [
                        {"dataSize": TOKEN_ACCOUNT_SIZE},
                        {"memcmp": {"offset": 0, "bytes": normalize_address(mint)}},
                    ],
                },
            ],
        )
        value = self._value(result)
        return value if isinstance(value, list) else []

    async def get_parsed_transactions(
        self, signatures: list[str], *, concurrency: int = 8
    ) -> list[tuple[str, dict[str, Any] | None]]:
        """
        Fetch many jsonParsed transactions with bounded concurrency, preserving
        input order. A failed fetch yields None for that signature (logged).
        """
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def _one(sig: str) -> tuple[str, dict[str, Any] | None]:
            async with semaphore:
                try:
                    return sig, await self.get_parsed_transaction(sig)
                except RpcError as e:
                    logger.warning("rpc_transaction_fetch_failed", signature=sig[:16], error=str(e))
                    return sig, None

        return list(await asyncio.gather(*(_one(s) for s in signatures)))

    async def get_parsed_transaction(self, signature: str) -> dict[str, Any] | None:
        """jsonParsed transaction, or None when the node no longer has it."""
        if not signature or not signature.strip():
            raise ValueError("signature must be non-empty")
        return await self.call(
            "getTransaction",
            [
                signature.strip(),
                {
                    "encoding": "jsonParsed",
                    "commitment": self._commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
