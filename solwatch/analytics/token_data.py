"""Mint metadata: total supply and decimals."""

from __future__ import annotations

from dataclasses import dataclass

from solwatch.core.exceptions import AccountDataError
from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.parser import ui_amount
from solwatch.utils.address_utils import normalize_address


@dataclass(frozen=True)
class TokenMetadata:
    mint: str
    supply: float
    decimals: int


class TokenDataService:
    def __init__(self, client: LedgerRpcClient) -> None:
        self._client = client

    async def fetch_mint_info(self, mint: str) -> TokenMetadata:
        """Read the parsed mint account. Raises AccountDataError when it is missing or not a mint."""
        mint = normalize_address(mint)
        account = await self._client.get_parsed_account_info(mint)
        data = (account or {}).get("data")
        if not isinstance(data, dict):
            raise AccountDataError("Invalid mint account data")
        info = (data.get("parsed") or {}).get("info")
        if not isinstance(info, dict) or "supply" not in info or "decimals" not in info:
            raise AccountDataError("Invalid mint account data")
        try:
            decimals = int(info["decimals"])
            supply = int(info["supply"]) / 10 ** decimals
        except (TypeError, ValueError) as e:
            raise AccountDataError(f"Invalid mint account data: {e}") from e
        return TokenMetadata(mint=mint, supply=supply, decimals=decimals)

    async def fetch_supply(self, mint: str) -> float:
        value = await self._client.get_token_supply(mint)
        return ui_amount(value)
