"""Address validation utilities."""

from __future__ import annotations

from solders.pubkey import Pubkey

from solwatch.core.exceptions import InvalidAddressError


def parse_address(address: str) -> Pubkey:
    """Return the typed public key for address; raise InvalidAddressError if malformed."""
    if not isinstance(address, str) or not address.strip():
        raise InvalidAddressError(address, "must be a non-empty string")
    try:
        return Pubkey.from_string(address.strip())
    except Exception as e:
        # bad base58 or wrong length
        raise InvalidAddressError(address, str(e)) from e


def normalize_address(address: str) -> str:
    """Validate address and return its canonical base58 form."""
    return str(parse_address(address))


def is_valid_address(address: str) -> bool:
    """Return True if address is a valid Solana public key."""
    try:
        parse_address(address)
        return True
    except InvalidAddressError:
        return False
