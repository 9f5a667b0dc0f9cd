"""
Application-level exceptions.

Services raise these; the API server maps them to HTTP status codes and the
background watcher logs them without propagating.
"""

from __future__ import annotations

from typing import Any


class SolwatchError(Exception):
    """Base class for all solwatch errors."""


class InvalidAddressError(SolwatchError, ValueError):
    """A string is not a valid base58 Solana public key."""

    def __init__(self, address: Any, reason: str | None = None) -> None:
        self.address = address
        msg = f"Invalid Solana address: {address!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class RpcError(SolwatchError):
    """Transport failure or JSON-RPC error payload from the ledger node."""

    def __init__(self, message: str, *, code: int | None = None, method: str | None = None) -> None:
        self.code = code
        self.method = method
        super().__init__(message)


class AccountDataError(SolwatchError):
    """Account is missing or its data cannot be interpreted."""


class ExecutionTimeoutError(SolwatchError, TimeoutError):
    """An attempt run through the retry wrapper exceeded its timeout."""
