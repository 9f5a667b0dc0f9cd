"""
Ledger RPC package.

Async JSON-RPC client for Solana nodes plus the normalized records and parse
helpers shared by the watcher and analytics services.
"""

from solwatch.rpc.client import TOKEN_PROGRAM_ID, LedgerRpcClient
from solwatch.rpc.models import SignatureInfo, SplTransfer

__all__ = [
    "LedgerRpcClient",
    "SignatureInfo",
    "SplTransfer",
    "TOKEN_PROGRAM_ID",
]
