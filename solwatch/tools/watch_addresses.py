#!/usr/bin/env python3
"""
Watch addresses for new transactions and print each one as it arrives.

Addresses come from the command line or, when none are given, from a
comma-separated prompt.

Usage:
  python -m solwatch.tools.watch_addresses ADDR [ADDR ...] [--interval 5] [--limit 10]
  python -m solwatch.tools.watch_addresses            # prompts for addresses
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from solwatch.config.env import (
    get_commitment,
    get_solana_rpc_url,
    get_watch_fetch_limit,
    get_watch_interval_sec,
    load_solwatch_env,
    mask_rpc_url,
)
from solwatch.core.exceptions import InvalidAddressError
from solwatch.rpc.models import SignatureInfo
from solwatch.solwatch_logging import get_logger
from solwatch.watchline.watcher import AddressWatcher

logger = get_logger(__name__)


def parse_address_list(raw: str) -> list[str]:
    """Split a comma-separated input line into trimmed, non-empty addresses."""
    return [a.strip() for a in raw.split(",") if a.strip()]


def print_transaction(address: str, info: SignatureInfo) -> None:
    print(f"New transaction for {address}: {info.signature}", flush=True)


async def run_watch(
    rpc_url: str,
    addresses: list[str],
    *,
    interval_sec: float,
    fetch_limit: int,
    commitment: str,
    stop_event: asyncio.Event | None = None,
) -> int:
    """Watch until stop_event is set (or forever). Returns the number of valid addresses watched."""
    watcher = AddressWatcher(rpc_url, commitment=commitment, fetch_limit=fetch_limit)
    watcher.on_transaction(print_transaction)
    for address in addresses:
        try:
            watcher.add_address(address)
        except InvalidAddressError as e:
            print(f"Skipping {address}: {e}", file=sys.stderr)
    if not watcher.addresses:
        await watcher.aclose()
        return 0
    stop_event = stop_event or asyncio.Event()
    watcher.start(interval_sec)
    print("Watching addresses. Press Ctrl+C to exit.", flush=True)
    try:
        await stop_event.wait()
    finally:
        await watcher.aclose()
    return len(watcher.addresses)


def main() -> int:
    load_solwatch_env()
    parser = argparse.ArgumentParser(description="Print new transactions for watched Solana addresses.")
    parser.add_argument("addresses", nargs="*", help="Addresses to watch (prompted when omitted).")
    parser.add_argument("--interval", type=float, default=get_watch_interval_sec(), help="Seconds between polls.")
    parser.add_argument("--limit", type=int, default=get_watch_fetch_limit(), help="Signatures fetched per address per poll.")
    parser.add_argument("--commitment", default=get_commitment(), choices=("processed", "confirmed", "finalized"))
    parser.add_argument("--rpc-url", default=None, help="RPC endpoint (default: SOLANA_RPC_ENDPOINT / SOLANA_RPC_URL).")
    args = parser.parse_args()

    addresses = list(args.addresses)
    if not addresses:
        try:
            addresses = parse_address_list(input("Enter addresses to watch (comma-separated): "))
        except EOFError:
            addresses = []
    if not addresses:
        print("No addresses given", file=sys.stderr)
        return 1

    rpc_url = args.rpc_url or get_solana_rpc_url()
    logger.info("watch_cli_start", rpc=mask_rpc_url(rpc_url), address_count=len(addresses))
    try:
        watched = asyncio.run(
            run_watch(
                rpc_url,
                addresses,
                interval_sec=args.interval,
                fetch_limit=args.limit,
                commitment=args.commitment,
            )
        )
    except KeyboardInterrupt:
        print("\nStopped watching", flush=True)
        return 0
    return 0 if watched else 1


if __name__ == "__main__":
    sys.exit(main())
