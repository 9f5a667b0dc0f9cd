#!/usr/bin/env python3
"""
Print a one-shot report for a wallet: SOL and token balances, account probe,
account-size risk, per-mint transfer tallies and large transfers.

Usage:
  python -m solwatch.tools.wallet_report ADDRESS [--json] [--threshold 1000000]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import Any

from solwatch.analytics import AccountProbe, PullBalanceService, RiskScoring, TokenWatchService
from solwatch.config.env import get_commitment, get_solana_rpc_url, load_solwatch_env, mask_rpc_url
from solwatch.core.exceptions import SolwatchError
from solwatch.rpc.client import LedgerRpcClient
from solwatch.solwatch_logging import get_logger
from solwatch.utils.address_utils import normalize_address

logger = get_logger(__name__)


async def build_report(client: LedgerRpcClient, address: str, *, threshold: float) -> dict[str, Any]:
    address = normalize_address(address)
    balances = await PullBalanceService(client).fetch_balances(address)
    probe = await AccountProbe(client).run(address)
    risk = await RiskScoring(client).compute(address)
    watch = TokenWatchService(client)
    groups = await watch.group_by_token(address)
    suspicious = await watch.detect_suspicious(address, threshold=threshold)
    return {
        "address": address,
        "balances": {**asdict(balances), "token_total": balances.token_total},
        "probe": asdict(probe),
        "risk": asdict(risk),
        "groups": [asdict(g) for g in groups],
        "suspicious": [asdict(e) for e in suspicious],
    }


def format_report(report: dict[str, Any]) -> str:
    balances = report["balances"]
    probe = report["probe"]
    risk = report["risk"]
    lines = [
        f"Address:     {report['address']}",
        f"SOL:         {balances['sol']:.9f}",
        f"Token total: {balances['token_total']}",
        f"Risk:        {risk['score']} ({risk['level']})",
    ]
    if probe["success"]:
        lines.append(f"Owner:       {probe['data'].get('owner')}")
    else:
        lines.append(f"Probe:       failed ({probe['error']})")
    for g in report["groups"]:
        lines.append(f"  {g['mint']}: received={g['total_received']} sent={g['total_sent']}")
    if report["suspicious"]:
        lines.append("Large transfers:")
        for e in report["suspicious"]:
            lines.append(f"  {e['direction']:>3} {e['amount']} {e['mint']} {e['signature']}")
    return "\n".join(lines)


async def _run(rpc_url: str, commitment: str, address: str, threshold: float) -> dict[str, Any]:
    async with LedgerRpcClient(rpc_url, commitment=commitment) as client:
        return await build_report(client, address, threshold=threshold)


def main() -> int:
    load_solwatch_env()
    parser = argparse.ArgumentParser(description="One-shot wallet report.")
    parser.add_argument("address", help="Wallet address (base58).")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text.")
    parser.add_argument("--threshold", type=float, default=1_000_000, help="Large-transfer threshold.")
    parser.add_argument("--rpc-url", default=None, help="RPC endpoint (default: from env).")
    args = parser.parse_args()

    rpc_url = args.rpc_url or get_solana_rpc_url()
    logger.info("wallet_report_start", rpc=mask_rpc_url(rpc_url), address=args.address)
    try:
        report = asyncio.run(_run(rpc_url, get_commitment(), args.address, args.threshold))
    except (SolwatchError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(report, indent=2) if args.json else format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
