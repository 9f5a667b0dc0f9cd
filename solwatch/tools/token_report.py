#!/usr/bin/env python3
"""
Print a one-shot report for a token mint: mint info, supply, holder
distribution shape, risk score, burst prediction and the busiest heatmap slots.

Usage:
  python -m solwatch.tools.token_report MINT [--json] [--top 5]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from typing import Any

from solwatch.analytics import (
    CoreScannerService,
    TokenActivityHeatmap,
    TokenBurstPredictor,
    TokenDataService,
    TokenShapeService,
)
from solwatch.config.env import get_commitment, get_solana_rpc_url, load_solwatch_env, mask_rpc_url
from solwatch.core.exceptions import SolwatchError
from solwatch.execution import ExecutionEngine
from solwatch.rpc.client import LedgerRpcClient
from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)


async def build_report(client: LedgerRpcClient, mint: str, *, top: int = 5) -> dict[str, Any]:
    token_data = TokenDataService(client)
    metadata = await token_data.fetch_mint_info(mint)
    supply = await token_data.fetch_supply(mint)
    shape = await TokenShapeService(client).analyze_distribution(mint)
    risk = await ExecutionEngine(CoreScannerService(client)).run_full_scan(mint)
    burst = await TokenBurstPredictor(client).predict(mint)
    heatmap = await TokenActivityHeatmap(client).generate(mint)
    busiest = sorted((p for p in heatmap if p.count), key=lambda p: p.count, reverse=True)[:top]
    return {
        "metadata": asdict(metadata),
        "supply": supply,
        "shape": asdict(shape),
        "risk": asdict(risk),
        "burst": asdict(burst),
        "busiest_slots": [asdict(p) for p in busiest],
    }


def format_report(report: dict[str, Any]) -> str:
    meta = report["metadata"]
    shape = report["shape"]
    risk = report["risk"]
    burst = report["burst"]
    lines = [
        f"Mint:           {meta['mint']}",
        f"Decimals:       {meta['decimals']}",
        f"Supply:         {report['supply']}",
        f"Mean balance:   {shape['mean_balance']:.4f}",
        f"Median balance: {shape['median_balance']:.4f}",
        f"Skewness:       {shape['skewness']:.4f}",
        f"Holders:        {risk['holder_count']}",
        f"Risk score:     {risk['risk_score']}",
        f"Burst window:   {burst['start']}-{burst['end']} (confidence {burst['confidence']:.2f})",
    ]
    if report["busiest_slots"]:
        lines.append("Busiest slots (weekday/hour UTC, 0 = Sunday):")
        for p in report["busiest_slots"]:
            lines.append(f"  weekday={p['weekday']} hour={p['hour']:02d} count={p['count']}")
    return "\n".join(lines)


async def _run(rpc_url: str, commitment: str, mint: str, top: int) -> dict[str, Any]:
    async with LedgerRpcClient(rpc_url, commitment=commitment) as client:
        return await build_report(client, mint, top=top)


def main() -> int:
    load_solwatch_env()
    parser = argparse.ArgumentParser(description="One-shot token mint report.")
    parser.add_argument("mint", help="Token mint address (base58).")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text.")
    parser.add_argument("--top", type=int, default=5, help="Busiest heatmap slots to show.")
    parser.add_argument("--rpc-url", default=None, help="RPC endpoint (default: from env).")
    args = parser.parse_args()

    rpc_url = args.rpc_url or get_solana_rpc_url()
    logger.info("token_report_start", rpc=mask_rpc_url(rpc_url), mint=args.mint)
    try:
        report = asyncio.run(_run(rpc_url, get_commitment(), args.mint, args.top))
    except (SolwatchError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(report, indent=2) if args.json else format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
