"""
FastAPI router: token (mint) analytics.

GET  /token/{mint}, /token/{mint}/supply, /holdings/{mint}, /transfers/{mint},
     /risk/{mint}, /heatmap/{mint}
POST /activity, /depth, /patterns, /scan, /sign
"""

from __future__ import annotations

import base64
from dataclasses import asdict
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from solwatch.analytics import (
    CoreScannerService,
    TokenActivityAnalyzer,
    TokenActivityHeatmap,
    TokenDataService,
    TokenDeepAnalyzer,
    TokenPatternDetector,
)
from solwatch.api_server.dependencies import (
    get_activity_analyzer,
    get_alert_service,
    get_deep_analyzer,
    get_execution_engine,
    get_heatmap,
    get_metrics_cache,
    get_pattern_detector,
    get_scanner,
    get_signer,
    get_token_data,
    ok,
)
from solwatch.execution import ExecutionEngine, SigningEngine
from solwatch.solwatch_logging import get_logger
from solwatch.stores import AlertService
from solwatch.stores.metrics_cache import MetricsCache

logger = get_logger(__name__)

router = APIRouter(tags=["token"])


class MintRequest(BaseModel):
    mint: str = Field(..., min_length=1, description="Token mint address (base58)")


class PatternRequest(MintRequest):
    limit: int = Field(100, ge=1, le=1000, description="Signatures to inspect")


class SignRequest(BaseModel):
    transaction: str = Field(..., min_length=1, description="Base64 wire-format transaction")


async def _cached(cache: MetricsCache | None, key_parts: tuple[Any, ...], fetch: Callable[[], Awaitable[Any]]) -> Any:
    if cache is None:
        return await fetch()
    return await cache.get_or_fetch(key_parts, fetch)


@router.get("/token/{mint}")
async def token_info(mint: str, service: TokenDataService = Depends(get_token_data)):
    return ok(asdict(await service.fetch_mint_info(mint)))


@router.get("/token/{mint}/supply")
async def token_supply(mint: str, service: TokenDataService = Depends(get_token_data)):
    return ok({"mint": mint, "supply": await service.fetch_supply(mint)})


@router.get("/holdings/{mint}")
async def holdings(
    mint: str,
    scanner: CoreScannerService = Depends(get_scanner),
    cache: MetricsCache | None = Depends(get_metrics_cache),
):
    async def fetch() -> dict[str, Any]:
        return asdict(await scanner.scan_holdings(mint))

    return ok(await _cached(cache, ("holdings", mint), fetch))


@router.get("/transfers/{mint}")
async def transfers(
    mint: str,
    limit: int = Query(50, ge=1, le=1000),
    scanner: CoreScannerService = Depends(get_scanner),
):
    records = await scanner.scan_recent_transfers(mint, limit=limit)
    return ok([asdict(r) for r in records])


@router.get("/risk/{mint}")
async def risk(
    mint: str,
    scanner: CoreScannerService = Depends(get_scanner),
    cache: MetricsCache | None = Depends(get_metrics_cache),
):
    async def fetch() -> dict[str, Any]:
        return asdict(await scanner.compute_risk(mint))

    return ok(await _cached(cache, ("risk", mint), fetch))


@router.get("/heatmap/{mint}")
async def heatmap(mint: str, service: TokenActivityHeatmap = Depends(get_heatmap)):
    points = await service.generate(mint)
    return ok([asdict(p) for p in points])


@router.post("/activity")
async def activity(body: MintRequest, analyzer: TokenActivityAnalyzer = Depends(get_activity_analyzer)):
    points = await analyzer.analyze(body.mint)
    return ok([asdict(p) for p in points])


@router.post("/depth")
async def depth(body: MintRequest, analyzer: TokenDeepAnalyzer = Depends(get_deep_analyzer)):
    return ok(asdict(await analyzer.analyze(body.mint)))


@router.post("/patterns")
async def patterns(
    body: PatternRequest,
    detector: TokenPatternDetector = Depends(get_pattern_detector),
    alerts: AlertService = Depends(get_alert_service),
):
    found = await detector.detect(body.mint, limit=body.limit)
    if found:
        alerts.push(f"{len(found)} pattern alerts for {body.mint}", len(found))
    return ok([asdict(a) for a in found])


@router.post("/scan")
async def scan(body: MintRequest, engine: ExecutionEngine = Depends(get_execution_engine)):
    return ok(asdict(await engine.run_full_scan(body.mint)))


@router.post("/sign")
async def sign(body: SignRequest, signer: SigningEngine = Depends(get_signer)):
    # binascii.Error is a ValueError; the app maps both to 400
    raw = base64.b64decode(body.transaction, validate=True)
    signed = signer.sign_transaction(raw)
    return ok({"transaction": base64.b64encode(signed).decode("ascii"), "signer": str(signer.pubkey)})
