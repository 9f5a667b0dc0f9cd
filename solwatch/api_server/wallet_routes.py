"""
FastAPI router: wallet analytics.

POST /capture, GET /history/{address}, GET /balances/{address},
GET /group/{address}, GET /suspicious/{address}, GET /analyze/{address},
POST /cells
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from solwatch.analytics import BalanceHistoryService, PullBalanceService, TokenWatchService
from solwatch.analytics.token_watch import DEFAULT_SUSPICIOUS_THRESHOLD
from solwatch.api_server.dependencies import (
    get_balance_service,
    get_cell_service,
    get_history_service,
    get_token_watch,
    ok,
)
from solwatch.execution import StartCellService
from solwatch.utils.address_utils import normalize_address

router = APIRouter(tags=["wallet"])


class AddressRequest(BaseModel):
    address: str = Field(..., min_length=1, description="Wallet address (base58)")


class CellRequest(BaseModel):
    owner: str = Field(..., min_length=1, description="Owner wallet address (base58)")


@router.post("/capture")
async def capture(body: AddressRequest, history: BalanceHistoryService = Depends(get_history_service)):
    return ok(asdict(await history.capture(body.address)))


@router.get("/history/{address}")
async def balance_history(address: str, history: BalanceHistoryService = Depends(get_history_service)):
    snapshots = history.get_history(normalize_address(address))
    return {"success": True, "history": [asdict(s) for s in snapshots]}


@router.get("/balances/{address}")
async def balances(address: str, service: PullBalanceService = Depends(get_balance_service)):
    info = await service.fetch_balances(address)
    return ok({**asdict(info), "token_total": info.token_total})


@router.get("/group/{address}")
async def group(address: str, service: TokenWatchService = Depends(get_token_watch)):
    groups = await service.group_by_token(address)
    return ok([asdict(g) for g in groups])


@router.get("/suspicious/{address}")
async def suspicious(
    address: str,
    threshold: float = Query(DEFAULT_SUSPICIOUS_THRESHOLD, ge=0),
    service: TokenWatchService = Depends(get_token_watch),
):
    events = await service.detect_suspicious(address, threshold=threshold)
    return ok([asdict(e) for e in events])


@router.get("/analyze/{address}")
async def analyze(address: str, service: TokenWatchService = Depends(get_token_watch)):
    return ok(asdict(await service.analyze_token(address)))


@router.post("/cells")
async def run_cell(body: CellRequest, cells: StartCellService = Depends(get_cell_service)):
    cell = await cells.initialize_cell(body.owner)
    result = await cells.run_cell(cell.cell_id)
    return ok({**asdict(result), "status": result.status.value})
