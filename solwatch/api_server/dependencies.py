"""
FastAPI dependencies.

Long-lived objects (RPC client, watcher, stores, signer) live on app.state and
are built by server.create_app(). Stateless services are built per request
from the shared RPC client. Tests override any of these via
app.dependency_overrides.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request

from solwatch.analytics import (
    BalanceHistoryService,
    CoreScannerService,
    DriftEvaluator,
    DriftFetcher,
    PullBalanceService,
    TokenActivityAnalyzer,
    TokenActivityHeatmap,
    TokenDataService,
    TokenDeepAnalyzer,
    TokenPatternDetector,
    TokenWatchService,
)
from solwatch.execution import ExecutionEngine, SigningEngine, StartCellService
from solwatch.rpc.client import LedgerRpcClient
from solwatch.stores import AlertService, AnalyticTaskService, OutframeService, TokMarkService
from solwatch.stores.metrics_cache import MetricsCache
from solwatch.watchline import AddressWatcher


def get_rpc_client(request: Request) -> LedgerRpcClient:
    return request.app.state.rpc_client


def get_watcher(request: Request) -> AddressWatcher:
    return request.app.state.watcher


def get_watch_frames(request: Request) -> OutframeService:
    return request.app.state.watch_frames


def get_history_service(request: Request) -> BalanceHistoryService:
    return request.app.state.history


def get_task_service(request: Request) -> AnalyticTaskService:
    return request.app.state.tasks


def get_bookmark_service(request: Request) -> TokMarkService:
    return request.app.state.bookmarks


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.alerts


def get_drift_fetcher(request: Request) -> DriftFetcher:
    return request.app.state.drift_fetcher


def get_drift_evaluator() -> DriftEvaluator:
    return DriftEvaluator()


def get_cell_service(request: Request) -> StartCellService:
    return request.app.state.cells


def get_metrics_cache(request: Request) -> MetricsCache | None:
    return getattr(request.app.state, "metrics_cache", None)


def get_signer(request: Request) -> SigningEngine:
    signer = getattr(request.app.state, "signer", None)
    if signer is None:
        raise HTTPException(status_code=503, detail="Signer not configured")
    return signer


def get_token_data(client: LedgerRpcClient = Depends(get_rpc_client)) -> TokenDataService:
    return TokenDataService(client)


def get_balance_service(client: LedgerRpcClient = Depends(get_rpc_client)) -> PullBalanceService:
    return PullBalanceService(client)


def get_scanner(client: LedgerRpcClient = Depends(get_rpc_client)) -> CoreScannerService:
    return CoreScannerService(client)


def get_token_watch(client: LedgerRpcClient = Depends(get_rpc_client)) -> TokenWatchService:
    return TokenWatchService(client)


def get_activity_analyzer(client: LedgerRpcClient = Depends(get_rpc_client)) -> TokenActivityAnalyzer:
    return TokenActivityAnalyzer(client)


def get_deep_analyzer(client: LedgerRpcClient = Depends(get_rpc_client)) -> TokenDeepAnalyzer:
    return TokenDeepAnalyzer(client)


def get_pattern_detector(client: LedgerRpcClient = Depends(get_rpc_client)) -> TokenPatternDetector:
    return TokenPatternDetector(client)


def get_heatmap(client: LedgerRpcClient = Depends(get_rpc_client)) -> TokenActivityHeatmap:
    return TokenActivityHeatmap(client)


def get_execution_engine(scanner: CoreScannerService = Depends(get_scanner)) -> ExecutionEngine:
    return ExecutionEngine(scanner)


def ok(data: Any) -> dict[str, Any]:
    """Standard success envelope."""
    return {"success": True, "data": data}
