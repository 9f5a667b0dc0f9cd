"""
FastAPI server: token and wallet analytics over Solana RPC, JSON stores, and
an address watcher running for the lifetime of the app.

Long-lived objects are built by create_app() and kept on app.state; routers
reach them through solwatch.api_server.dependencies. Every success response is
{"success": true, "data": ...}; errors are {"success": false, "error": ...}
(or "errors" for request validation).
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from solwatch import __version__
from solwatch.analytics import BalanceHistoryService, DriftFetcher, PullBalanceService
from solwatch.api_server.store_routes import router as store_router
from solwatch.api_server.token_routes import router as token_router
from solwatch.api_server.wallet_routes import router as wallet_router
from solwatch.config import Settings, get_settings
from solwatch.config.env import mask_rpc_url
from solwatch.core.exceptions import InvalidAddressError, SolwatchError
from solwatch.execution import SigningEngine, StartCellService
from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.models import SignatureInfo
from solwatch.solwatch_logging import get_logger
from solwatch.stores import AlertService, AnalyticTaskService, OutframeService, TokMarkService
from solwatch.stores.metrics_cache import MetricsCache
from solwatch.watchline import AddressWatcher

logger = get_logger(__name__)

WATCH_FRAMES_MAX = 500


# -----------------------------------------------------------------------------
# Lifespan: start the watcher schedule; close clients on shutdown
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    watcher: AddressWatcher = app.state.watcher
    watcher.start(settings.watch_interval_sec)
    logger.info(
        "api_started",
        rpc_url=mask_rpc_url(settings.rpc_url),
        watch_interval_sec=settings.watch_interval_sec,
        signer_configured=app.state.signer is not None,
        metrics_cache=app.state.metrics_cache is not None,
    )

    yield

    await watcher.aclose()
    await app.state.drift_fetcher.aclose()
    if app.state.metrics_cache is not None:
        await app.state.metrics_cache.aclose()
    if app.state.owns_rpc_client:
        await app.state.rpc_client.aclose()
    logger.info("api_stopped")


# -----------------------------------------------------------------------------
# Error envelopes
# -----------------------------------------------------------------------------

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"success": False, "errors": errors})


async def _bad_request(request: Request, exc: Exception) -> JSONResponse:
    return _error(400, str(exc))


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("api_request_failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    return _error(500, str(exc) or "Internal server error")


def _install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(InvalidAddressError, _bad_request)
    app.add_exception_handler(ValueError, _bad_request)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(SolwatchError, _server_error)
    app.add_exception_handler(Exception, _server_error)


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------

def _record_frame(frames: OutframeService):
    def record(address: str, info: SignatureInfo) -> None:
        frames.add_frame(address, info.to_dict())

    return record


def create_app(
    settings: Settings | None = None,
    *,
    rpc_client: LedgerRpcClient | Any = None,
) -> FastAPI:
    """
    Build the app and its long-lived state.

    rpc_client: pre-built client (or test stub) shared by every service; one is
    created from settings.rpc_url otherwise and closed on shutdown.
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Solwatch API",
        description="Solana address watching and token/wallet analytics over JSON-RPC.",
        version=__version__,
        lifespan=lifespan,
    )

    owns_client = rpc_client is None
    client = rpc_client if rpc_client is not None else LedgerRpcClient(
        settings.rpc_url, commitment=settings.commitment
    )
    watcher = AddressWatcher(
        settings.rpc_url,
        commitment=settings.commitment,
        fetch_limit=settings.watch_fetch_limit,
        client=client,
        serialize_cycles=True,
    )
    frames = OutframeService(max_frames=WATCH_FRAMES_MAX)
    watcher.on_transaction(_record_frame(frames))

    app.state.settings = settings
    app.state.rpc_client = client
    app.state.owns_rpc_client = owns_client
    app.state.watcher = watcher
    app.state.watch_frames = frames
    app.state.history = BalanceHistoryService(PullBalanceService(client))
    app.state.tasks = AnalyticTaskService(settings.storage_dir)
    app.state.bookmarks = TokMarkService(settings.storage_dir)
    app.state.alerts = AlertService()
    app.state.cells = StartCellService(client)
    app.state.drift_fetcher = DriftFetcher(settings.drift_api_url)
    app.state.signer = SigningEngine(settings.signer_secret_key) if settings.signer_secret_key else None
    app.state.metrics_cache = MetricsCache.from_url(settings.redis_url) if settings.redis_url else None

    _install_error_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": int(time.time() * 1000)}

    app.include_router(token_router)
    app.include_router(wallet_router)
    app.include_router(store_router)
    return app


app = create_app()
