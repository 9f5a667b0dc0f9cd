"""
FastAPI router: tasks, bookmarks, watch list, alerts and price drift.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from solwatch.analytics import DriftEvaluator, DriftFetcher
from solwatch.analytics.drift import SourcePrice
from solwatch.api_server.dependencies import (
    get_alert_service,
    get_bookmark_service,
    get_drift_evaluator,
    get_drift_fetcher,
    get_task_service,
    get_watch_frames,
    get_watcher,
    ok,
)
from solwatch.stores import AlertService, AnalyticTaskService, OutframeService, TokMarkService
from solwatch.watchline import AddressWatcher

router = APIRouter(tags=["stores"])


class TaskCreateRequest(BaseModel):
    name: str = Field("", description="Task name (required, non-empty)")
    params: dict[str, Any] = Field(default_factory=dict)


class BookmarkRequest(BaseModel):
    mint: str = Field(..., min_length=1, description="Token mint address (base58)")
    label: str = Field("", max_length=256)


class WatchRequest(BaseModel):
    address: str = Field(..., min_length=1, description="Address to watch (base58)")


class DriftRequest(BaseModel):
    symbol: str = Field(..., min_length=1)
    vendor_a: str = Field(..., min_length=1)
    vendor_b: str = Field(..., min_length=1)


# -----------------------------------------------------------------------------
# Tasks
# -----------------------------------------------------------------------------

@router.get("/tasks")
def list_tasks(tasks: AnalyticTaskService = Depends(get_task_service)):
    return ok([asdict(t) for t in tasks.list()])


@router.post("/tasks", status_code=201)
def create_task(body: TaskCreateRequest, tasks: AnalyticTaskService = Depends(get_task_service)):
    return ok(asdict(tasks.create(body.name, body.params)))


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, tasks: AnalyticTaskService = Depends(get_task_service)):
    if not tasks.remove(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return ok({"id": task_id})


# -----------------------------------------------------------------------------
# Bookmarks
# -----------------------------------------------------------------------------

@router.get("/bookmarks")
def list_bookmarks(bookmarks: TokMarkService = Depends(get_bookmark_service)):
    return ok([asdict(b) for b in bookmarks.list()])


@router.post("/bookmarks")
def add_bookmark(body: BookmarkRequest, bookmarks: TokMarkService = Depends(get_bookmark_service)):
    return ok(asdict(bookmarks.add(body.mint, body.label)))


@router.delete("/bookmarks/{mint}")
def delete_bookmark(mint: str, bookmarks: TokMarkService = Depends(get_bookmark_service)):
    return ok({"mint": mint, "removed": bookmarks.remove(mint)})


# -----------------------------------------------------------------------------
# Watch list
# -----------------------------------------------------------------------------

@router.get("/watch")
def list_watched(watcher: AddressWatcher = Depends(get_watcher)):
    return ok({"addresses": list(watcher.addresses), "running": watcher.is_running})


@router.post("/watch")
def add_watched(body: WatchRequest, watcher: AddressWatcher = Depends(get_watcher)):
    address = watcher.add_address(body.address)
    return ok({"address": address, "addresses": list(watcher.addresses)})


@router.delete("/watch/{address}")
def remove_watched(address: str, watcher: AddressWatcher = Depends(get_watcher)):
    watcher.remove_address(address)
    return ok({"address": address.strip(), "addresses": list(watcher.addresses)})


@router.get("/watch/events")
def watch_events(
    limit: int = Query(50, ge=1, le=500),
    address: str | None = Query(None),
    frames: OutframeService = Depends(get_watch_frames),
):
    """Most recent delivered signatures, newest first."""
    if address:
        recent = frames.get_latest(address.strip(), limit)
    else:
        recent = frames.get_recent(limit)
    return ok([{"address": f.id, "received_at": f.timestamp, **f.payload} for f in recent])


# -----------------------------------------------------------------------------
# Alerts and drift
# -----------------------------------------------------------------------------

@router.get("/alerts")
def list_alerts(alerts: AlertService = Depends(get_alert_service)):
    return ok([asdict(a) for a in alerts.get_all()])


@router.post("/drift")
async def drift(
    body: DriftRequest,
    fetcher: DriftFetcher = Depends(get_drift_fetcher),
    evaluator: DriftEvaluator = Depends(get_drift_evaluator),
):
    prices = await fetcher.compare(body.symbol, body.vendor_a, body.vendor_b)
    result = evaluator.evaluate(
        SourcePrice(value=prices[body.vendor_a], label=body.vendor_a),
        SourcePrice(value=prices[body.vendor_b], label=body.vendor_b),
    )
    return ok(asdict(result))
