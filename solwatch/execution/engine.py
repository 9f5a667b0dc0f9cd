"""
Execution wrappers built on run_with_retry.

- ExecutionEngine: full token scan (CoreScannerService.compute_risk) with
  timeout and retries.
- StartCellService: named units of work ("cells") with an
  initialized -> running -> completed|failed lifecycle.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable

from solwatch.analytics.core_scanner import CoreScannerService, TokenRiskMetrics
from solwatch.execution.retry import run_with_retry
from solwatch.rpc.client import LedgerRpcClient
from solwatch.solwatch_logging import get_logger
from solwatch.utils.address_utils import normalize_address

logger = get_logger(__name__)

SCAN_TIMEOUT_SEC = 60.0
SCAN_ATTEMPTS = 3


class ExecutionEngine:
    def __init__(
        self,
        scanner: CoreScannerService,
        *,
        attempts: int = SCAN_ATTEMPTS,
        timeout_sec: float = SCAN_TIMEOUT_SEC,
        base_delay_sec: float = 0.5,
    ) -> None:
        self._scanner = scanner
        self._attempts = attempts
        self._timeout_sec = timeout_sec
        self._base_delay_sec = base_delay_sec

    async def run_full_scan(self, mint: str) -> TokenRiskMetrics:
        mint = normalize_address(mint)
        return await run_with_retry(
            lambda: self._scanner.compute_risk(mint),
            attempts=self._attempts,
            timeout_sec=self._timeout_sec,
            base_delay_sec=self._base_delay_sec,
            label=f"full_scan:{mint[:8]}",
        )


class CellStatus(str, enum.Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class CellResult:
    cell_id: str
    status: CellStatus
    started_at: int  # unix ms
    finished_at: int | None = None
    output: Any = None
    error: str | None = None


CellWork = Callable[[str], Awaitable[Any]]


class StartCellService:
    """
    Tracks cells per owner address. The default work samples the owner's
    lamport balance; callers may pass their own coroutine function taking the owner.
    """

    def __init__(
        self,
        client: LedgerRpcClient,
        *,
        attempts: int = 3,
        timeout_sec: float = 30.0,
        base_delay_sec: float = 0.5,
    ) -> None:
        self._client = client
        self._attempts = attempts
        self._timeout_sec = timeout_sec
        self._base_delay_sec = base_delay_sec
        self._cells: dict[str, CellResult] = {}

    def get_cell(self, cell_id: str) -> CellResult | None:
        return self._cells.get(cell_id)

    async def initialize_cell(self, owner: str) -> CellResult:
        owner = normalize_address(owner)
        now = int(time.time() * 1000)
        cell = CellResult(cell_id=f"{owner}-{now}", status=CellStatus.INITIALIZED, started_at=now)
        self._cells[cell.cell_id] = cell
        logger.info("cell_initialized", cell_id=cell.cell_id)
        return cell

    async def _sample_balance(self, owner: str) -> Any:
        return {"lamports": await self._client.get_balance(owner)}

    async def run_cell(self, cell_id: str, work: CellWork | None = None) -> CellResult:
        owner = cell_id.rsplit("-", 1)[0]
        job = work or self._sample_balance
        started = int(time.time() * 1000)
        self._cells[cell_id] = CellResult(cell_id=cell_id, status=CellStatus.RUNNING, started_at=started)
        try:
            output = await run_with_retry(
                lambda: job(owner),
                attempts=self._attempts,
                timeout_sec=self._timeout_sec,
                base_delay_sec=self._base_delay_sec,
                label=f"cell:{cell_id}",
            )
        except Exception as e:
            result = replace(
                self._cells[cell_id],
                status=CellStatus.FAILED,
                finished_at=int(time.time() * 1000),
                error=str(e),
            )
            logger.warning("cell_failed", cell_id=cell_id, error=str(e))
        else:
            result = replace(
                self._cells[cell_id],
                status=CellStatus.COMPLETED,
                finished_at=int(time.time() * 1000),
                output=output,
            )
            logger.info("cell_completed", cell_id=cell_id)
        self._cells[cell_id] = result
        return result
