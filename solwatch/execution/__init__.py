"""
Execution wrappers: timeout + exponential backoff retry, the full-scan
execution engine, the cell runner, and the transaction signing engine.
"""

from solwatch.execution.engine import CellResult, CellStatus, ExecutionEngine, StartCellService
from solwatch.execution.retry import backoff_delay, run_with_retry
from solwatch.execution.signing import SigningEngine

__all__ = [
    "CellResult",
    "CellStatus",
    "ExecutionEngine",
    "SigningEngine",
    "StartCellService",
    "backoff_delay",
    "run_with_retry",
]
