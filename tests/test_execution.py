"""
Tests for the execution wrappers: retry with timeout and backoff, the full-scan
engine, start cells and the signing engine.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from conftest import USDC_MINT, WALLET, RecordingLogger, token_account
from solwatch.analytics import CoreScannerService
from solwatch.core.exceptions import ExecutionTimeoutError, RpcError
from solwatch.execution import (
    CellStatus,
    ExecutionEngine,
    SigningEngine,
    StartCellService,
    backoff_delay,
    run_with_retry,
)


# -----------------------------------------------------------------------------
# run_with_retry
# -----------------------------------------------------------------------------

def test_backoff_delay_doubles_and_caps():
    assert [backoff_delay(n, 0.5, 8.0) for n in range(6)] == [0.5, 1.0, 2.0, 4.0, 8.0, 8.0]


def test_retry_returns_first_success():
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RpcError("temporary")
        return "done"

    result = asyncio.run(run_with_retry(flaky, attempts=3, base_delay_sec=0))
    assert result == "done"
    assert len(attempts) == 3


def test_retry_reraises_last_error():
    errors = iter([RpcError("first"), RpcError("second")])

    async def failing():
        raise next(errors)

    with pytest.raises(RpcError, match="second"):
        asyncio.run(run_with_retry(failing, attempts=2, base_delay_sec=0))


def test_retry_logs_each_retry_then_gives_up():
    async def failing():
        raise RpcError("down")

    recorder = RecordingLogger()
    with patch("solwatch.execution.retry.logger", recorder):
        with pytest.raises(RpcError, match="down"):
            asyncio.run(run_with_retry(failing, attempts=3, base_delay_sec=0, label="scan"))
    assert recorder.events("warning") == ["execution_retry", "execution_retry"]
    assert recorder.events("error") == ["execution_give_up"]
    assert recorder.records[-1][2]["label"] == "scan"


def test_retry_single_attempt_raises_without_sleeping():
    async def failing():
        raise RpcError("once")

    sleep = AsyncMock()
    with patch("solwatch.execution.retry.asyncio.sleep", sleep):
        with pytest.raises(RpcError, match="once"):
            asyncio.run(run_with_retry(failing, attempts=1))
    sleep.assert_not_awaited()


def test_retry_timeout_surfaces_as_execution_timeout():
    async def slow():
        await asyncio.sleep(1)

    with pytest.raises(ExecutionTimeoutError) as exc_info:
        asyncio.run(run_with_retry(slow, attempts=2, timeout_sec=0.01, base_delay_sec=0, label="slow-job"))
    assert isinstance(exc_info.value, TimeoutError)
    assert "slow-job" in str(exc_info.value)


def test_retry_sleeps_with_backoff_between_attempts():
    async def failing():
        raise RpcError("nope")

    sleep = AsyncMock()
    with patch("solwatch.execution.retry.asyncio.sleep", sleep):
        with pytest.raises(RpcError):
            asyncio.run(run_with_retry(failing, attempts=4, base_delay_sec=1.0, max_delay_sec=3.0))
    assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 3.0]


def test_retry_requires_an_attempt():
    async def noop():
        return None

    with pytest.raises(ValueError):
        asyncio.run(run_with_retry(noop, attempts=0))


# -----------------------------------------------------------------------------
# ExecutionEngine
# -----------------------------------------------------------------------------

def test_run_full_scan_returns_risk_metrics(rpc_stub):
    rpc_stub.accounts_by_mint = [token_account(USDC_MINT, WALLET, 10.0)]
    engine = ExecutionEngine(CoreScannerService(rpc_stub))
    metrics = asyncio.run(engine.run_full_scan(USDC_MINT))
    assert metrics.holder_count == 1
    assert metrics.total_supply == 10.0


def test_run_full_scan_retries_then_raises(rpc_stub):
    scanner = CoreScannerService(rpc_stub)
    scanner.compute_risk = AsyncMock(side_effect=RpcError("rpc down"))
    engine = ExecutionEngine(scanner, attempts=2, base_delay_sec=0)
    with pytest.raises(RpcError):
        asyncio.run(engine.run_full_scan(USDC_MINT))
    assert scanner.compute_risk.await_count == 2


# -----------------------------------------------------------------------------
# StartCellService
# -----------------------------------------------------------------------------

def test_initialize_cell(rpc_stub):
    cells = StartCellService(rpc_stub)
    cell = asyncio.run(cells.initialize_cell(WALLET))
    owner, _, started = cell.cell_id.rpartition("-")
    assert owner == WALLET
    assert int(started) == cell.started_at
    assert cell.status is CellStatus.INITIALIZED
    assert cells.get_cell(cell.cell_id) == cell


def test_run_cell_default_work_samples_balance(rpc_stub):
    rpc_stub.balance = 5000
    cells = StartCellService(rpc_stub)

    async def scenario():
        cell = await cells.initialize_cell(WALLET)
        return await cells.run_cell(cell.cell_id)

    result = asyncio.run(scenario())
    assert result.status is CellStatus.COMPLETED
    assert result.output == {"lamports": 5000}
    assert result.finished_at is not None
    assert ("getBalance", WALLET) in rpc_stub.calls


def test_run_cell_failure_after_retries(rpc_stub):
    cells = StartCellService(rpc_stub, attempts=2, base_delay_sec=0)
    calls = []

    async def work(owner):
        calls.append(owner)
        raise RuntimeError("work failed")

    async def scenario():
        cell = await cells.initialize_cell(WALLET)
        return await cells.run_cell(cell.cell_id, work)

    result = asyncio.run(scenario())
    assert result.status is CellStatus.FAILED
    assert result.error == "work failed"
    assert calls == [WALLET, WALLET]
    assert cells.get_cell(result.cell_id).status is CellStatus.FAILED


def test_initialize_cell_rejects_invalid_owner(rpc_stub):
    with pytest.raises(ValueError):
        asyncio.run(StartCellService(rpc_stub).initialize_cell("bogus"))


# -----------------------------------------------------------------------------
# SigningEngine
# -----------------------------------------------------------------------------

def _unsigned_transfer(payer: Keypair) -> bytes:
    ix = transfer(TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Keypair().pubkey(), lamports=1000))
    message = Message.new_with_blockhash([ix], payer.pubkey(), Hash.default())
    return bytes(Transaction.new_unsigned(message))


def test_sign_transaction_fills_signer_slot():
    payer = Keypair()
    engine = SigningEngine(bytes(payer))
    assert engine.pubkey == payer.pubkey()

    signed = Transaction.from_bytes(engine.sign_transaction(_unsigned_transfer(payer)))
    assert signed.signatures[0] != Signature.default()
    signed.verify()


def test_sign_transaction_rejects_garbage():
    engine = SigningEngine(bytes(Keypair()))
    with pytest.raises(ValueError):
        engine.sign_transaction(b"\x01\x02\x03")


def test_sign_transaction_rejects_non_signer():
    engine = SigningEngine(bytes(Keypair()))
    with pytest.raises(ValueError):
        engine.sign_transaction(_unsigned_transfer(Keypair()))


def test_signing_engine_rejects_bad_secret():
    with pytest.raises(ValueError):
        SigningEngine(b"\x00" * 10)
