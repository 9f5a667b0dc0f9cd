"""
Tests for the analytics services over StubRpcClient: reshaping of RPC payloads,
statistics, risk scoring, heatmap and activity bucketing.
"""

from __future__ import annotations

import asyncio
import base64
from datetime import datetime, timezone

import pytest

from conftest import USDC_MINT, WALLET, WALLET_2, WSOL_MINT, sig, token_account, transfer_tx
from solwatch.analytics import (
    AccountProbe,
    BalanceHistoryService,
    CoreScannerService,
    PullBalanceService,
    RiskScoring,
    TokenActivityAnalyzer,
    TokenActivityHeatmap,
    TokenBurstPredictor,
    TokenDataService,
    TokenDeepAnalyzer,
    TokenPatternDetector,
    TokenShapeService,
    TokenWatchService,
)
from solwatch.analytics.core_scanner import TransferRecord, compute_risk_score
from solwatch.analytics.heatmap import build_heatmap
from solwatch.analytics.insight import bucket_hourly_activity
from solwatch.analytics.risk_scoring import account_data_size, score_from_size
from solwatch.analytics.token_shape import compute_shape
from solwatch.core.exceptions import AccountDataError, InvalidAddressError

NOW = 1_700_000_000


# -----------------------------------------------------------------------------
# Balances
# -----------------------------------------------------------------------------

def test_fetch_balances_sol_and_tokens(rpc_stub):
    rpc_stub.balance = 2_500_000_000
    rpc_stub.accounts_by_owner = [
        token_account(USDC_MINT, WALLET, 10.5),
        token_account(WSOL_MINT, WALLET, 0.5, decimals=9),
    ]
    info = asyncio.run(PullBalanceService(rpc_stub).fetch_balances(WALLET))
    assert info.sol == 2.5
    assert [(t.mint, t.balance) for t in info.tokens] == [(USDC_MINT, 10.5), (WSOL_MINT, 0.5)]
    assert info.token_total == 11.0


def test_balance_history_records_snapshots(rpc_stub):
    rpc_stub.balance = 1_000_000_000
    rpc_stub.accounts_by_owner = [token_account(USDC_MINT, WALLET, 4.0)]
    history = BalanceHistoryService(PullBalanceService(rpc_stub))

    first = asyncio.run(history.capture(WALLET))
    rpc_stub.balance = 3_000_000_000
    asyncio.run(history.capture(WALLET))

    snapshots = history.get_history(WALLET)
    assert len(snapshots) == 2
    assert first.sol == 1.0
    assert first.token_total == 4.0
    assert first.total_balance == 5.0
    assert snapshots[1].total_balance == 7.0
    assert snapshots[0].timestamp <= snapshots[1].timestamp
    assert history.get_history(WALLET_2) == []


def test_balance_history_rejects_invalid_address(rpc_stub):
    history = BalanceHistoryService(PullBalanceService(rpc_stub))
    with pytest.raises(InvalidAddressError):
        asyncio.run(history.capture("nope"))


# -----------------------------------------------------------------------------
# Token data and shape
# -----------------------------------------------------------------------------

def test_fetch_mint_info(rpc_stub):
    rpc_stub.parsed_account_info = {
        "data": {"parsed": {"type": "mint", "info": {"supply": "5000000000", "decimals": 6}}, "program": "spl-token"}
    }
    meta = asyncio.run(TokenDataService(rpc_stub).fetch_mint_info(USDC_MINT))
    assert meta.mint == USDC_MINT
    assert meta.decimals == 6
    assert meta.supply == 5000.0


@pytest.mark.parametrize(
    "account",
    [
        None,
        {"data": ["AAAA", "base64"]},
        {"data": {"parsed": {"info": {"decimals": 6}}}},
    ],
)
def test_fetch_mint_info_invalid_account(rpc_stub, account):
    rpc_stub.parsed_account_info = account
    with pytest.raises(AccountDataError, match="Invalid mint account data"):
        asyncio.run(TokenDataService(rpc_stub).fetch_mint_info(USDC_MINT))


def test_fetch_supply(rpc_stub):
    rpc_stub.token_supply = {"amount": "123450000", "decimals": 6, "uiAmount": None, "uiAmountString": "123.45"}
    assert asyncio.run(TokenDataService(rpc_stub).fetch_supply(USDC_MINT)) == 123.45


def test_compute_shape_statistics():
    shape = compute_shape([1, 2, 3, 10])
    assert shape.mean_balance == pytest.approx(4.0)
    assert shape.median_balance == pytest.approx(2.5)
    assert shape.variance == pytest.approx(12.5)
    assert shape.skewness > 0


def test_compute_shape_edge_cases():
    empty = compute_shape([])
    assert (empty.mean_balance, empty.median_balance, empty.variance, empty.skewness) == (0.0, 0.0, 0.0, 0.0)
    flat = compute_shape([5, 5, 5])
    assert flat.variance == 0.0
    assert flat.skewness == 0.0


def test_analyze_distribution_reads_mint_accounts(rpc_stub):
    rpc_stub.accounts_by_mint = [token_account(USDC_MINT, WALLET, 1.0), token_account(USDC_MINT, WALLET_2, 3.0)]
    shape = asyncio.run(TokenShapeService(rpc_stub).analyze_distribution(USDC_MINT))
    assert shape.mean_balance == pytest.approx(2.0)
    assert ("getProgramAccounts", USDC_MINT) in rpc_stub.calls


# -----------------------------------------------------------------------------
# Core scanner
# -----------------------------------------------------------------------------

def test_scan_holdings_counts_non_zero_holders(rpc_stub):
    rpc_stub.accounts_by_mint = [
        token_account(USDC_MINT, WALLET, 100.0),
        token_account(USDC_MINT, WALLET_2, 0.0),
        token_account(USDC_MINT, WALLET, 50.0),
    ]
    holdings = asyncio.run(CoreScannerService(rpc_stub).scan_holdings(USDC_MINT))
    assert holdings.holder_count == 2
    assert holdings.total_supply == 150.0


def test_scan_recent_transfers_scales_checked_amounts(rpc_stub):
    rpc_stub.signatures = [sig("t2", block_time=NOW), sig("t1", block_time=None), sig("t0")]
    rpc_stub.transactions = {
        "t2": transfer_tx(WALLET, WALLET_2, 2_500_000, mint=USDC_MINT, decimals=6),
        "t1": transfer_tx(WALLET, WALLET_2, 700),
        "t0": None,
    }
    records = asyncio.run(CoreScannerService(rpc_stub).scan_recent_transfers(USDC_MINT, limit=3))
    assert records == [
        TransferRecord(signature="t2", amount=2.5, timestamp=NOW * 1000),
        TransferRecord(signature="t1", amount=700, timestamp=0),
    ]


def test_compute_risk_score_formula():
    transfers = [TransferRecord("a", 50.0, 0), TransferRecord("b", 50.0, 0)]
    # usage 100/1000 = 10%, 200 holders -> factor 2
    assert compute_risk_score(1000.0, 200, transfers) == 20
    assert compute_risk_score(0.0, 10, transfers) == 0
    assert compute_risk_score(100.0, 1000, transfers) == 100
    # no holders -> factor 1
    assert compute_risk_score(1000.0, 0, transfers) == 10


def test_compute_risk_uses_holdings_and_transfers(rpc_stub):
    rpc_stub.accounts_by_mint = [token_account(USDC_MINT, WALLET, 1000.0)]
    rpc_stub.signatures = [sig("t1", block_time=NOW)]
    rpc_stub.transactions = {"t1": transfer_tx(WALLET, WALLET_2, 800_000_000, mint=USDC_MINT, decimals=6)}
    metrics = asyncio.run(CoreScannerService(rpc_stub).compute_risk(USDC_MINT))
    assert metrics.total_supply == 1000.0
    assert metrics.holder_count == 1
    assert len(metrics.recent_transfers) == 1
    # 800/1000 = 80%, one holder -> factor 0.01
    assert metrics.risk_score == 1
    assert ("getSignaturesForAddress", USDC_MINT, 100) in rpc_stub.calls


# -----------------------------------------------------------------------------
# Token watch
# -----------------------------------------------------------------------------

def _wallet_transfers(rpc_stub):
    rpc_stub.signatures = [sig("in1"), sig("out1"), sig("in2")]
    rpc_stub.transactions = {
        "in1": transfer_tx(WALLET_2, WALLET, 2_000_000, mint=USDC_MINT, decimals=6),
        "out1": transfer_tx(WALLET, WALLET_2, 300, mint=USDC_MINT, decimals=6),
        "in2": transfer_tx(WALLET_2, WALLET, 40),
    }


def test_group_by_token(rpc_stub):
    _wallet_transfers(rpc_stub)
    groups = asyncio.run(TokenWatchService(rpc_stub).group_by_token(WALLET))
    by_mint = {g.mint: g for g in groups}
    assert by_mint[USDC_MINT].total_received == 2_000_000
    assert by_mint[USDC_MINT].total_sent == 300
    assert by_mint["unknown"].total_received == 40
    assert ("getSignaturesForAddress", WALLET, 200) in rpc_stub.calls


def test_detect_suspicious_threshold_and_direction(rpc_stub):
    _wallet_transfers(rpc_stub)
    service = TokenWatchService(rpc_stub)
    events = asyncio.run(service.detect_suspicious(WALLET))
    assert [(e.signature, e.direction) for e in events] == [("in1", "in")]

    events = asyncio.run(service.detect_suspicious(WALLET, threshold=100))
    assert [(e.signature, e.direction) for e in events] == [("in1", "in"), ("out1", "out")]


def test_analyze_token_combines_groups_and_suspicious(rpc_stub):
    _wallet_transfers(rpc_stub)
    analysis = asyncio.run(TokenWatchService(rpc_stub).analyze_token(WALLET))
    assert len(analysis.groups) == 2
    assert [e.signature for e in analysis.suspicious] == ["in1"]


# -----------------------------------------------------------------------------
# Insight, heatmap, burst
# -----------------------------------------------------------------------------

def test_bucket_hourly_activity():
    sigs = [
        sig("a", block_time=NOW - 10),
        sig("b", block_time=NOW - 20),
        sig("c", block_time=NOW - 23 * 3600 - 5),
        sig("old", block_time=NOW - 25 * 3600),
        sig("none"),
    ]
    points = bucket_hourly_activity(sigs, NOW)
    assert len(points) == 24
    assert points[-1].transfers == 2
    assert points[0].transfers == 1
    assert sum(p.transfers for p in points) == 3
    assert points[0].timestamp == (NOW - 24 * 3600) * 1000


def test_activity_analyzer_fetches_1000(rpc_stub):
    rpc_stub.signatures = [sig("a", block_time=NOW - 1)]
    points = asyncio.run(TokenActivityAnalyzer(rpc_stub).analyze(USDC_MINT, now=NOW))
    assert sum(p.transfers for p in points) == 1
    assert rpc_stub.calls[0] == ("getSignaturesForAddress", USDC_MINT, 1000)


def test_deep_analyzer(rpc_stub):
    rpc_stub.accounts_by_mint = [
        token_account(USDC_MINT, WALLET, 30.0),
        token_account(USDC_MINT, WALLET_2, 0.0),
        token_account(USDC_MINT, WALLET, 10.0),
        token_account(USDC_MINT, WALLET_2, 0.0),
    ]
    metrics = asyncio.run(TokenDeepAnalyzer(rpc_stub).analyze(USDC_MINT))
    assert metrics.holder_count == 4
    assert metrics.total_supply == 40.0
    assert metrics.avg_balance == 10.0
    assert metrics.active_holders == 2


def test_deep_analyzer_no_accounts(rpc_stub):
    metrics = asyncio.run(TokenDeepAnalyzer(rpc_stub).analyze(USDC_MINT))
    assert metrics.avg_balance == 0.0
    assert metrics.holder_count == 0


def test_pattern_detector_large_transfer_and_swap(rpc_stub):
    rpc_stub.signatures = [sig("big"), sig("small"), sig("swap")]
    rpc_stub.transactions = {
        "big": transfer_tx(WALLET, WALLET_2, 5_000_000, slot=7),
        "small": transfer_tx(WALLET, WALLET_2, 10, slot=8),
        "swap": transfer_tx(WALLET, WALLET_2, 10, slot=9, extra_programs=("spl-token-swap",)),
    }
    alerts = asyncio.run(TokenPatternDetector(rpc_stub).detect(USDC_MINT, limit=3))
    assert [(a.signature, a.pattern, a.slot) for a in alerts] == [
        ("big", "large-transfer", 7),
        ("swap", "swap-event", 9),
    ]


def test_build_heatmap_utc_sunday_zero():
    # 2023-11-12 is a Sunday
    sunday_3am = int(datetime(2023, 11, 12, 3, 15, tzinfo=timezone.utc).timestamp())
    monday_noon = int(datetime(2023, 11, 13, 12, 0, tzinfo=timezone.utc).timestamp())
    now = monday_noon + 60
    sigs = [sig("a", block_time=sunday_3am), sig("b", block_time=sunday_3am + 60), sig("c", block_time=monday_noon)]
    points = build_heatmap(sigs + [sig("old", block_time=now - 8 * 24 * 3600), sig("none")], now)
    assert len(points) == 168
    counts = {(p.weekday, p.hour): p.count for p in points}
    assert counts[(0, 3)] == 2
    assert counts[(1, 12)] == 1
    assert sum(counts.values()) == 3
    assert (points[0].weekday, points[0].hour) == (0, 0)
    assert (points[-1].weekday, points[-1].hour) == (6, 23)


def test_heatmap_service(rpc_stub):
    rpc_stub.signatures = [sig("a", block_time=NOW - 60)]
    points = asyncio.run(TokenActivityHeatmap(rpc_stub).generate(USDC_MINT, now=NOW))
    assert sum(p.count for p in points) == 1


def test_burst_predictor(rpc_stub):
    rpc_stub.accounts_by_mint = [token_account(USDC_MINT, WALLET, 10.0), token_account(USDC_MINT, WALLET_2, 30.0)]
    prediction = asyncio.run(TokenBurstPredictor(rpc_stub).predict(USDC_MINT, now=NOW))
    assert prediction.mint == USDC_MINT
    assert prediction.start == NOW + 3600
    assert prediction.end == NOW + 7200
    assert prediction.confidence == pytest.approx(20.0 / 30.0)


# -----------------------------------------------------------------------------
# Account-size risk and probe
# -----------------------------------------------------------------------------

def test_account_data_size_and_score():
    data = base64.b64encode(b"\x00" * 8192).decode()
    assert account_data_size({"data": [data, "base64"]}) == 8192
    assert account_data_size(None) == 0
    assert account_data_size({"data": ["!!!", "base64"]}) == 0
    assert score_from_size(8192) == (80, "high")
    assert score_from_size(5120) == (50, "medium")
    assert score_from_size(1024) == (10, "low")
    assert score_from_size(1_000_000)[0] == 100


def test_risk_scoring_compute(rpc_stub):
    rpc_stub.account_info = {"data": [base64.b64encode(b"\x01" * 2048).decode(), "base64"], "lamports": 1}
    score = asyncio.run(RiskScoring(rpc_stub).compute(WALLET))
    assert (score.address, score.score, score.level) == (WALLET, 20, "low")


def test_account_probe_success_and_failure(rpc_stub):
    rpc_stub.account_info = {"lamports": 42, "owner": "11111111111111111111111111111111", "data": ["", "base64"]}
    ok = asyncio.run(AccountProbe(rpc_stub).run(WALLET))
    assert ok.success is True
    assert ok.data == {"lamports": 42, "owner": "11111111111111111111111111111111"}

    rpc_stub.account_info = None
    missing = asyncio.run(AccountProbe(rpc_stub).run(WALLET))
    assert missing.success is False
    assert missing.error == "Account not found"
