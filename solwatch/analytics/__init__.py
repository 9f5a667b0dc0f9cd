"""
Analytics services.

Single-purpose wrappers over one or two RPC calls each: balances and balance
history, mint info, distribution shape, holder/transfer scanning with a risk
score, wallet token-watch, insight analyzers, heatmap, burst prediction,
account-size risk, and price drift between vendors.
"""

from solwatch.analytics.balances import BalanceHistoryService, PullBalanceService
from solwatch.analytics.burst import TokenBurstPredictor
from solwatch.analytics.core_scanner import CoreScannerService
from solwatch.analytics.drift import DriftEvaluator, DriftFetcher
from solwatch.analytics.heatmap import TokenActivityHeatmap
from solwatch.analytics.insight import TokenActivityAnalyzer, TokenDeepAnalyzer, TokenPatternDetector
from solwatch.analytics.risk_scoring import AccountProbe, RiskScoring
from solwatch.analytics.token_data import TokenDataService
from solwatch.analytics.token_shape import TokenShapeService
from solwatch.analytics.token_watch import TokenWatchService

__all__ = [
    "AccountProbe",
    "BalanceHistoryService",
    "CoreScannerService",
    "DriftEvaluator",
    "DriftFetcher",
    "PullBalanceService",
    "RiskScoring",
    "TokenActivityAnalyzer",
    "TokenActivityHeatmap",
    "TokenBurstPredictor",
    "TokenDataService",
    "TokenDeepAnalyzer",
    "TokenPatternDetector",
    "TokenShapeService",
    "TokenWatchService",
]
