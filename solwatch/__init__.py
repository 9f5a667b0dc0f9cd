"""
solwatch: small Solana RPC services and CLIs.

Polls transaction signatures for watched addresses, pulls balances and token
account data, and derives simple statistics (distribution shape, risk scores,
activity heatmaps, price drift). Every service is exposed through one FastAPI
app and a handful of argparse tools.
"""

__version__ = "0.1.0"
