"""
Environment variable loading and validation for solwatch.

- SOLANA_RPC_ENDPOINT / SOLANA_RPC_URL: RPC endpoint (read from .env)
- HELIUS_API_KEY: Helius API key (fallback for RPC URL)
- SOLANA_NETWORK: devnet | mainnet (default: mainnet)
- SOLANA_COMMITMENT: processed | confirmed | finalized (default: confirmed)
- Loads .env from project root when available.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is solwatch/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")
DEFAULT_COMMITMENT = "confirmed"
DEFAULT_PORT = 3000
DEFAULT_WATCH_INTERVAL_SEC = 5.0
DEFAULT_WATCH_FETCH_LIMIT = 10


def load_solwatch_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """Return SOLANA_NETWORK from env: devnet | mainnet. Default: mainnet."""
    load_solwatch_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw == "devnet":
        return "devnet"
    return "mainnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_ENDPOINT > SOLANA_RPC_URL > HELIUS_API_KEY (network-specific) > public default.
    """
    load_solwatch_env()
    for var in ("SOLANA_RPC_ENDPOINT", "SOLANA_RPC_URL"):
        url = (os.getenv(var) or "").strip()
        if url:
            return url
    network = get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        if network == "devnet":
            return HELIUS_DEVNET_URL_TEMPLATE.format(key=key)
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return DEVNET_RPC_URL if network == "devnet" else MAINNET_RPC_URL


def get_commitment() -> str:
    """Return SOLANA_COMMITMENT; unknown values fall back to confirmed."""
    load_solwatch_env()
    raw = (os.getenv("SOLANA_COMMITMENT") or "").strip().lower()
    return raw if raw in VALID_COMMITMENTS else DEFAULT_COMMITMENT


def get_storage_dir() -> Path:
    """Directory for JSON-backed stores (bookmarks, tasks). Default: current directory."""
    load_solwatch_env()
    raw = (os.getenv("STORAGE_DIR") or "").strip()
    return Path(raw) if raw else Path.cwd()


def get_port() -> int:
    load_solwatch_env()
    raw = (os.getenv("PORT") or "").strip()
    try:
        return int(raw) if raw else DEFAULT_PORT
    except ValueError:
        return DEFAULT_PORT


def get_redis_url() -> str | None:
    load_solwatch_env()
    return (os.getenv("REDIS_URL") or "").strip() or None


def get_drift_api_url() -> str:
    """Base URL of the ticker API used by the drift fetcher. Defaults to the RPC URL."""
    load_solwatch_env()
    return (os.getenv("DRIFT_API_URL") or "").strip() or get_solana_rpc_url()


def get_signer_secret_key() -> bytes | None:
    """
    Parse SIGNER_SECRET_KEY (JSON array of 64 ints, as written by solana-keygen).
    Returns None when unset; raises ValueError when set but malformed.
    """
    load_solwatch_env()
    raw = (os.getenv("SIGNER_SECRET_KEY") or "").strip()
    if not raw:
        return None
    try:
        values = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"SIGNER_SECRET_KEY is not valid JSON: {e}") from e
    if not isinstance(values, list) or not all(isinstance(v, int) for v in values):
        raise ValueError("SIGNER_SECRET_KEY must be a JSON array of integers")
    return bytes(values)


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        value = float(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def get_watch_interval_sec() -> float:
    load_solwatch_env()
    return _float_env("WATCH_INTERVAL_SEC", DEFAULT_WATCH_INTERVAL_SEC)


def get_watch_fetch_limit() -> int:
    load_solwatch_env()
    return int(_float_env("WATCH_FETCH_LIMIT", DEFAULT_WATCH_FETCH_LIMIT))


def mask_rpc_url(url: str) -> str:
    """Hide API keys embedded in RPC URLs before logging them."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url
