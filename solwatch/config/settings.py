"""
Application settings.

Resolved once from the environment (see config.env) into a frozen dataclass
used by the API server and CLI tools.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path

from solwatch.config import env


@dataclass(frozen=True)
class Settings:
    rpc_url: str
    commitment: str
    storage_dir: Path
    port: int
    redis_url: str | None
    drift_api_url: str
    signer_secret_key: bytes | None
    watch_interval_sec: float
    watch_fetch_limit: int


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the current application settings (cached for the process)."""
    return Settings(
        rpc_url=env.get_solana_rpc_url(),
        commitment=env.get_commitment(),
        storage_dir=env.get_storage_dir(),
        port=env.get_port(),
        redis_url=env.get_redis_url(),
        drift_api_url=env.get_drift_api_url(),
        signer_secret_key=env.get_signer_secret_key(),
        watch_interval_sec=env.get_watch_interval_sec(),
        watch_fetch_limit=env.get_watch_fetch_limit(),
    )


def reset_settings_cache() -> None:
    """Drop cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
