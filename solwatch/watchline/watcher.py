"""
Address watcher: detect new transaction signatures by periodic polling.

Responsibilities:
- Hold a set of watched addresses and the last signature seen for each.
- Every interval, fetch the most recent signatures for all addresses
  concurrently (getSignaturesForAddress, newest first).
- Deliver signatures not seen in the previous poll to registered callbacks,
  oldest first.
- Keep polling through per-address RPC failures and failing callbacks.

Known limitations:
- stop() cancels the schedule, not a cycle already in flight; such a cycle
  finishes and may still update last-seen state.
- If the stored last-seen signature is missing from the fetched page (the feed
  advanced by more than fetch_limit, or history was rewritten), the whole page
  is treated as new. No stronger consistency is attempted.
- Cycles may overlap when the RPC is slower than the interval unless
  serialize_cycles=True, which skips ticks while a cycle is in flight.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Union

from solwatch.rpc.client import LedgerRpcClient
from solwatch.rpc.models import SignatureInfo
from solwatch.solwatch_logging import get_logger
from solwatch.utils.address_utils import normalize_address

DEFAULT_FETCH_LIMIT = 10
DEFAULT_INTERVAL_SEC = 10.0

TransactionCallback = Callable[[str, SignatureInfo], Union[Awaitable[None], None]]


def select_new_signatures(
    page: list[SignatureInfo], last_seen: str | None
) -> list[SignatureInfo]:
    """
    Return the signatures in page (newest first) that are newer than last_seen,
    ordered oldest first. No last_seen, or last_seen absent from page: whole page.
    """
    if last_seen is None:
        return list(reversed(page))
    fresh: list[SignatureInfo] = []
    for info in page:
        if info.signature == last_seen:
            break
        fresh.append(info)
    fresh.reverse()
    return fresh


class AddressWatcher:
    """
    Polling watcher for a mutable set of addresses.

    All state lives on the instance and is mutated only from the event loop
    (public methods and the timer task), so no locking is needed. start() must
    be called from a running event loop.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        logger: Any = None,
        client: LedgerRpcClient | None = None,
        serialize_cycles: bool = False,
    ) -> None:
        """
        Args:
            rpc_url: Solana RPC HTTP endpoint.
            commitment: Commitment level for signature queries.
            fetch_limit: Signatures fetched per address per cycle (1-1000).
            logger: structlog-style logger (info/warning/error taking an event
                name and key/value fields). Defaults to the module logger.
            client: Pre-built RPC client; one is created from rpc_url otherwise.
            serialize_cycles: Skip a tick while the previous cycle is still running.
        """
        if not (1 <= fetch_limit <= 1000):
            raise ValueError("fetch_limit must be between 1 and 1000")
        self._commitment = commitment
        self._fetch_limit = fetch_limit
        self._logger = logger if logger is not None else get_logger(__name__)
        self._owns_client = client is None
        self._client = client or LedgerRpcClient(rpc_url, commitment=commitment)
        self._serialize_cycles = serialize_cycles

        # dicts as insertion-ordered sets
        self._addresses: dict[str, None] = {}
        self._callbacks: dict[TransactionCallback, None] = {}
        self._last_seen: dict[str, str | None] = {}

        self._timer: asyncio.Task[None] | None = None
        self._cycles: set[asyncio.Task[None]] = set()

    # -- watch set -------------------------------------------------------

    @property
    def addresses(self) -> tuple[str, ...]:
        return tuple(self._addresses)

    def add_address(self, address: str) -> str:
        """Start watching address. Raises InvalidAddressError; no-op if already watched."""
        key = normalize_address(address)
        if key in self._addresses:
            return key
        self._addresses[key] = None
        self._last_seen[key] = None
        self._logger.info("watch_address_added", address=key)
        return key

    def remove_address(self, address: str) -> None:
        """Stop watching address and forget its last-seen signature. No-op if absent."""
        key = address.strip() if isinstance(address, str) else address
        if key not in self._addresses:
            return
        del self._addresses[key]
        self._last_seen.pop(key, None)
        self._logger.info("watch_address_removed", address=key)

    def last_seen(self, address: str) -> str | None:
        return self._last_seen.get(address)

    # -- callbacks -------------------------------------------------------

    def on_transaction(self, callback: TransactionCallback) -> None:
        self._callbacks.setdefault(callback, None)

    def off_transaction(self, callback: TransactionCallback) -> None:
        self._callbacks.pop(callback, None)

    @property
    def callback_count(self) -> int:
        return len(self._callbacks)

    # -- lifecycle -------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def start(self, interval_sec: float = DEFAULT_INTERVAL_SEC) -> None:
        """Begin polling every interval_sec. No-op while already running."""
        if self.is_running:
            return
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(self._run_timer(interval_sec))
        self._logger.info(
            "watch_started",
            interval_sec=interval_sec,
            address_count=len(self._addresses),
            commitment=self._commitment,
            serialize_cycles=self._serialize_cycles,
        )

    def stop(self) -> None:
        """Cancel the polling schedule. Safe when not running; in-flight cycles finish."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        self._logger.info("watch_stopped")

    def clear(self) -> None:
        """Stop and reset to the freshly constructed state."""
        self.stop()
        self._addresses.clear()
        self._last_seen.clear()
        self._callbacks.clear()

    async def aclose(self) -> None:
        """Stop, cancel in-flight cycles and close the RPC client if owned."""
        self.stop()
        for task in list(self._cycles):
            task.cancel()
        if self._cycles:
            await asyncio.gather(*self._cycles, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()

    async def _run_timer(self, interval_sec: float) -> None:
        while True:
            await asyncio.sleep(interval_sec)
            self._tick()

    def _tick(self) -> None:
        if self._serialize_cycles and self._cycles:
            self._logger.warning("watch_cycle_skipped", in_flight=len(self._cycles))
            return
        task = asyncio.get_running_loop().create_task(self._run_cycle())
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)

    async def _run_cycle(self) -> None:
        try:
            await self.poll_once()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.error("watch_cycle_error", error=str(e))

    # -- polling ---------------------------------------------------------

    async def poll_once(self) -> None:
        """Run one poll cycle over every watched address concurrently."""
        addresses = list(self._addresses)
        if not addresses:
            return
        await asyncio.gather(*(self._poll_address(a) for a in addresses))

    async def _poll_address(self, address: str) -> None:
        try:
            page = await self._client.get_signatures_for_address(
                address, limit=self._fetch_limit, commitment=self._commitment
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.error("watch_fetch_failed", address=address, error=str(e))
            return

        # removed while the fetch was in flight
        if address not in self._addresses:
            self._logger.info("watch_result_discarded", address=address)
            return

        fresh = select_new_signatures(page, self._last_seen.get(address))
        if page:
            self._last_seen[address] = page[0].signature
        if not fresh:
            return
        self._logger.info(
            "watch_new_signatures",
            address=address,
            signature_count=len(fresh),
            newest=page[0].signature,
        )
        for info in fresh:
            await self._deliver(address, info)

    async def _deliver(self, address: str, info: SignatureInfo) -> None:
        for callback in list(self._callbacks):
            if address not in self._addresses:
                return
            try:
                result = callback(address, info)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._logger.warning(
                    "watch_callback_failed",
                    address=address,
                    signature=info.signature,
                    error=str(e),
                )
