"""
Synced state cache.

Holds the latest portfolio, market data and trade history snapshots.
Each slot is refreshed independently by a single gateway read and
replaced wholesale on success. A failed read leaves the previous value
in place (stale but present beats empty).

Overlapping refreshes of the same slot are allowed. Every dispatch takes
a per-slot sequence number and a response is only applied if it is newer
than the last one applied, so the most recently dispatched read wins even
when replies arrive out of order.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from quantumic.core.models import MarketDatum, PortfolioSnapshot, TradeRecord
from quantumic.gateway.client import Gateway

logger = logging.getLogger(__name__)


class Slot(Enum):
    PORTFOLIO = "portfolio"
    MARKET_DATA = "market_data"
    TRADE_HISTORY = "trade_history"


@dataclass
class SlotState:
    """Current value and refresh bookkeeping for one slot."""

    value: Any = None  # None until the first successful fetch
    refreshed_at: datetime | None = None
    last_error: BaseException | None = None
    dispatched_seq: int = 0
    applied_seq: int = 0
    in_flight: int = 0

    @property
    def loaded(self) -> bool:
        return self.applied_seq > 0


class SyncedStateCache:
    """Independently refreshable snapshots of remote state."""

    def __init__(self, gateway: Gateway):
        self._gateway = gateway
        self._slots: dict[Slot, SlotState] = {slot: SlotState() for slot in Slot}
        self._fetchers: dict[Slot, Callable[[], Awaitable[Any]]] = {
            Slot.PORTFOLIO: gateway.get_portfolio,
            Slot.MARKET_DATA: gateway.get_market_data,
            Slot.TRADE_HISTORY: gateway.get_trade_history,
        }
        self._closed = False

    # ── read accessors ─────────────────────────────────────────────────────────

    @property
    def portfolio(self) -> PortfolioSnapshot | None:
        return self._slots[Slot.PORTFOLIO].value

    @property
    def market_data(self) -> tuple[MarketDatum, ...] | None:
        return self._slots[Slot.MARKET_DATA].value

    @property
    def trade_history(self) -> tuple[TradeRecord, ...] | None:
        return self._slots[Slot.TRADE_HISTORY].value

    def get(self, slot: Slot) -> Any:
        return self._slots[slot].value

    def state(self, slot: Slot) -> SlotState:
        return self._slots[slot]

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop applying responses; anything still in flight is discarded."""
        self._closed = True

    # ── refresh ────────────────────────────────────────────────────────────────

    async def refresh(self, slot: Slot) -> bool:
        """
        Fetch one slot from the gateway.

        Returns True if the response was applied. Failures are logged and
        recorded on the slot, never raised.
        """
        state = self._slots[slot]
        state.dispatched_seq += 1
        seq = state.dispatched_seq
        state.in_flight += 1

        try:
            value = await self._fetchers[slot]()
        except Exception as e:
            if not self._closed:
                state.last_error = e
            logger.warning(f"Failed to fetch {slot.value}: {e}")
            return False
        finally:
            state.in_flight -= 1

        if self._closed:
            logger.debug(f"Discarding {slot.value} response #{seq}: session closed")
            return False
        if seq <= state.applied_seq:
            logger.debug(
                f"Discarding stale {slot.value} response #{seq} (applied #{state.applied_seq})"
            )
            return False

        state.value = value
        state.applied_seq = seq
        state.refreshed_at = datetime.now()
        state.last_error = None
        return True

    async def refresh_many(self, slots: Iterable[Slot]) -> dict[Slot, bool]:
        """Refresh several slots concurrently."""
        slots = list(slots)
        results = await asyncio.gather(*(self.refresh(slot) for slot in slots))
        return dict(zip(slots, results))

    async def refresh_all(self) -> dict[Slot, bool]:
        return await self.refresh_many(Slot)
