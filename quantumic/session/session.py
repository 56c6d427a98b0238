"""
Trading session.

Wires the gateway, transcript, cache, polling scheduler and operation
coordinator into one object with an explicit lifecycle:

    async with TradingSession.from_config(config) as session:
        await session.submit_chat_turn("Show BTC trend")
        print(session.transcript[-1].content)

start() performs the initial full refresh and arms polling; stop() tears
polling down, refuses new operations and discards responses that arrive
afterwards, so a stopped session's transcript and views never change.
"""

import logging

from quantumic.core.config import DEFAULT_CONFIG, SessionConfig
from quantumic.core.models import (
    AssetTag,
    Direction,
    MarketDatum,
    Message,
    OperationKind,
    PortfolioSnapshot,
    TradeRecord,
)
from quantumic.gateway.client import Gateway, RemoteGateway
from quantumic.session.cache import SyncedStateCache
from quantumic.session.conversation import ConversationStore
from quantumic.session.coordinator import OperationCoordinator
from quantumic.session.scheduler import PollingScheduler

logger = logging.getLogger(__name__)


class TradingSession:
    """One dashboard session against the remote agent and ledger."""

    def __init__(
        self,
        gateway: Gateway,
        config: SessionConfig | None = None,
        owns_gateway: bool = False,
    ):
        """
        Args:
            gateway: Remote agent/ledger client
            config: Session configuration (defaults to DEFAULT_CONFIG)
            owns_gateway: Close the gateway on stop()
        """
        self.config = config or DEFAULT_CONFIG
        self.gateway = gateway
        self._owns_gateway = owns_gateway

        self.conversation = ConversationStore(self.config.welcome_message)
        self.cache = SyncedStateCache(gateway)
        self.scheduler = PollingScheduler(self.cache, interval=self.config.poll_interval_seconds)
        self.coordinator = OperationCoordinator(gateway, self.conversation, self.cache)

        self._started = False
        self._stopped = False

    @classmethod
    def from_config(cls, config: SessionConfig | None = None) -> "TradingSession":
        """Build a session with its own HTTP gateway."""
        config = config or DEFAULT_CONFIG
        gateway = RemoteGateway(config.base_url, timeout=config.request_timeout_seconds)
        return cls(gateway, config=config, owns_gateway=True)

    # ── lifecycle ──────────────────────────────────────────────────────────────

    @property
    def is_active(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> None:
        """Start polling (initial refresh of all views happens immediately)."""
        if self._stopped:
            raise RuntimeError("Session has been stopped")
        if self._started:
            return
        self._started = True
        self.scheduler.start()
        logger.info(f"Session started against {self.config.base_url}")

    async def stop(self) -> None:
        """Stop polling, refuse new operations and drop late responses. Safe to call twice."""
        if self._stopped:
            return
        self._stopped = True
        self.coordinator.close()
        self.cache.close()
        try:
            await self.scheduler.stop()
        finally:
            if self._owns_gateway and isinstance(self.gateway, RemoteGateway):
                await self.gateway.close()
        logger.info("Session stopped")

    async def __aenter__(self) -> "TradingSession":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # ── read accessors ─────────────────────────────────────────────────────────

    @property
    def transcript(self) -> tuple[Message, ...]:
        return self.conversation.snapshot()

    @property
    def portfolio(self) -> PortfolioSnapshot | None:
        return self.cache.portfolio

    @property
    def market_data(self) -> tuple[MarketDatum, ...] | None:
        return self.cache.market_data

    @property
    def trade_history(self) -> tuple[TradeRecord, ...] | None:
        return self.cache.trade_history

    def is_busy(self, kind: OperationKind) -> bool:
        return self.coordinator.is_busy(kind)

    # ── entry points ───────────────────────────────────────────────────────────

    async def submit_chat_turn(self, text: str) -> bool:
        return await self.coordinator.submit_chat_turn(text)

    async def submit_trade(
        self,
        asset: AssetTag | str,
        direction: Direction | str,
        amount: float | int | str,
    ) -> TradeRecord:
        return await self.coordinator.submit_trade(asset, direction, amount)

    async def submit_auto_trade(self) -> TradeRecord | None:
        return await self.coordinator.submit_auto_trade()
