#!/usr/bin/env python3
"""
Terminal dashboard for a Quantumic trading session.

A dark-themed UI showing:
- AI chat with the trading agent
- Portfolio balances and 24h performance
- Market data for tracked assets
- Ledger trade history

The dashboard only reads session view models and calls the session's
entry points; polling and busy state live in TradingSession.

Run with:
    python -m quantumic.ui.cli --url http://localhost:4943/api
"""

import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer, Input

from quantumic.core.config import DEFAULT_CONFIG, SessionConfig
from quantumic.core.errors import OperationBusy, RemoteError, SessionClosed, ValidationError
from quantumic.core.models import OperationKind
from quantumic.session.cache import Slot
from quantumic.session.session import TradingSession
from quantumic.ui.commands import CommandKind, parse_command
from quantumic.ui.components import (
    ChatPanel,
    HistoryPanel,
    MarketsPanel,
    PortfolioPanel,
    StatusBar,
)

logger = logging.getLogger("dashboard")


class QuantumicDashboard(App):
    """Terminal front end for one trading session."""

    TITLE = "QUANTUMIC"
    CSS = """
    .panel-title { background: #1a1a2e; color: #66ccff; padding: 0 1; }
    .status-row { height: 1; }
    .status-bar-left { width: 2fr; }
    .status-bar-right { width: 1fr; content-align: right middle; }
    #chat-panel { width: 3fr; }
    .data-panels { width: 2fr; }
    """
    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+a", "auto_trade", "Auto Trade", priority=True),
        Binding("ctrl+r", "refresh", "Refresh"),
    ]

    def __init__(self, session: TradingSession):
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        yield StatusBar(id="status-row", classes="status-row")
        with Horizontal():
            with Vertical(id="chat-panel"):
                yield ChatPanel(id="chat", classes="panel")
                yield Input(
                    placeholder="Ask about markets or trading...  (/buy ETH 0.5, /sell BTC 0.01, /auto)",
                    id="chat-input",
                )
            with Vertical(classes="data-panels"):
                yield PortfolioPanel(id="portfolio-panel", classes="panel")
                yield MarketsPanel(id="markets-panel", classes="panel")
                yield HistoryPanel(id="history-panel", classes="panel")
        yield Footer()

    def on_mount(self) -> None:
        """Start polling and the display refresh timer."""
        self.session.start()
        self.refresh_views()
        self.set_interval(0.5, self.refresh_views)

    def refresh_views(self) -> None:
        session = self.session
        self.query_one(ChatPanel).update_display(session.transcript)
        self.query_one(PortfolioPanel).update_display(session.portfolio, session.market_data)
        self.query_one(MarketsPanel).update_display(session.market_data)
        self.query_one(HistoryPanel).update_display(session.trade_history)
        self.query_one(StatusBar).update_status(
            base_url=session.config.base_url,
            chat_busy=session.is_busy(OperationKind.CHAT_TURN),
            trade_busy=session.is_busy(OperationKind.TRADE_EXECUTION),
            slots={slot: session.cache.state(slot) for slot in Slot},
        )

    # ── input ──────────────────────────────────────────────────────────────────

    def on_input_submitted(self, event: Input.Submitted) -> None:
        try:
            command = parse_command(event.value, self.session.config.default_trade_asset)
        except ValidationError as e:
            self.notify(str(e), severity="warning")
            return

        if command.kind is CommandKind.CHAT:
            if self.session.is_busy(OperationKind.CHAT_TURN) or not command.text.strip():
                return
            event.input.value = ""
            self.send_chat(command.text)
        elif command.kind is CommandKind.AUTO_TRADE:
            event.input.value = ""
            self.action_auto_trade()
        else:
            self.send_trade(command.asset, command.direction, command.amount)

    @work(exclusive=False)
    async def send_chat(self, text: str) -> None:
        await self.session.submit_chat_turn(text)
        self.refresh_views()

    @work(exclusive=False)
    async def send_trade(self, asset, direction, amount) -> None:
        try:
            await self.session.submit_trade(asset, direction, amount)
        except (ValidationError, OperationBusy, SessionClosed) as e:
            self.notify(str(e), severity="warning")
            return
        except RemoteError:
            # Notice is already in the transcript; keep the input for editing
            self.refresh_views()
            return
        self.query_one("#chat-input", Input).value = ""
        self.refresh_views()

    # ── actions ────────────────────────────────────────────────────────────────

    @work(exclusive=False)
    async def action_auto_trade(self) -> None:
        try:
            await self.session.submit_auto_trade()
        except (OperationBusy, SessionClosed) as e:
            self.notify(str(e), severity="warning")
        self.refresh_views()

    @work(exclusive=False)
    async def action_refresh(self) -> None:
        await self.session.cache.refresh_all()
        self.refresh_views()

    async def action_quit(self) -> None:
        """Quit the application with proper cleanup."""
        await self.session.stop()
        logger.info("Dashboard shutdown complete")
        self.exit()

    async def on_unmount(self) -> None:
        await self.session.stop()


def run_dashboard(config: SessionConfig | None = None) -> None:
    """Build a session from config and run the dashboard until quit."""
    # File only to avoid interfering with the TUI
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=[logging.FileHandler("quantumic.log")],
    )
    session = TradingSession.from_config(config or DEFAULT_CONFIG)
    QuantumicDashboard(session).run()


if __name__ == "__main__":
    from quantumic.ui.cli import run_cli

    run_cli()
