"""
Status bar component.

Displays backend, busy state of chat and trades, and view freshness.
"""

from datetime import datetime

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static

from quantumic.session.cache import Slot, SlotState

# Theme colors (Rich markup)
COLOR_UP = "#44ffaa"
COLOR_DOWN = "#ff7777"

SLOT_LABELS = {
    Slot.PORTFOLIO: "PF",
    Slot.MARKET_DATA: "MKT",
    Slot.TRADE_HISTORY: "HIST",
}


def freshness_label(slot: Slot, state: SlotState, now: datetime | None = None) -> str:
    """Short markup label: slot name plus age of the applied snapshot."""
    label = SLOT_LABELS[slot]
    if not state.loaded:
        if state.last_error is not None:
            return f"[{COLOR_DOWN}]{label} ✗[/{COLOR_DOWN}]"
        return f"[dim]{label} …[/dim]"

    age = ((now or datetime.now()) - state.refreshed_at).total_seconds()
    color = COLOR_DOWN if state.last_error is not None else COLOR_UP
    return f"[{color}]{label} {age:.0f}s[/{color}]"


class StatusBar(Horizontal):
    """Status bar showing backend, busy flags and data freshness."""

    def compose(self) -> ComposeResult:
        yield Static("", id="status-bar", classes="status-bar-left")
        yield Static("", id="freshness-bar", classes="status-bar-right")

    def update_status(
        self,
        base_url: str,
        chat_busy: bool,
        trade_busy: bool,
        slots: dict[Slot, SlotState],
    ) -> None:
        """
        Update both status sections.

        Args:
            base_url: Backend the session talks to
            chat_busy: A chat reply is outstanding
            trade_busy: A trade is being executed
            slots: Cache slot states for freshness display
        """
        chat = "[yellow]thinking[/yellow]" if chat_busy else "[dim]idle[/dim]"
        trade = "[yellow]executing[/yellow]" if trade_busy else "[dim]idle[/dim]"
        self.query_one("#status-bar", Static).update(
            f"🔌 {base_url}  │  Chat: {chat}  │  Trade: {trade}"
        )

        now = datetime.now()
        self.query_one("#freshness-bar", Static).update(
            "  ".join(freshness_label(slot, state, now) for slot, state in slots.items())
        )
