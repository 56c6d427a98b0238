"""
Trade history panel component.

Displays ledger trades, most recent first.
"""

from textual.app import ComposeResult
from textual.containers import Container, ScrollableContainer
from textual.widgets import Static

from quantumic.core.currency import format_currency
from quantumic.core.models import Direction, TradeRecord

# Theme colors (Rich markup)
COLOR_UP = "#44ffaa"
COLOR_DOWN = "#ff7777"


def history_lines(trades: tuple[TradeRecord, ...] | None, limit: int = 20) -> list[str]:
    """Rich-markup lines for the last `limit` trades, newest first."""
    if not trades:
        return ["[dim]No trades yet[/dim]"]

    lines = []
    for trade in reversed(trades[-limit:]):
        color = COLOR_UP if trade.direction is Direction.BUY else COLOR_DOWN
        when = trade.executed_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        lines.append(
            f"[dim]{when}[/dim] [{color}]{trade.direction.value:<4}[/{color}] "
            f"{trade.amount:.4f} {trade.asset} @ {format_currency(trade.price)}"
        )
        if trade.reason:
            lines.append(f"    [dim]{trade.reason}[/dim]")
    return lines


class HistoryPanel(Container):
    """Panel displaying trade history."""

    def compose(self) -> ComposeResult:
        yield Static("📜 TRADE HISTORY", classes="panel-title")
        with ScrollableContainer(id="history-scroll", classes="panel-content"):
            yield Static("", id="history-content")

    def update_display(self, trades: tuple[TradeRecord, ...] | None) -> None:
        """
        Update the history display.

        Args:
            trades: Trade history snapshot from the ledger
        """
        content = self.query_one("#history-content", Static)
        content.update("\n".join(history_lines(trades)))
