"""
Markets panel component.

Displays tracked assets in a DataTable with price, 24h change, volume
and market cap.
"""

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Static

from quantumic.core.currency import format_currency
from quantumic.core.models import MarketDatum
from quantumic.ui.formatting import format_change

# Theme colors (Rich markup)
COLOR_UP = "#44ffaa"
COLOR_DOWN = "#ff7777"

COLUMNS = ("Asset", "Price", "24h", "Volume", "Market Cap")


def market_row(datum: MarketDatum) -> tuple[str, str, Text, str, str]:
    color = COLOR_UP if datum.change_24h >= 0 else COLOR_DOWN
    return (
        datum.asset,
        format_currency(datum.price),
        Text(format_change(datum.change_24h), style=color),
        format_currency(datum.volume),
        format_currency(datum.market_cap),
    )


class MarketsPanel(Container):
    """Panel displaying market data for all tracked assets."""

    DEFAULT_CSS = """
    MarketsPanel {
        height: 100%;
    }
    MarketsPanel DataTable {
        height: 1fr;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._rendered: tuple[MarketDatum, ...] | None = None

    def compose(self) -> ComposeResult:
        yield Static("📈 MARKET DATA", classes="panel-title")
        yield DataTable(id="markets-table", zebra_stripes=True, cursor_type="none")

    def on_mount(self) -> None:
        table = self.query_one("#markets-table", DataTable)
        table.add_columns(*COLUMNS)

    def update_display(self, market_data: tuple[MarketDatum, ...] | None) -> None:
        """Rebuild the table when the market snapshot changed."""
        if market_data == self._rendered:
            return
        self._rendered = market_data

        table = self.query_one("#markets-table", DataTable)
        table.clear()
        for datum in market_data or ():
            table.add_row(*market_row(datum))
