"""
Portfolio panel component.

Displays total value, 24h performance and per-asset balances valued at
the latest market prices.
"""

from textual.app import ComposeResult
from textual.containers import Container, ScrollableContainer
from textual.widgets import Static

from quantumic.core.currency import format_currency
from quantumic.core.models import MarketDatum, PortfolioSnapshot
from quantumic.ui.formatting import allocation, format_change

# Theme colors (Rich markup)
COLOR_UP = "#44ffaa"
COLOR_DOWN = "#ff7777"


def portfolio_lines(
    portfolio: PortfolioSnapshot | None,
    market_data: tuple[MarketDatum, ...] | None,
) -> list[str]:
    """Rich-markup lines for the portfolio view."""
    if portfolio is None:
        return ["[dim]Loading portfolio...[/dim]"]

    perf_color = COLOR_UP if portfolio.performance_24h >= 0 else COLOR_DOWN
    lines = [
        f"Total Value: [bold]{format_currency(portfolio.total_value)}[/bold]",
        f"24h: [{perf_color}]{format_change(portfolio.performance_24h)}[/{perf_color}]"
        f"  │  Assets: {portfolio.asset_count}",
        "",
    ]

    rows = allocation(portfolio, market_data)
    if not rows:
        lines.append("[dim]No balances[/dim]")
    for row in rows:
        color = COLOR_UP if row.change_24h >= 0 else COLOR_DOWN
        lines.append(
            f"{row.asset:<5} {row.amount:>12.4f}  {format_currency(row.value):>14}  "
            f"[{color}]{format_change(row.change_24h)}[/{color}]"
        )
    return lines


class PortfolioPanel(Container):
    """Panel displaying portfolio balances."""

    def compose(self) -> ComposeResult:
        yield Static("💼 PORTFOLIO", classes="panel-title")
        with ScrollableContainer(id="portfolio-scroll", classes="panel-content"):
            yield Static("", id="portfolio-content")

    def update_display(
        self,
        portfolio: PortfolioSnapshot | None,
        market_data: tuple[MarketDatum, ...] | None,
    ) -> None:
        content = self.query_one("#portfolio-content", Static)
        content.update("\n".join(portfolio_lines(portfolio, market_data)))
