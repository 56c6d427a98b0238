"""
UI components for the trading dashboard.

Reusable Textual widgets for displaying session view models.
"""

from quantumic.ui.components.chat_panel import ChatPanel
from quantumic.ui.components.history_panel import HistoryPanel
from quantumic.ui.components.markets_panel import MarketsPanel
from quantumic.ui.components.portfolio_panel import PortfolioPanel
from quantumic.ui.components.status_bar import StatusBar

__all__ = [
    "ChatPanel",
    "HistoryPanel",
    "MarketsPanel",
    "PortfolioPanel",
    "StatusBar",
]
