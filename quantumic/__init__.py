"""
Quantumic trading dashboard session controller.

Keeps a conversation with the remote trading agent, issues manual and
automatic trades against the remote ledger, and keeps portfolio, market
data and trade history views in sync by polling.
"""

from quantumic.core.config import DEFAULT_CONFIG, SessionConfig
from quantumic.session.session import TradingSession

__all__ = [
    "DEFAULT_CONFIG",
    "SessionConfig",
    "TradingSession",
]

__version__ = "0.1.0"
