"""
Core types for the session controller.

Modules:
- models: Transcript messages, remote snapshots, operation state
- errors: Error taxonomy and reason extraction
- config: Session configuration
- currency: USD amount formatting
"""

from quantumic.core.config import DEFAULT_CONFIG, WELCOME_MESSAGE, SessionConfig
from quantumic.core.currency import format_currency
from quantumic.core.errors import (
    ConversationStateError,
    NoPendingTurn,
    OperationBusy,
    QuantumicError,
    RemoteError,
    RemoteRejected,
    RemoteTransient,
    SessionClosed,
    ValidationError,
    extract_reason,
)
from quantumic.core.models import (
    PLACEHOLDER_TEXT,
    AssetTag,
    Direction,
    MarketDataSnapshot,
    MarketDatum,
    Message,
    OperationKind,
    OperationState,
    PortfolioSnapshot,
    Sender,
    TradeRecord,
)

__all__ = [
    "DEFAULT_CONFIG",
    "PLACEHOLDER_TEXT",
    "WELCOME_MESSAGE",
    "AssetTag",
    "ConversationStateError",
    "Direction",
    "MarketDataSnapshot",
    "MarketDatum",
    "Message",
    "NoPendingTurn",
    "OperationBusy",
    "OperationKind",
    "OperationState",
    "PortfolioSnapshot",
    "QuantumicError",
    "RemoteError",
    "RemoteRejected",
    "RemoteTransient",
    "Sender",
    "SessionClosed",
    "SessionConfig",
    "TradeRecord",
    "ValidationError",
    "extract_reason",
    "format_currency",
]
