"""
Session orchestration.

Modules:
- conversation: Transcript with pending/resolve assistant turns
- cache: Independently refreshed portfolio, market data and history snapshots
- scheduler: Periodic background refresh of the cache
- coordinator: Busy state and execution of chat turns and trades
- session: TradingSession wiring the above with a start/stop lifecycle
"""

from quantumic.session.cache import Slot, SlotState, SyncedStateCache
from quantumic.session.conversation import ConversationStore
from quantumic.session.coordinator import OperationCoordinator, parse_amount, trade_summary
from quantumic.session.scheduler import PollingScheduler
from quantumic.session.session import TradingSession

__all__ = [
    "ConversationStore",
    "OperationCoordinator",
    "PollingScheduler",
    "Slot",
    "SlotState",
    "SyncedStateCache",
    "TradingSession",
    "parse_amount",
    "trade_summary",
]
