"""
Data models for the trading session.

Transcript messages, remote snapshots (portfolio, market data, trade
history) and the per-operation busy state. Snapshot sequences are tuples
so cached values can be handed to the UI without copying.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

PLACEHOLDER_TEXT = "Thinking ..."


class Sender(Enum):
    """Who authored a transcript message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """A single transcript entry."""

    role: Sender
    content: str
    pending: bool = False  # True only for the assistant placeholder

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Sender.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role=Sender.ASSISTANT, content=content)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Sender.SYSTEM, content=content)

    @classmethod
    def placeholder(cls) -> "Message":
        return cls(role=Sender.ASSISTANT, content=PLACEHOLDER_TEXT, pending=True)


class Direction(Enum):
    """Trade direction."""

    BUY = "BUY"
    SELL = "SELL"

    @property
    def tag(self) -> str:
        """Variant tag used on the wire ("#BUY")."""
        return f"#{self.value}"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept "BUY", "buy" or "#BUY"."""
        if isinstance(value, Direction):
            return value
        try:
            return cls(value.strip().lstrip("#").upper())
        except ValueError:
            raise ValueError(f"Unknown trade direction: {value!r}") from None


class AssetTag(Enum):
    """Assets the remote ledger can trade."""

    BTC = "BTC"
    ETH = "ETH"
    ICP = "ICP"
    SOL = "SOL"
    USDT = "USDT"

    @property
    def tag(self) -> str:
        return f"#{self.value}"

    @classmethod
    def parse(cls, value: "str | AssetTag") -> "AssetTag":
        """Accept "ETH", "eth" or "#ETH". Unknown symbols raise ValueError."""
        if isinstance(value, AssetTag):
            return value
        try:
            return cls(value.strip().lstrip("#").upper())
        except ValueError:
            raise ValueError(f"Unknown asset: {value!r}") from None


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Account balances as reported by the ledger."""

    balances: tuple[tuple[str, float], ...]  # (asset, amount), remote order
    total_value: float
    performance_24h: float  # percent

    @property
    def asset_count(self) -> int:
        return len(self.balances)

    def amount_of(self, asset: str) -> float:
        """Balance for one asset, 0 if not held."""
        for name, amount in self.balances:
            if name == asset:
                return amount
        return 0.0


@dataclass(frozen=True)
class MarketDatum:
    """Market figures for one tracked asset."""

    asset: str
    price: float
    change_24h: float  # percent
    volume: float
    market_cap: float


MarketDataSnapshot = tuple[MarketDatum, ...]


@dataclass(frozen=True)
class TradeRecord:
    """A trade as recorded by the remote ledger."""

    timestamp: int  # nanoseconds since epoch
    direction: Direction
    asset: str
    amount: float
    price: float
    reason: str

    @property
    def executed_at(self) -> datetime:
        """Timestamp as an aware UTC datetime (millisecond precision)."""
        return datetime.fromtimestamp(self.timestamp // 1_000_000 / 1000, tz=timezone.utc)

    @property
    def notional(self) -> float:
        return self.amount * self.price


class OperationKind(Enum):
    """User-initiated operation classes guarded by their own busy flag."""

    CHAT_TURN = "chat_turn"
    TRADE_EXECUTION = "trade_execution"


class OperationState(Enum):
    IDLE = "idle"
    BUSY = "busy"
