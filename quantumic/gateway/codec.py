"""
Wire encoding for the agent/ledger service.

The backend speaks tagged variants: roles are single-key objects
({"user": null}), directions and assets are "#"-prefixed tags ("#BUY",
"#ETH"), and trade timestamps are integer nanoseconds. Decoders convert
those shapes into the frozen models and raise ValueError on anything
they cannot read.
"""

from typing import Any

from quantumic.core.models import (
    Direction,
    MarketDatum,
    Message,
    PortfolioSnapshot,
    Sender,
    TradeRecord,
)

# The agent only distinguishes user turns from everything else
_ROLE_KEYS = {
    Sender.USER: "user",
    Sender.ASSISTANT: "system",
    Sender.SYSTEM: "system",
}


def encode_message(message: Message) -> dict:
    return {"role": {_ROLE_KEYS[message.role]: None}, "content": message.content}


def encode_history(history: list[Message] | tuple[Message, ...]) -> list[dict]:
    return [encode_message(m) for m in history]


def _variant(value: Any) -> str:
    """Read a variant given as "#TAG", "TAG" or {"TAG": null}."""
    if isinstance(value, dict):
        if len(value) != 1:
            raise ValueError(f"Expected single-key variant, got: {value!r}")
        value = next(iter(value))
    if not isinstance(value, str):
        raise ValueError(f"Expected variant tag, got: {value!r}")
    return value.lstrip("#")


def _float(value: Any, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Field {field} is not a number: {value!r}") from None


def _number(data: dict, key: str) -> float:
    if key not in data:
        raise ValueError(f"Missing field: {key}")
    return _float(data[key], key)


def decode_portfolio(data: Any) -> PortfolioSnapshot:
    if not isinstance(data, dict):
        raise ValueError(f"Expected portfolio object, got: {type(data).__name__}")

    entries = data.get("balances", [])
    if not isinstance(entries, list):
        raise ValueError(f"Expected balances list, got: {type(entries).__name__}")

    balances = []
    for entry in entries:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise ValueError(f"Malformed balance entry: {entry!r}")
        asset, amount = entry
        symbol = _variant(asset)
        balances.append((symbol, _float(amount, f"balance {symbol}")))

    return PortfolioSnapshot(
        balances=tuple(balances),
        total_value=_number(data, "totalValue"),
        performance_24h=_number(data, "performance24h"),
    )


def decode_market_datum(data: Any) -> MarketDatum:
    if not isinstance(data, dict):
        raise ValueError(f"Expected market datum object, got: {type(data).__name__}")
    return MarketDatum(
        asset=_variant(data.get("asset", "")),
        price=_number(data, "price"),
        change_24h=_number(data, "change24h"),
        volume=_number(data, "volume"),
        market_cap=_number(data, "marketCap"),
    )


def decode_market_data(data: Any) -> tuple[MarketDatum, ...]:
    if not isinstance(data, list):
        raise ValueError(f"Expected market data list, got: {type(data).__name__}")
    return tuple(decode_market_datum(d) for d in data)


def decode_trade(data: Any) -> TradeRecord:
    if not isinstance(data, dict):
        raise ValueError(f"Expected trade object, got: {type(data).__name__}")
    try:
        timestamp = int(data["timestamp"])
    except KeyError:
        raise ValueError("Missing field: timestamp") from None
    except (TypeError, ValueError):
        raise ValueError(f"Field timestamp is not an integer: {data['timestamp']!r}") from None

    return TradeRecord(
        timestamp=timestamp,
        direction=Direction.parse(_variant(data.get("direction"))),
        asset=_variant(data.get("asset", "")),
        amount=_number(data, "amount"),
        price=_number(data, "price"),
        reason=str(data.get("reason", "")),
    )


def decode_trade_history(data: Any) -> tuple[TradeRecord, ...]:
    if not isinstance(data, list):
        raise ValueError(f"Expected trade list, got: {type(data).__name__}")
    return tuple(decode_trade(t) for t in data)


def decode_text(data: Any) -> str:
    if not isinstance(data, str):
        raise ValueError(f"Expected text reply, got: {type(data).__name__}")
    return data
