"""
Pure presentation helpers.

Turn session view models into display values: percent strings,
portfolio allocation rows, and message segmentation (code fences,
bullet and numbered lines) for chat rendering.
"""

import re
from dataclasses import dataclass
from enum import Enum

from quantumic.core.models import MarketDatum, PortfolioSnapshot, Sender

ASSISTANT_NAME = "Quantumic"
USER_NAME = "You"

_CODE_FENCE = "```"
_BULLET_PREFIXES = ("- ", "* ", "• ")
_NUMBERED_PATTERN = re.compile(r"^(\d+)\. ")


class SegmentKind(Enum):
    PARAGRAPH = "paragraph"
    CODE_BLOCK = "code_block"
    BULLET_LINE = "bullet_line"
    NUMBERED_LINE = "numbered_line"


@dataclass(frozen=True)
class Segment:
    """One renderable piece of a chat message."""

    kind: SegmentKind
    text: str
    number: int | None = None  # only for NUMBERED_LINE


def segment_message(content: str) -> tuple[Segment, ...]:
    """
    Split message text into segments.

    Text between triple-backtick fences becomes a CODE_BLOCK (an
    unterminated fence runs to the end). Outside fences every line is a
    BULLET_LINE ("- ", "* ", "• "), a NUMBERED_LINE ("1. ") or a
    PARAGRAPH; the marker is stripped from the segment text.
    """
    segments: list[Segment] = []
    for i, part in enumerate(content.split(_CODE_FENCE)):
        if i % 2 == 1:
            segments.append(Segment(SegmentKind.CODE_BLOCK, part))
            continue
        if not part:
            continue
        for line in part.split("\n"):
            segments.append(_segment_line(line))
    return tuple(segments)


def _segment_line(line: str) -> Segment:
    if line.startswith(_BULLET_PREFIXES):
        return Segment(SegmentKind.BULLET_LINE, line[2:])

    match = _NUMBERED_PATTERN.match(line)
    if match:
        return Segment(
            SegmentKind.NUMBERED_LINE,
            line[match.end():],
            number=int(match.group(1)),
        )

    return Segment(SegmentKind.PARAGRAPH, line)


def sender_label(role: Sender) -> str:
    return USER_NAME if role is Sender.USER else ASSISTANT_NAME


def format_change(pct: float | None) -> str:
    """Signed percent: 1.234 -> "+1.23%"."""
    pct = pct or 0.0
    return f"{'+' if pct >= 0 else ''}{pct:.2f}%"


@dataclass(frozen=True)
class AllocationRow:
    asset: str
    amount: float
    price: float
    value: float
    change_24h: float


def allocation(
    portfolio: PortfolioSnapshot | None,
    market_data: tuple[MarketDatum, ...] | None,
) -> list[AllocationRow]:
    """
    Value each portfolio balance at its market price.

    Assets without market data are valued at 0.
    """
    if portfolio is None:
        return []

    by_asset = {d.asset: d for d in market_data or ()}
    rows = []
    for asset, amount in portfolio.balances:
        datum = by_asset.get(asset)
        price = datum.price if datum else 0.0
        rows.append(
            AllocationRow(
                asset=asset,
                amount=amount,
                price=price,
                value=amount * price,
                change_24h=datum.change_24h if datum else 0.0,
            )
        )
    return rows
