"""
Input line commands for the dashboard.

Plain text is a chat message. Slash commands trade:
    /buy ETH 0.5
    /sell BTC 0.01
    /auto
"""

from dataclasses import dataclass
from enum import Enum

from quantumic.core.errors import ValidationError
from quantumic.core.models import AssetTag, Direction


class CommandKind(Enum):
    CHAT = "chat"
    TRADE = "trade"
    AUTO_TRADE = "auto_trade"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    text: str = ""
    asset: AssetTag | None = None
    direction: Direction | None = None
    amount: str = ""  # validated by the coordinator


def parse_command(line: str, default_asset: str = "ICP") -> Command:
    """
    Parse one input line.

    Raises:
        ValidationError: malformed slash command or unknown asset
    """
    stripped = line.strip()
    if not stripped.startswith("/"):
        return Command(CommandKind.CHAT, text=line)

    parts = stripped[1:].split()
    if not parts:
        raise ValidationError("Empty command")
    name, args = parts[0].lower(), parts[1:]

    if name == "auto":
        return Command(CommandKind.AUTO_TRADE)

    if name in ("buy", "sell"):
        if len(args) == 1:
            asset, amount = default_asset, args[0]
        elif len(args) == 2:
            asset, amount = args
        else:
            raise ValidationError(f"Usage: /{name} [ASSET] AMOUNT")
        try:
            tag = AssetTag.parse(asset)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        return Command(
            CommandKind.TRADE,
            asset=tag,
            direction=Direction.parse(name),
            amount=amount,
        )

    raise ValidationError(f"Unknown command: /{name}")
