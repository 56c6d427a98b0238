"""
Operation coordinator.

Owns the busy state of user-initiated operations and runs them:
- Chat turns: one at a time; the placeholder is always resolved
- Trades (manual and auto): one at a time; success refreshes the
  portfolio and trade history and posts a confirmation notice

Chat and trades are gated independently, so a trade may run while a
chat reply is outstanding and vice versa. Remote failures become
transcript text; the busy flag is released on every exit path. Once
closed, nothing more is written to the transcript or the cache: replies
that land after close() are dropped.
"""

import logging
import math
from contextlib import contextmanager

from quantumic.core.currency import format_currency
from quantumic.core.errors import (
    OperationBusy,
    SessionClosed,
    ValidationError,
    extract_reason,
)
from quantumic.core.models import (
    AssetTag,
    Direction,
    OperationKind,
    OperationState,
    TradeRecord,
)
from quantumic.gateway.client import Gateway
from quantumic.session.cache import Slot, SyncedStateCache
from quantumic.session.conversation import ConversationStore

logger = logging.getLogger(__name__)

CHAT_ERROR_FALLBACK = "An error occurred. Please try again."
TRADE_ERROR_FALLBACK = "Unknown error"

# Slots refreshed after a trade lands
TRADE_REFRESH_SLOTS = (Slot.PORTFOLIO, Slot.TRADE_HISTORY)


def parse_amount(amount: float | int | str) -> float:
    """
    Validate a manual trade amount.

    Accepts numbers or numeric strings; the result must be finite and
    positive.

    Raises:
        ValidationError: amount is missing, non-numeric, non-finite or <= 0
    """
    if isinstance(amount, bool):
        raise ValidationError(f"Invalid trade amount: {amount!r}")
    if isinstance(amount, str):
        if not amount.strip():
            raise ValidationError("Trade amount is required")
        try:
            amount = float(amount)
        except ValueError:
            raise ValidationError(f"Trade amount is not a number: {amount!r}") from None
    if not isinstance(amount, (int, float)):
        raise ValidationError(f"Invalid trade amount: {amount!r}")

    value = float(amount)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"Trade amount must be a positive number, got: {amount}")
    return value


def trade_summary(trade: TradeRecord, auto: bool = False) -> str:
    """Confirmation notice for an executed trade."""
    label = "Executed auto trade" if auto else "Executed trade"
    return (
        f"{label}: {trade.direction.value} {trade.amount:g} {trade.asset} "
        f"at {format_currency(trade.price)}. Reason: {trade.reason}"
    )


class OperationCoordinator:
    """Runs chat turns and trades against one session's store and cache."""

    def __init__(
        self,
        gateway: Gateway,
        conversation: ConversationStore,
        cache: SyncedStateCache,
    ):
        self.gateway = gateway
        self.conversation = conversation
        self.cache = cache
        self._states: dict[OperationKind, OperationState] = {
            kind: OperationState.IDLE for kind in OperationKind
        }
        self._closed = False

    # ── busy state ─────────────────────────────────────────────────────────────

    def state(self, kind: OperationKind) -> OperationState:
        return self._states[kind]

    def is_busy(self, kind: OperationKind) -> bool:
        return self._states[kind] is OperationState.BUSY

    @property
    def is_any_busy(self) -> bool:
        return any(s is OperationState.BUSY for s in self._states.values())

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Refuse new operations and drop the results of outstanding ones."""
        self._closed = True

    @contextmanager
    def _busy(self, kind: OperationKind):
        """Mark `kind` busy for the duration of the block."""
        self._states[kind] = OperationState.BUSY
        try:
            yield
        finally:
            self._states[kind] = OperationState.IDLE

    # ── chat ───────────────────────────────────────────────────────────────────

    async def submit_chat_turn(self, text: str) -> bool:
        """
        Send a user message to the agent and record the reply.

        Returns False (and changes nothing) for blank text, after close(),
        or while a previous turn is still outstanding. Remote failures are
        written into the placeholder instead of being raised.
        """
        if self._closed or not text or not text.strip() or self.is_busy(OperationKind.CHAT_TURN):
            return False

        self.conversation.append_user_turn(text)
        with self._busy(OperationKind.CHAT_TURN):
            history = self.conversation.send_history()
            try:
                reply = await self.gateway.chat(history)
            except Exception as e:
                logger.error(f"Chat turn failed: {e}")
                reason = extract_reason(e)
                self._resolve_turn(f"Error: {reason}" if reason else CHAT_ERROR_FALLBACK)
            else:
                self._resolve_turn(reply)
            finally:
                # Cancellation must not leave "Thinking ..." behind
                if self.conversation.has_pending_turn:
                    self._resolve_turn(CHAT_ERROR_FALLBACK)
        return True

    def _resolve_turn(self, content: str) -> None:
        if self._closed:
            logger.debug("Dropping chat reply: session closed")
            return
        self.conversation.resolve_pending_turn(content)

    # ── trades ─────────────────────────────────────────────────────────────────

    async def submit_trade(
        self,
        asset: AssetTag | str,
        direction: Direction | str,
        amount: float | int | str,
    ) -> TradeRecord:
        """
        Execute a manual trade.

        Raises:
            ValidationError: amount, direction or asset is invalid (nothing dispatched)
            OperationBusy: another trade is outstanding
            SessionClosed: the coordinator was closed
            RemoteError: the ledger call failed; a notice was already posted
        """
        value = parse_amount(amount)
        try:
            side = Direction.parse(direction)
            tag = AssetTag.parse(asset)
        except ValueError as e:
            raise ValidationError(str(e)) from None
        self._ensure_can_trade()

        with self._busy(OperationKind.TRADE_EXECUTION):
            try:
                trade = await self.gateway.execute_trade(tag, side, value)
            except Exception as e:
                logger.error(f"Trade failed: {side.value} {value:g} {tag.value}: {e}")
                reason = extract_reason(e)
                self._post_notice(f"Trade failed: {reason or TRADE_ERROR_FALLBACK}")
                raise

            await self._after_trade(trade, auto=False)
            return trade

    async def submit_auto_trade(self) -> TradeRecord | None:
        """
        Let the agent pick and execute a trade.

        Returns the trade, or None if the ledger call failed (the failure
        is posted to the transcript).

        Raises:
            OperationBusy: another trade is outstanding
            SessionClosed: the coordinator was closed
        """
        self._ensure_can_trade()

        with self._busy(OperationKind.TRADE_EXECUTION):
            try:
                trade = await self.gateway.auto_trade()
            except Exception as e:
                logger.error(f"Auto trade failed: {e}")
                reason = extract_reason(e)
                self._post_notice(
                    f"Auto trade failed: {reason}" if reason else "Auto trade failed. Please try again."
                )
                return None

            await self._after_trade(trade, auto=True)
            return trade

    def _ensure_can_trade(self) -> None:
        if self._closed:
            raise SessionClosed("Session has been stopped")
        if self.is_busy(OperationKind.TRADE_EXECUTION):
            raise OperationBusy("A trade is already being executed")

    def _post_notice(self, content: str) -> None:
        if self._closed:
            logger.debug(f"Dropping notice, session closed: {content}")
            return
        self.conversation.append_system_notice(content)

    async def _after_trade(self, trade: TradeRecord, auto: bool) -> None:
        summary = trade_summary(trade, auto=auto)
        logger.info(summary)
        if self._closed:
            return
        await self.cache.refresh_many(TRADE_REFRESH_SLOTS)
        self._post_notice(summary)
