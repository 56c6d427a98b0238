#!/usr/bin/env python3
"""
Unit tests for the operation coordinator.

Run with:
    python -m pytest tests/test_coordinator.py -v
"""

import asyncio
import math
import sys
from pathlib import Path

# Add project root to path for standalone execution
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fake_gateway import HISTORY, PORTFOLIO, TRADE, Deferred, FakeGateway

from quantumic.core.errors import (
    OperationBusy,
    RemoteRejected,
    RemoteTransient,
    SessionClosed,
    ValidationError,
)
from quantumic.core.models import (
    AssetTag,
    Direction,
    Message,
    OperationKind,
    OperationState,
    Sender,
)
from quantumic.session.cache import SyncedStateCache
from quantumic.session.conversation import ConversationStore
from quantumic.session.coordinator import (
    CHAT_ERROR_FALLBACK,
    OperationCoordinator,
    parse_amount,
    trade_summary,
)

CHAT = OperationKind.CHAT_TURN
TRADE_KIND = OperationKind.TRADE_EXECUTION


def make_coordinator() -> tuple[FakeGateway, ConversationStore, SyncedStateCache, OperationCoordinator]:
    gateway = FakeGateway()
    store = ConversationStore("Welcome")
    cache = SyncedStateCache(gateway)
    return gateway, store, cache, OperationCoordinator(gateway, store, cache)


class TestChatTurn:
    """Tests for submit_chat_turn."""

    def test_empty_submission_is_noop(self):
        """Blank prompt: transcript unchanged, chat stays idle, nothing sent."""
        gateway, store, _, coordinator = make_coordinator()

        assert asyncio.run(coordinator.submit_chat_turn("")) is False
        assert asyncio.run(coordinator.submit_chat_turn("   ")) is False

        assert len(store) == 1
        assert coordinator.state(CHAT) is OperationState.IDLE
        assert gateway.count("chat") == 0

    def test_successful_turn(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue("chat", "BTC is up 3%")

        assert asyncio.run(coordinator.submit_chat_turn("Show BTC trend")) is True

        transcript = store.snapshot()
        assert transcript[1:] == (
            Message.user("Show BTC trend"),
            Message.assistant("BTC is up 3%"),
        )
        assert coordinator.state(CHAT) is OperationState.IDLE

    def test_history_excludes_welcome_and_placeholder(self):
        gateway, _, _, coordinator = make_coordinator()

        async def scenario():
            await coordinator.submit_chat_turn("first")
            await coordinator.submit_chat_turn("second")

        asyncio.run(scenario())
        _, (history,) = gateway.calls[-1]
        assert history == [
            Message.user("first"),
            Message.assistant("OK"),
            Message.user("second"),
        ]

    def test_busy_during_call_and_rejects_overlapping_submissions(self):
        gateway, store, _, coordinator = make_coordinator()
        reply = Deferred()
        gateway.queue("chat", reply)

        async def scenario():
            task = asyncio.create_task(coordinator.submit_chat_turn("first"))
            await reply.started.wait()
            busy = coordinator.state(CHAT)
            length = len(store)
            rejected = [await coordinator.submit_chat_turn(f"extra {i}") for i in range(3)]
            length_after = len(store)
            reply.resolve("done")
            accepted = await task
            return busy, length, length_after, rejected, accepted

        busy, length, length_after, rejected, accepted = asyncio.run(scenario())
        assert busy is OperationState.BUSY
        assert rejected == [False, False, False]
        assert length == length_after == 3
        assert accepted is True
        assert gateway.count("chat") == 1
        assert coordinator.state(CHAT) is OperationState.IDLE

    def test_failure_with_reason_resolves_placeholder(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue("chat", RemoteRejected("rejected", reason="Rate limited"))

        asyncio.run(coordinator.submit_chat_turn("hi"))

        last = store.snapshot()[-1]
        assert last == Message.assistant("Error: Rate limited")
        assert not store.has_pending_turn
        assert coordinator.state(CHAT) is OperationState.IDLE

    def test_failure_without_reason_uses_fallback(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue("chat", RuntimeError("socket closed"))

        asyncio.run(coordinator.submit_chat_turn("hi"))

        assert store.snapshot()[-1].content == CHAT_ERROR_FALLBACK
        assert coordinator.state(CHAT) is OperationState.IDLE

    def test_failure_text_from_backend_reject_shape(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue(
            "chat",
            RuntimeError('Call failed: Reject code: CanisterReject, \\"Out of cycles\\"'),
        )

        asyncio.run(coordinator.submit_chat_turn("hi"))

        assert store.snapshot()[-1].content == "Error: Out of cycles"

    def test_session_usable_after_failure(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue("chat", RemoteTransient("down"), "back")

        async def scenario():
            await coordinator.submit_chat_turn("one")
            return await coordinator.submit_chat_turn("two")

        assert asyncio.run(scenario()) is True
        assert store.snapshot()[-1] == Message.assistant("back")

    def test_cancelled_turn_clears_busy_and_placeholder(self):
        gateway, store, _, coordinator = make_coordinator()
        reply = Deferred()
        gateway.queue("chat", reply)

        async def scenario():
            task = asyncio.create_task(coordinator.submit_chat_turn("hi"))
            await reply.started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
        assert coordinator.state(CHAT) is OperationState.IDLE
        assert not store.has_pending_turn
        assert store.snapshot()[-1].content == CHAT_ERROR_FALLBACK


class TestManualTrade:
    """Tests for submit_trade."""

    def test_success_refreshes_and_posts_one_notice(self):
        gateway, store, cache, coordinator = make_coordinator()

        trade = asyncio.run(coordinator.submit_trade("ETH", "BUY", "0.5"))

        assert trade is TRADE
        assert gateway.calls[0] == ("execute_trade", (AssetTag.ETH, Direction.BUY, 0.5))
        assert gateway.count("get_portfolio") == 1
        assert gateway.count("get_trade_history") == 1
        assert gateway.count("get_market_data") == 0
        assert cache.portfolio is PORTFOLIO
        assert cache.trade_history is HISTORY

        notices = [m for m in store.snapshot()[1:] if m.role is Sender.SYSTEM]
        assert len(notices) == 1
        assert notices[0].content == (
            "Executed trade: BUY 0.5 ETH at $3,200.00. Reason: Momentum breakout"
        )
        assert coordinator.state(TRADE_KIND) is OperationState.IDLE

    def test_notice_follows_refresh(self):
        """The notice is appended after both refreshes complete."""
        gateway, store, _, coordinator = make_coordinator()
        slow = Deferred()
        gateway.queue("get_trade_history", slow)

        async def scenario():
            task = asyncio.create_task(coordinator.submit_trade(AssetTag.BTC, Direction.SELL, 1))
            await slow.started.wait()
            length_during = len(store)
            slow.resolve(HISTORY)
            await task
            return length_during

        assert asyncio.run(scenario()) == 1
        assert len(store) == 2

    def test_failure_posts_reason_and_reraises(self):
        gateway, store, cache, coordinator = make_coordinator()
        error = RemoteRejected("rejected", reason="Insufficient balance")
        gateway.queue("execute_trade", error)

        with pytest.raises(RemoteRejected):
            asyncio.run(coordinator.submit_trade("BTC", "SELL", 10))

        assert store.snapshot()[-1] == Message.system("Trade failed: Insufficient balance")
        assert gateway.count("get_portfolio") == 0
        assert cache.portfolio is None
        assert coordinator.state(TRADE_KIND) is OperationState.IDLE

    def test_failure_without_reason_uses_generic_notice(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue("execute_trade", RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            asyncio.run(coordinator.submit_trade("BTC", "BUY", 1))

        assert store.snapshot()[-1].content == "Trade failed: Unknown error"

    @pytest.mark.parametrize("amount", ["", "abc", 0, -1, "-0.5", math.nan, math.inf, None])
    def test_invalid_amount_is_rejected_before_dispatch(self, amount):
        gateway, store, _, coordinator = make_coordinator()

        with pytest.raises(ValidationError):
            asyncio.run(coordinator.submit_trade("ETH", "BUY", amount))

        assert gateway.calls == []
        assert len(store) == 1
        assert coordinator.state(TRADE_KIND) is OperationState.IDLE

    def test_invalid_direction_is_rejected(self):
        gateway, _, _, coordinator = make_coordinator()
        with pytest.raises(ValidationError):
            asyncio.run(coordinator.submit_trade("ETH", "HOLD", 1))
        assert gateway.calls == []

    @pytest.mark.parametrize("asset", ["XRP", "BTCC", ""])
    def test_unknown_asset_is_rejected_before_dispatch(self, asset):
        gateway, store, _, coordinator = make_coordinator()
        with pytest.raises(ValidationError):
            asyncio.run(coordinator.submit_trade(asset, "BUY", 1))
        assert gateway.calls == []
        assert len(store) == 1

    def test_asset_symbol_is_normalized(self):
        gateway, _, _, coordinator = make_coordinator()
        asyncio.run(coordinator.submit_trade("#sol", "BUY", 1))
        assert gateway.calls[0][1][0] is AssetTag.SOL

    def test_second_trade_while_busy_is_refused(self):
        gateway, _, _, coordinator = make_coordinator()
        pending = Deferred()
        gateway.queue("execute_trade", pending)

        async def scenario():
            task = asyncio.create_task(coordinator.submit_trade("ETH", "BUY", 1))
            await pending.started.wait()
            with pytest.raises(OperationBusy):
                await coordinator.submit_trade("ETH", "BUY", 1)
            with pytest.raises(OperationBusy):
                await coordinator.submit_auto_trade()
            pending.resolve(TRADE)
            await task

        asyncio.run(scenario())
        assert gateway.count("execute_trade") == 1
        assert gateway.count("auto_trade") == 0


class TestAutoTrade:
    """Tests for submit_auto_trade."""

    def test_success(self):
        gateway, store, _, coordinator = make_coordinator()

        assert asyncio.run(coordinator.submit_auto_trade()) is TRADE
        assert gateway.count("get_portfolio") == 1
        assert gateway.count("get_trade_history") == 1
        assert store.snapshot()[-1].content.startswith("Executed auto trade: BUY 0.5 ETH")

    def test_rejected_auto_trade_leaves_views_unchanged(self):
        gateway, store, cache, coordinator = make_coordinator()

        async def scenario():
            await cache.refresh_all()
            before = (cache.portfolio, cache.trade_history)
            gateway.queue("auto_trade", RemoteRejected("rejected", reason="Trading halted"))
            result = await coordinator.submit_auto_trade()
            return before, result

        before, result = asyncio.run(scenario())
        assert result is None
        assert (cache.portfolio, cache.trade_history) == before
        assert gateway.count("get_portfolio") == 1
        assert "Trading halted" in store.snapshot()[-1].content
        assert store.snapshot()[-1].role is Sender.SYSTEM
        assert coordinator.state(TRADE_KIND) is OperationState.IDLE

    def test_failure_without_reason(self):
        gateway, store, _, coordinator = make_coordinator()
        gateway.queue("auto_trade", RuntimeError("boom"))

        assert asyncio.run(coordinator.submit_auto_trade()) is None
        assert store.snapshot()[-1].content == "Auto trade failed. Please try again."


class TestIndependentKinds:
    """Chat and trades do not gate each other."""

    def test_trade_runs_while_chat_outstanding(self):
        gateway, store, _, coordinator = make_coordinator()
        reply = Deferred()
        gateway.queue("chat", reply)

        async def scenario():
            chat_task = asyncio.create_task(coordinator.submit_chat_turn("thinking?"))
            await reply.started.wait()
            trade = await coordinator.submit_auto_trade()
            chat_busy = coordinator.is_busy(CHAT)
            trade_busy = coordinator.is_busy(TRADE_KIND)
            reply.resolve("yes")
            await chat_task
            return trade, chat_busy, trade_busy

        trade, chat_busy, trade_busy = asyncio.run(scenario())
        assert trade is TRADE
        assert chat_busy is True
        assert trade_busy is False
        assert not coordinator.is_any_busy

        contents = [m.content for m in store.snapshot()[1:]]
        assert contents[0] == "thinking?"
        assert contents[1] == "yes"
        assert contents[2].startswith("Executed auto trade")


class TestClose:
    """A closed coordinator neither accepts work nor writes results."""

    def test_chat_refused_after_close(self):
        gateway, store, _, coordinator = make_coordinator()
        coordinator.close()

        assert asyncio.run(coordinator.submit_chat_turn("hello")) is False
        assert gateway.calls == []
        assert len(store) == 1

    def test_trades_refused_after_close(self):
        gateway, _, _, coordinator = make_coordinator()
        coordinator.close()

        with pytest.raises(SessionClosed):
            asyncio.run(coordinator.submit_trade("ETH", "BUY", 1))
        with pytest.raises(SessionClosed):
            asyncio.run(coordinator.submit_auto_trade())
        assert gateway.calls == []

    def test_chat_failure_after_close_keeps_placeholder(self):
        gateway, store, _, coordinator = make_coordinator()
        reply = Deferred()
        gateway.queue("chat", reply)

        async def scenario():
            task = asyncio.create_task(coordinator.submit_chat_turn("hi"))
            await reply.started.wait()
            coordinator.close()
            reply.reject(RemoteTransient("down", reason="Canister is stopping"))
            await task

        asyncio.run(scenario())
        last = store.snapshot()[-1]
        assert last.pending
        assert coordinator.state(CHAT) is OperationState.IDLE

    def test_auto_trade_failure_after_close_posts_nothing(self):
        gateway, store, _, coordinator = make_coordinator()
        pending = Deferred()
        gateway.queue("auto_trade", pending)

        async def scenario():
            task = asyncio.create_task(coordinator.submit_auto_trade())
            await pending.started.wait()
            coordinator.close()
            pending.reject(RemoteRejected("x", reason="Insufficient balance"))
            return await task

        assert asyncio.run(scenario()) is None
        assert len(store) == 1
        assert coordinator.state(TRADE_KIND) is OperationState.IDLE


class TestHelpers:
    """Tests for amount parsing and trade summaries."""

    def test_parse_amount_accepts_numbers_and_strings(self):
        assert parse_amount(1) == 1.0
        assert parse_amount(0.25) == 0.25
        assert parse_amount(" 2.5 ") == 2.5

    def test_parse_amount_rejects_bool(self):
        with pytest.raises(ValidationError):
            parse_amount(True)

    def test_trade_summary(self):
        assert trade_summary(TRADE) == (
            "Executed trade: BUY 0.5 ETH at $3,200.00. Reason: Momentum breakout"
        )
        assert trade_summary(TRADE, auto=True).startswith("Executed auto trade:")
