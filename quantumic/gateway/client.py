"""HTTP client for the remote trading agent and ledger."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

import httpx

from quantumic.core.errors import RemoteRejected, RemoteTransient
from quantumic.core.models import (
    AssetTag,
    Direction,
    MarketDatum,
    Message,
    PortfolioSnapshot,
    TradeRecord,
)
from quantumic.gateway import codec

logger = logging.getLogger(__name__)


class Gateway(Protocol):
    """The six remote calls a session depends on."""

    async def chat(self, history: list[Message]) -> str: ...

    async def get_portfolio(self) -> PortfolioSnapshot: ...

    async def get_market_data(self) -> tuple[MarketDatum, ...]: ...

    async def get_trade_history(self) -> tuple[TradeRecord, ...]: ...

    async def execute_trade(
        self, asset: AssetTag, direction: Direction, amount: float
    ) -> TradeRecord: ...

    async def auto_trade(self) -> TradeRecord: ...


@dataclass
class MethodStats:
    calls: int = 0
    failures: int = 0
    total_response_time_ms: float = 0


@dataclass
class GatewayMetrics:
    """Tracks remote call counts and latency for the session."""

    methods: dict[str, MethodStats] = field(default_factory=dict)

    @property
    def total_calls(self) -> int:
        return sum(s.calls for s in self.methods.values())

    @property
    def total_failures(self) -> int:
        return sum(s.failures for s in self.methods.values())

    def avg_response_time_ms(self, method: str) -> float:
        stats = self.methods.get(method)
        if not stats or stats.calls == 0:
            return 0
        return stats.total_response_time_ms / stats.calls

    def record_call(self, method: str, response_time_ms: float, failed: bool = False) -> None:
        stats = self.methods.setdefault(method, MethodStats())
        stats.calls += 1
        stats.total_response_time_ms += response_time_ms
        if failed:
            stats.failures += 1


class RemoteGateway:
    """
    Client for the Quantumic backend.

    Each call is one POST to {base_url}/{method} with a JSON body. The
    reply is either {"ok": value} or {"reject": {"code", "message"}}.
    No call is retried; execute_trade and auto_trade mutate the ledger.

    Usage:
        gateway = RemoteGateway("http://localhost:4943/api")
        reply = await gateway.chat([Message.user("Show BTC trend")])
    """

    def __init__(
        self,
        base_url: str = "http://localhost:4943/api",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: Service root; method names are appended to it
            timeout: Request timeout in seconds, None for no client-side limit
            transport: Optional httpx transport (used to stub the backend)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.metrics = GatewayMetrics()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._closed = False

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client. Refuses once close() was called."""
        if self._closed:
            raise RemoteTransient("Gateway is closed", reason="Gateway is closed")
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client. Later calls fail with RemoteTransient."""
        self._closed = True
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _call(self, method: str, payload: dict, decode: Callable[[Any], Any]) -> Any:
        """POST one request and decode its `ok` value."""
        start_time = time.time()
        failed = True
        try:
            client = await self._get_client()
            try:
                response = await client.post(f"{self.base_url}/{method}", json=payload)
            except httpx.TransportError as e:
                raise RemoteTransient(
                    f"{method}: transport error: {e}", reason=str(e) or type(e).__name__, method=method
                ) from e

            body = _json_body(response)
            if isinstance(body, dict) and "reject" in body:
                reject = body["reject"] or {}
                message = str(reject.get("message") or reject.get("code") or "rejected")
                raise RemoteRejected(f"{method}: rejected: {message}", reason=message, method=method)

            if response.status_code >= 500:
                raise RemoteTransient(
                    f"{method}: HTTP {response.status_code}",
                    reason=response.text or response.reason_phrase,
                    method=method,
                )
            if response.status_code >= 400:
                raise RemoteRejected(
                    f"{method}: HTTP {response.status_code}",
                    reason=response.text or response.reason_phrase,
                    method=method,
                )

            if not isinstance(body, dict) or "ok" not in body:
                raise RemoteRejected(f"{method}: malformed reply", reason="Malformed reply", method=method)
            try:
                result = decode(body["ok"])
            except ValueError as e:
                raise RemoteRejected(f"{method}: {e}", reason=str(e), method=method) from e

            failed = False
            return result

        finally:
            response_time_ms = (time.time() - start_time) * 1000
            self.metrics.record_call(method, response_time_ms, failed=failed)
            logger.debug(f"{method} {'failed' if failed else 'ok'} in {response_time_ms:.0f}ms")

    async def chat(self, history: list[Message]) -> str:
        """Send the conversation so far and return the agent's reply."""
        return await self._call(
            "chat", {"messages": codec.encode_history(history)}, codec.decode_text
        )

    async def get_portfolio(self) -> PortfolioSnapshot:
        return await self._call("getPortfolio", {}, codec.decode_portfolio)

    async def get_market_data(self) -> tuple[MarketDatum, ...]:
        return await self._call("getMarketData", {}, codec.decode_market_data)

    async def get_trade_history(self) -> tuple[TradeRecord, ...]:
        return await self._call("getTradeHistory", {}, codec.decode_trade_history)

    async def execute_trade(
        self, asset: AssetTag, direction: Direction, amount: float
    ) -> TradeRecord:
        """
        Place a trade on the ledger.

        Not idempotent: a failure here may still have moved funds, so
        callers must not resend blindly.
        """
        payload = {"asset": asset.tag, "direction": direction.tag, "amount": amount}
        return await self._call("executeTrade", payload, codec.decode_trade)

    async def auto_trade(self) -> TradeRecord:
        """Let the agent pick and place a trade."""
        return await self._call("autoTrade", {}, codec.decode_trade)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
