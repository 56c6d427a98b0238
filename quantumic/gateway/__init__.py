"""
Remote agent/ledger integration.

- RemoteGateway: HTTP client for the six backend calls
- Gateway: protocol the session depends on (any object with the six coroutines)
- codec: tagged-variant wire encoding
"""

from quantumic.gateway.client import Gateway, GatewayMetrics, RemoteGateway

__all__ = [
    "Gateway",
    "GatewayMetrics",
    "RemoteGateway",
]
