"""
Session configuration.

Centralizes the backend location, polling cadence and the conversation
greeting so a session can be built from code or from the environment.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

WELCOME_MESSAGE = (
    "I'm Quantumic, an AI-powered trading bot on ICP. I can analyze markets, "
    "execute trades, and answer questions.\n\n"
    "Here's what I can help with:\n"
    "- Portfolio analysis\n"
    "- Market trends\n"
    "- Trade execution\n"
    "- Risk assessment\n\n"
    "Try asking:\n"
    "1. What's my portfolio performance?\n"
    "2. Show me market trends for BTC\n"
    "3. Execute a trade for 0.5 ETH"
)


@dataclass
class SessionConfig:
    """Configuration for one dashboard session."""

    # =========================================================
    # Backend
    # =========================================================

    # Base URL of the agent/ledger service; methods are POSTed to {base_url}/{method}
    base_url: str = "http://localhost:4943/api"

    # Per-request timeout in seconds. None = wait as long as the transport does
    request_timeout_seconds: float | None = None

    # =========================================================
    # Polling
    # =========================================================

    # Seconds between background refreshes of portfolio, market data and history
    poll_interval_seconds: float = 30.0

    # =========================================================
    # Conversation / Trading
    # =========================================================

    # First transcript entry; never sent back to the agent
    welcome_message: str = WELCOME_MESSAGE

    # Asset preselected in the manual trade form
    default_trade_asset: str = "ICP"

    @classmethod
    def from_env(cls, env_path: str | None = None) -> "SessionConfig":
        """
        Create a config from environment variables.

        Looks for:
        - QUANTUMIC_BACKEND_URL (optional)
        - QUANTUMIC_POLL_INTERVAL (optional, seconds)
        - QUANTUMIC_REQUEST_TIMEOUT (optional, seconds; empty = no timeout)
        """
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        config = cls()

        base_url = os.getenv("QUANTUMIC_BACKEND_URL")
        if base_url:
            config.base_url = base_url.rstrip("/")

        interval = os.getenv("QUANTUMIC_POLL_INTERVAL")
        if interval:
            config.poll_interval_seconds = _positive_float("QUANTUMIC_POLL_INTERVAL", interval)

        timeout = os.getenv("QUANTUMIC_REQUEST_TIMEOUT")
        if timeout:
            config.request_timeout_seconds = _positive_float("QUANTUMIC_REQUEST_TIMEOUT", timeout)

        return config


def _positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got: {raw}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got: {raw}")
    return value


# Default configuration instance
DEFAULT_CONFIG = SessionConfig()
