"""
Command-line interface for the Quantumic dashboard.

Handles argument parsing and launching the dashboard application.
"""

import argparse

from quantumic.core.config import SessionConfig
from quantumic.core.models import AssetTag


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(description="Quantumic AI Trading Dashboard")
    parser.add_argument(
        "--url", "-u", type=str, default=None, help="Backend base URL (default: from env or config)"
    )
    parser.add_argument(
        "--interval",
        "-i",
        type=float,
        default=None,
        help="Seconds between background refreshes (default: 30)",
    )
    parser.add_argument(
        "--timeout",
        "-t",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: none)",
    )
    parser.add_argument(
        "--asset",
        "-a",
        type=str.upper,
        choices=[asset.value for asset in AssetTag],
        default=None,
        help="Default asset for /buy and /sell without an asset (default: ICP)",
    )
    parser.add_argument(
        "--env-file", type=str, default=None, help="Path to a .env file to load"
    )
    return parser


def build_config(args: argparse.Namespace) -> SessionConfig:
    """Environment first, then command-line overrides."""
    config = SessionConfig.from_env(args.env_file)
    if args.url:
        config.base_url = args.url.rstrip("/")
    if args.interval is not None:
        if args.interval <= 0:
            raise SystemExit("--interval must be positive")
        config.poll_interval_seconds = args.interval
    if args.timeout is not None:
        if args.timeout <= 0:
            raise SystemExit("--timeout must be positive")
        config.request_timeout_seconds = args.timeout
    if args.asset:
        config.default_trade_asset = args.asset
    return config


def run_cli() -> None:
    """Parse arguments and launch the dashboard."""
    from quantumic.ui.dashboard import run_dashboard

    parser = create_parser()
    args = parser.parse_args()

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"\n❌ {e}")
        return

    print(f"\n🔌 Backend: {config.base_url}")
    print(f"   Polling every {config.poll_interval_seconds:g}s")
    print()

    run_dashboard(config)


if __name__ == "__main__":
    run_cli()
