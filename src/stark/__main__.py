"""Entry point: python -m stark [serve]

- No args / "chat": Interactive CLI REPL (development/testing)
- "serve":          Daemon mode (production, Telegram polling)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from stark.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every Telegram long-poll request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _run_cli() -> None:
    """Interactive CLI REPL mode."""
    config = load_config()
    _setup_logging(config.log_level)

    from stark.connectors.cli import CLIConnector
    from stark.daemon import StarkDaemon

    # Build Stark with engine
    daemon = StarkDaemon(config)
    stark = daemon._build_stark()

    # Add CLI connector
    stark.add_connector(CLIConnector())

    try:
        asyncio.run(stark.start())
    except KeyboardInterrupt:
        pass


def _run_serve() -> None:
    """Daemon mode — Telegram connector."""
    config = load_config()
    _setup_logging(config.log_level)

    from stark.daemon import StarkDaemon

    daemon = StarkDaemon(config)
    asyncio.run(daemon.run())


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "chat"

    if cmd in ("chat", "repl"):
        _run_cli()
    elif cmd == "serve":
        _run_serve()
    else:
        print("Usage: python -m stark [chat|serve]")
        print("  chat   — Interactive CLI REPL (default)")
        print("  serve  — Daemon mode with the Telegram connector")
        sys.exit(1)


if __name__ == "__main__":
    main()
