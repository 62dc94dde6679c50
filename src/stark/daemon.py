"""Daemon process — always-on mode for production.

Usage: python -m stark serve

Manages:
- Telegram connector lifecycle
- PID file (prevent duplicate instances)
- Graceful shutdown (SIGTERM/SIGINT)
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys

from stark.config import StarkConfig, load_config
from stark.core import Stark
from stark.engines.anthropic_api import AnthropicAPIEngine
from stark.memory.store import JsonStore

logger = logging.getLogger(__name__)


class StarkDaemon:
    """Always-on daemon process."""

    def __init__(self, config: StarkConfig | None = None) -> None:
        self.config = config or load_config()
        self._shutdown_event = asyncio.Event()

    # ── PID file management ──────────────────────────────────

    def _write_pid(self) -> None:
        self.config.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.config.pid_file.write_text(str(os.getpid()))
        logger.info("PID file written: %s (pid=%d)", self.config.pid_file, os.getpid())

    def _remove_pid(self) -> None:
        if self.config.pid_file.exists():
            self.config.pid_file.unlink()

    def _check_existing(self) -> None:
        if not self.config.pid_file.exists():
            return
        try:
            pid = int(self.config.pid_file.read_text().strip())
            os.kill(pid, 0)  # Check if process exists
            print(f"Stark daemon already running (pid={pid}). Exiting.", file=sys.stderr)
            sys.exit(1)
        except (ProcessLookupError, ValueError):
            # Stale PID file — remove it
            self._remove_pid()

    def _check_secrets(self) -> None:
        missing = self.config.missing_secrets()
        if missing:
            print(f"Missing required settings: {', '.join(missing)}. Exiting.", file=sys.stderr)
            sys.exit(1)

    # ── Signal handling ──────────────────────────────────────

    def _setup_signals(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._handle_signal, sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        logger.info("Received %s, shutting down...", sig.name)
        self._shutdown_event.set()

    # ── Build components ─────────────────────────────────────

    def _build_stark(self) -> Stark:
        store = JsonStore(self.config.data_dir)
        return Stark(self.config, store, self._build_engine())

    def _build_engine(self):
        name = self.config.engine.name
        if name == "anthropic_api":
            return AnthropicAPIEngine(
                model=self.config.engine.model,
                max_tokens=self.config.engine.max_tokens,
                api_key=self.config.engine.api_key,
            )
        else:
            raise ValueError(f"Unknown engine: {name}")

    def _build_connectors(self, stark: Stark) -> None:
        from stark.connectors.telegram import TelegramConnector

        stark.add_connector(TelegramConnector(self.config.telegram))

    # ── Main run loop ────────────────────────────────────────

    async def run(self) -> None:
        self._check_secrets()
        self._check_existing()
        self._write_pid()
        self._setup_signals()

        stark = self._build_stark()
        self._build_connectors(stark)

        logger.info(
            "Stark daemon starting (engine=%s, bot=@%s)",
            self.config.engine.name,
            self.config.telegram.bot_username,
        )

        serving = asyncio.create_task(stark.start())
        # A connector that dies (e.g. rejected token) takes the daemon down with it
        serving.add_done_callback(lambda _: self._shutdown_event.set())
        try:
            await self._shutdown_event.wait()
        except asyncio.CancelledError:
            pass
        finally:
            await stark.stop()
            await asyncio.gather(serving, return_exceptions=True)
            self._remove_pid()
            logger.info("Stark daemon stopped.")
