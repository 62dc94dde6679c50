"""Configuration loading from environment variables and stark.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_DATA_DIR = Path.home() / ".stark" / "data"
_CONFIG_FILENAME = "stark.toml"


@dataclass
class EngineConfig:
    """Configuration for the AI engine."""

    name: str = "anthropic_api"
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 2048
    api_key: str = ""


@dataclass
class TelegramConfig:
    """Telegram connector configuration."""

    token: str = ""
    bot_username: str = "stark_assistant_bot"  # without @
    chunk_size: int = 4000


@dataclass
class StarkConfig:
    """Top-level Stark configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    data_dir: Path = _DEFAULT_DATA_DIR
    context_file: Path | None = None
    history_window: int = 50
    pid_file: Path = Path.home() / ".stark" / "stark.pid"
    log_level: str = "INFO"

    def missing_secrets(self) -> list[str]:
        """Names of the secrets a production run cannot do without."""
        missing = []
        if not self.telegram.token:
            missing.append("TELEGRAM_TOKEN")
        if not self.engine.api_key:
            missing.append("ANTHROPIC_API_KEY")
        return missing


def load_config(config_path: Path | None = None) -> StarkConfig:
    """Load configuration from environment variables and optional stark.toml.

    Priority: environment variables > stark.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.stark/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".stark" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    engine_data = file_data.get("engine", {})
    telegram_data = file_data.get("telegram", {})

    context_file = os.getenv("STARK_CONTEXT_FILE", file_data.get("context_file"))

    config = StarkConfig(
        engine=EngineConfig(
            name=os.getenv("STARK_ENGINE", engine_data.get("name", "anthropic_api")),
            model=os.getenv("STARK_MODEL", engine_data.get("model", "claude-sonnet-4-5-20250929")),
            max_tokens=int(os.getenv("STARK_MAX_TOKENS", engine_data.get("max_tokens", 2048))),
            api_key=os.getenv("ANTHROPIC_API_KEY", engine_data.get("api_key", "")),
        ),
        telegram=TelegramConfig(
            token=os.getenv("TELEGRAM_TOKEN", telegram_data.get("token", "")),
            bot_username=os.getenv(
                "BOT_USERNAME", telegram_data.get("bot_username", "stark_assistant_bot")
            ).lstrip("@"),
            chunk_size=int(telegram_data.get("chunk_size", 4000)),
        ),
        data_dir=Path(os.getenv("STARK_DATA_DIR", file_data.get("data_dir", str(_DEFAULT_DATA_DIR)))),
        context_file=Path(context_file) if context_file else None,
        history_window=int(os.getenv("STARK_HISTORY_WINDOW", file_data.get("history_window", 50))),
        log_level=os.getenv("STARK_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
