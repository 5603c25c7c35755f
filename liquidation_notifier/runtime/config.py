"""Bot configuration model.

The configuration is a flat JSON object. Its path comes from ``--config``,
else the ``CONFIG`` environment variable, else ``config.json``.

JSON example:
    {
      "bitmex_host": "www.bitmex.com",
      "discord_token": "...",
      "discord_channel": "123456789012345678",
      "state_path": "state.json"
    }
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, model_validator

from liquidation_notifier.core.domain.dedup_window import DEFAULT_SUPPRESSION_WINDOW_NS
from liquidation_notifier.core.domain.errors import ConfigError
from liquidation_notifier.core.domain.statistics import DEFAULT_RECENT_WINDOW

CONFIG_ENV_VAR: str = "CONFIG"
DEFAULT_CONFIG_PATH: str = "config.json"


class BotConfig(BaseModel):
    """Runtime configuration for the liquidation notifier."""

    # Feed
    bitmex_host: str = Field(default="www.bitmex.com", min_length=1)
    pong_wait_s: float = Field(default=60.0, gt=0)
    ping_interval_s: float = Field(default=54.0, gt=0)
    write_wait_s: float = Field(default=10.0, gt=0)

    # Sink
    discord_token: SecretStr
    discord_channel: str = Field(..., min_length=1)
    sink_timeout_s: float = Field(default=10.0, gt=0)

    # Reconciliation
    suppression_window_s: float = Field(default=DEFAULT_SUPPRESSION_WINDOW_NS / 1e9, gt=0)
    recent_window: int = Field(default=DEFAULT_RECENT_WINDOW, ge=1)
    state_path: Path = Path("state.json")

    # Observability
    event_log_path: Path | None = None
    metrics_port: int | None = Field(default=None, ge=1, le=65535)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, obj: dict[str, Any]) -> BotConfig:
        return cls.model_validate(obj)

    @model_validator(mode="after")
    def validate_heartbeat(self) -> BotConfig:
        """Pings must be sent before the read deadline expires."""
        if self.ping_interval_s >= self.pong_wait_s:
            raise ValueError("ping_interval_s must be smaller than pong_wait_s")
        return self

    @property
    def suppression_window_ns(self) -> int:
        return int(self.suppression_window_s * 1_000_000_000)

    @property
    def feed_url(self) -> str:
        return f"wss://{self.bitmex_host}/realtime?subscribe=liquidation"


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path)
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)


def load_config(path: str | Path | None = None) -> BotConfig:
    """Read and validate the configuration file. Raises ConfigError."""
    config_path = resolve_config_path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"unable to read config {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config {config_path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"config {config_path} must contain a JSON object")

    try:
        return BotConfig.from_json_obj(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {config_path}: {exc}") from exc
