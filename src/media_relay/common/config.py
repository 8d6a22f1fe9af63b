"""
Typed view over ``config.yaml``.

The file is loaded by :func:`media_relay.common.utils.load_config`; this module
only validates values and fills in the defaults the relay has always used.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

DEFAULT_POST_INTERVAL = 90 * 60  # seconds


class ConfigError(ValueError):
    """Raised when ``config.yaml`` is missing a required value."""


@dataclass(frozen=True)
class SchedulerConfig:
    min_hour: int = 5
    max_hour: int = 19
    min_post_count: int = 4
    max_post_count: int = 5
    post_interval: float = DEFAULT_POST_INTERVAL
    post_interval_offset: float = DEFAULT_POST_INTERVAL / 10
    base_post_chance: float = 0.25
    base_post_chance_backlog: int = 25
    utc_offset_hours: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> SchedulerConfig:
        data = data or {}
        post_interval = float(data.get("post_interval", DEFAULT_POST_INTERVAL))
        config = cls(
            min_hour=int(data.get("min_hour", cls.min_hour)),
            max_hour=int(data.get("max_hour", cls.max_hour)),
            min_post_count=int(data.get("min_post_count", cls.min_post_count)),
            max_post_count=int(data.get("max_post_count", cls.max_post_count)),
            post_interval=post_interval,
            post_interval_offset=float(
                data.get("post_interval_offset", post_interval / 10)
            ),
            base_post_chance=float(data.get("base_post_chance", cls.base_post_chance)),
            base_post_chance_backlog=int(
                data.get("base_post_chance_backlog", cls.base_post_chance_backlog)
            ),
            utc_offset_hours=int(data.get("utc_offset_hours", cls.utc_offset_hours)),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if self.min_post_count < 0 or self.max_post_count < self.min_post_count:
            raise ConfigError(
                "scheduler.min_post_count/max_post_count must satisfy "
                "0 <= min_post_count <= max_post_count"
            )
        if self.post_interval <= 0 or self.post_interval_offset < 0:
            raise ConfigError("scheduler.post_interval must be positive")
        if self.base_post_chance_backlog <= 0:
            raise ConfigError("scheduler.base_post_chance_backlog must be positive")


@dataclass(frozen=True)
class TransportConfig:
    mode: str = "polling"
    webhook_url: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8080
    poll_timeout: int = 30

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> TransportConfig:
        data = data or {}
        config = cls(
            mode=data.get("mode", cls.mode),
            webhook_url=data.get("webhook_url"),
            host=data.get("host", cls.host),
            port=int(data.get("port", cls.port)),
            poll_timeout=int(data.get("poll_timeout", cls.poll_timeout)),
        )
        if config.mode not in ("polling", "webhook"):
            raise ConfigError(f"Unknown transport.mode: {config.mode}")
        if config.mode == "webhook" and not config.webhook_url:
            raise ConfigError("transport.webhook_url is required in webhook mode")
        return config


@dataclass(frozen=True)
class RelayConfig:
    chat_id: int
    debug: bool = False
    blacklisted_chat_ids: FrozenSet[int] = frozenset()
    log_chat_id: Optional[int] = None
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> RelayConfig:
        relay = config.get("relay") or {}
        if relay.get("chat_id") is None:
            raise ConfigError("relay.chat_id is required")

        log_chat_id = (config.get("system") or {}).get("log_chat_id")

        return cls(
            chat_id=int(relay["chat_id"]),
            debug=bool(relay.get("debug", False)),
            blacklisted_chat_ids=frozenset(
                int(chat_id) for chat_id in relay.get("blacklisted_chat_ids") or []
            ),
            log_chat_id=int(log_chat_id) if log_chat_id is not None else None,
            scheduler=SchedulerConfig.from_dict(config.get("scheduler")),
            transport=TransportConfig.from_dict(config.get("transport")),
        )
