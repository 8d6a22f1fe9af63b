import pytest

from media_relay.common.config import (
    ConfigError,
    RelayConfig,
    SchedulerConfig,
    TransportConfig,
)


def test_relay_config_defaults():
    config = RelayConfig.from_dict({"relay": {"chat_id": -100}})

    assert config.chat_id == -100
    assert config.debug is False
    assert config.blacklisted_chat_ids == frozenset()
    assert config.log_chat_id is None
    assert config.scheduler == SchedulerConfig()
    assert config.transport.mode == "polling"


def test_relay_config_requires_chat_id():
    with pytest.raises(ConfigError):
        RelayConfig.from_dict({"relay": {"debug": True}})

    with pytest.raises(ConfigError):
        RelayConfig.from_dict({})


def test_relay_config_full():
    config = RelayConfig.from_dict(
        {
            "relay": {
                "chat_id": "-100",
                "debug": True,
                "blacklisted_chat_ids": [-200, "-300"],
            },
            "scheduler": {"min_hour": 8, "max_hour": 22, "post_interval": 600},
            "transport": {"mode": "webhook", "webhook_url": "https://example.org/"},
            "system": {"log_chat_id": 42},
        }
    )

    assert config.chat_id == -100
    assert config.debug is True
    assert config.blacklisted_chat_ids == frozenset({-200, -300})
    assert config.log_chat_id == 42
    assert config.scheduler.min_hour == 8
    assert config.scheduler.max_hour == 22
    assert config.scheduler.post_interval == 600
    # Offset follows the interval unless given explicitly
    assert config.scheduler.post_interval_offset == 60
    assert config.transport.webhook_url == "https://example.org/"


def test_scheduler_defaults():
    config = SchedulerConfig.from_dict(None)

    assert config.min_hour == 5
    assert config.max_hour == 19
    assert config.min_post_count == 4
    assert config.max_post_count == 5
    assert config.post_interval == 5400
    assert config.post_interval_offset == 540
    assert config.base_post_chance == 0.25
    assert config.base_post_chance_backlog == 25


@pytest.mark.parametrize(
    "data",
    [
        {"min_post_count": 6, "max_post_count": 5},
        {"min_post_count": -1},
        {"post_interval": 0},
        {"base_post_chance_backlog": 0},
    ],
)
def test_scheduler_rejects_invalid_values(data):
    with pytest.raises(ConfigError):
        SchedulerConfig.from_dict(data)


def test_transport_rejects_unknown_mode():
    with pytest.raises(ConfigError):
        TransportConfig.from_dict({"mode": "carrier_pigeon"})


def test_transport_webhook_requires_url():
    with pytest.raises(ConfigError):
        TransportConfig.from_dict({"mode": "webhook"})
