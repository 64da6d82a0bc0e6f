from configparser import ConfigParser
from pathlib import Path

import pytest

from aircon_relay.config import (
    BrokerConfig,
    InfraredConfig,
    LoggingConfig,
    NotifierConfig,
    RelayConfig,
    RelaySettings,
    TopicConfig,
)


def build_config(**infrared_overrides) -> RelayConfig:
    infrared = InfraredConfig(retry_delay_seconds=0.0)
    for key, value in infrared_overrides.items():
        setattr(infrared, key, value)

    return RelayConfig(
        broker=BrokerConfig(
            host="broker.local",
            port=1883,
            username="aircon",
            password="secret",
        ),
        topics=TopicConfig(),
        infrared=infrared,
        notifier=NotifierConfig(),
        relay=RelaySettings(notify_drain_seconds=0.1),
        logging=LoggingConfig(),
        raw=ConfigParser(),
        path=Path("aircon-relay.cfg"),
    )


@pytest.fixture
def config() -> RelayConfig:
    return build_config()


@pytest.fixture
def make_config():
    return build_config
