"""Configuration loader for aircon-relay."""

from __future__ import annotations

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from . import constants

# Environment variable -> (section, option)
ENVIRONMENT_OVERRIDES = {
    "MQTT_HOST": ("broker", "host"),
    "MQTT_USERNAME": ("broker", "username"),
    "MQTT_PASSWORD": ("broker", "password"),
    "MQTT_CLIENT_ID": ("broker", "client_id"),
    "SLACK_WEBHOOK": ("notifier", "webhook_url"),
    "AIRCON_ENCODER": ("infrared", "encoder"),
    "LIRC_DEVICE": ("infrared", "device"),
}


class RelayConfigurationError(RuntimeError):
    """Raised when the configuration cannot be used to start the relay."""


@dataclass(slots=True)
class BrokerConfig:
    host: str = constants.DEFAULT_BROKER_HOST
    port: int = constants.DEFAULT_BROKER_PORT
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: str = constants.DEFAULT_CLIENT_ID
    keepalive: int = 60
    connect_timeout_seconds: float = 30.0


@dataclass(slots=True)
class TopicConfig:
    command: str = constants.DEFAULT_COMMAND_TOPIC
    state: str = constants.DEFAULT_STATE_TOPIC
    command_qos: int = 0
    state_qos: int = 1


@dataclass(slots=True)
class InfraredConfig:
    device: Path = constants.DEFAULT_LIRC_DEVICE
    encoder: Optional[str] = None  # "package.module:attribute"
    carrier_hz: Optional[int] = None
    transmit_attempts: int = 1
    retry_delay_seconds: float = 0.5


@dataclass(slots=True)
class NotifierConfig:
    webhook_url: Optional[str] = None
    username: str = constants.DEFAULT_NOTIFY_USERNAME
    icon_emoji: str = constants.DEFAULT_NOTIFY_ICON
    timeout_seconds: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)


@dataclass(slots=True)
class RelaySettings:
    queue_size: int = 0
    notify_drain_seconds: float = 5.0


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class RelayConfig:
    broker: BrokerConfig
    topics: TopicConfig
    infrared: InfraredConfig
    notifier: NotifierConfig
    relay: RelaySettings
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def _optional(parser: ConfigParser, section: str, option: str) -> Optional[str]:
    value = parser.get(section, option, fallback="").strip()
    return value or None


def _read(
    getter: Callable[..., Any], section: str, option: str, fallback: Any
) -> Any:
    try:
        return getter(section, option, fallback=fallback)
    except ValueError as exc:
        raise RelayConfigurationError(
            f"Invalid value for {section}.{option}: {exc}"
        ) from exc


def _getint(parser: ConfigParser, section: str, option: str, *, fallback: int) -> int:
    return _read(parser.getint, section, option, fallback)


def _getfloat(
    parser: ConfigParser, section: str, option: str, *, fallback: float
) -> float:
    return _read(parser.getfloat, section, option, fallback)


def _getboolean(
    parser: ConfigParser, section: str, option: str, *, fallback: bool
) -> bool:
    return _read(parser.getboolean, section, option, fallback)


def _split_broker_host(value: str, default_port: int) -> tuple[str, int]:
    host = value.strip()
    if "://" in host:
        host = host.split("://", 1)[1]
    host = host.rstrip("/")

    port = default_port
    if ":" in host:
        host_part, port_part = host.rsplit(":", 1)
        try:
            port = int(port_part)
        except ValueError:
            pass
        else:
            host = host_part

    return host, port


def load_config(
    path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None
) -> RelayConfig:
    """Load configuration from disk and the environment, applying defaults."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    env = os.environ if environ is None else environ

    parser = ConfigParser(interpolation=None)
    parser.read_dict(
        {
            "broker": {
                "host": constants.DEFAULT_BROKER_HOST,
                "port": str(constants.DEFAULT_BROKER_PORT),
                "client_id": constants.DEFAULT_CLIENT_ID,
                "keepalive": "60",
                "connect_timeout_seconds": "30",
            },
            "topics": {
                "command": constants.DEFAULT_COMMAND_TOPIC,
                "state": constants.DEFAULT_STATE_TOPIC,
                "command_qos": "0",
                "state_qos": "1",
            },
            "infrared": {
                "device": str(constants.DEFAULT_LIRC_DEVICE),
                "transmit_attempts": "1",
                "retry_delay_seconds": "0.5",
            },
            "notifier": {
                "username": constants.DEFAULT_NOTIFY_USERNAME,
                "icon_emoji": constants.DEFAULT_NOTIFY_ICON,
                "timeout_seconds": "10",
            },
            "relay": {
                "queue_size": "0",
                "notify_drain_seconds": "5",
            },
            "logging": {
                "level": "INFO",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path, encoding="utf-8")

    for variable, (section, option) in ENVIRONMENT_OVERRIDES.items():
        value = env.get(variable)
        if value:
            parser.set(section, option, value)

    broker_host, broker_port = _split_broker_host(
        parser.get("broker", "host"),
        _getint(parser, "broker", "port", fallback=constants.DEFAULT_BROKER_PORT),
    )
    parser.set("broker", "host", broker_host)
    parser.set("broker", "port", str(broker_port))

    broker = BrokerConfig(
        host=broker_host,
        port=broker_port,
        username=_optional(parser, "broker", "username"),
        password=_optional(parser, "broker", "password"),
        client_id=parser.get("broker", "client_id"),
        keepalive=max(1, _getint(parser, "broker", "keepalive", fallback=60)),
        connect_timeout_seconds=_getfloat(
            parser, "broker", "connect_timeout_seconds", fallback=30.0
        ),
    )

    command_qos = _getint(parser, "topics", "command_qos", fallback=0)
    state_qos = _getint(parser, "topics", "state_qos", fallback=1)
    topics = TopicConfig(
        command=parser.get("topics", "command"),
        state=parser.get("topics", "state"),
        command_qos=min(2, max(0, command_qos)),
        state_qos=min(2, max(0, state_qos)),
    )

    carrier_value = _optional(parser, "infrared", "carrier_hz")
    try:
        carrier_hz = int(carrier_value) if carrier_value else None
    except ValueError as exc:
        raise RelayConfigurationError(
            f"infrared.carrier_hz must be an integer, got {carrier_value!r}"
        ) from exc

    infrared = InfraredConfig(
        device=Path(parser.get("infrared", "device")).expanduser(),
        encoder=_optional(parser, "infrared", "encoder"),
        carrier_hz=carrier_hz,
        transmit_attempts=max(
            1, _getint(parser, "infrared", "transmit_attempts", fallback=1)
        ),
        retry_delay_seconds=max(
            0.0, _getfloat(parser, "infrared", "retry_delay_seconds", fallback=0.5)
        ),
    )

    notifier = NotifierConfig(
        webhook_url=_optional(parser, "notifier", "webhook_url"),
        username=parser.get("notifier", "username"),
        icon_emoji=parser.get("notifier", "icon_emoji"),
        timeout_seconds=max(
            0.1, _getfloat(parser, "notifier", "timeout_seconds", fallback=10.0)
        ),
    )

    relay = RelaySettings(
        queue_size=max(0, _getint(parser, "relay", "queue_size", fallback=0)),
        notify_drain_seconds=max(
            0.0, _getfloat(parser, "relay", "notify_drain_seconds", fallback=5.0)
        ),
    )

    log_path = _optional(parser, "logging", "path")
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path).expanduser() if log_path else None,
        log_network=_getboolean(parser, "logging", "log_network", fallback=False),
    )

    return RelayConfig(
        broker=broker,
        topics=topics,
        infrared=infrared,
        notifier=notifier,
        relay=relay,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )
