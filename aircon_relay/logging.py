"""Logging configuration helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# paho's internal client log is routed here by the MQTT adapter
PAHO_LOGGER_NAME = "aircon_relay.adapters.mqtt.paho"

NETWORK_LOGGERS = (
    "aiohttp.access",
    "aiohttp.client",
    "paho",
    PAHO_LOGGER_NAME,
)


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_network: bool = False
) -> None:
    """Configure root logging handlers.

    Parameters
    ----------
    level:
        Log level name, e.g. "INFO". Unknown names fall back to INFO.
    log_path:
        Optional filesystem path for a UTF-8 file handler; notification
        summaries are logged in Japanese. When absent, only console logging
        is configured.
    log_network:
        When true, leave the broker and webhook client loggers at the root
        level to trace connection problems.
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    resolved = logging.getLevelName(level.upper())
    unknown_level = not isinstance(resolved, int)
    logging.basicConfig(
        level=logging.INFO if unknown_level else resolved,
        format=LOG_FORMAT,
    )

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    network_level = logging.NOTSET if log_network else logging.WARNING
    for name in NETWORK_LOGGERS:
        logging.getLogger(name).setLevel(network_level)

    if unknown_level:
        logging.getLogger(__name__).warning(
            "Unknown log level %r; using INFO", level
        )
