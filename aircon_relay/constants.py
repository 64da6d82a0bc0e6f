"""Constants used across the aircon-relay package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "aircon-relay"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / APP_NAME / DEFAULT_CONFIG_FILENAME

DEFAULT_BROKER_HOST = "localhost"
DEFAULT_BROKER_PORT = 1883
DEFAULT_CLIENT_ID = "rpizerow_aircon"

DEFAULT_COMMAND_TOPIC = "/aircon/action"
DEFAULT_STATE_TOPIC = "/aircon/state"

DEFAULT_LIRC_DEVICE = Path("/dev/lirc0")

DEFAULT_NOTIFY_USERNAME = "エアコン"
DEFAULT_NOTIFY_ICON = ":cyclone:"
