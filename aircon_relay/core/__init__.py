"""Core primitives for aircon-relay."""

from .codec import CommandDecodeError, decode_command, encode_command
from .models import (
    AirVolume,
    Command,
    Mode,
    NotificationPayload,
    Power,
    PulseSequence,
    WindDirection,
)
from .protocols import (
    MessageHandler,
    Notifier,
    RelayMQTTClient,
    SignalEncoder,
    Transmitter,
)

__all__ = [
    "AirVolume",
    "Command",
    "CommandDecodeError",
    "MessageHandler",
    "Mode",
    "NotificationPayload",
    "Notifier",
    "Power",
    "PulseSequence",
    "RelayMQTTClient",
    "SignalEncoder",
    "Transmitter",
    "WindDirection",
    "decode_command",
    "encode_command",
]
