"""Adapter modules for external integrations."""

from .encoder import EncoderConfigurationError, FunctionEncoder, load_encoder
from .lirc import LircTransmitter, TransmitterError
from .mqtt import MQTTClient, MQTTConnectionError
from .webhook import NotificationError, WebhookNotifier

__all__ = [
    "EncoderConfigurationError",
    "FunctionEncoder",
    "LircTransmitter",
    "MQTTClient",
    "MQTTConnectionError",
    "NotificationError",
    "TransmitterError",
    "WebhookNotifier",
    "load_encoder",
]
