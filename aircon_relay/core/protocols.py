"""Protocol definitions for the relay's external collaborators."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol

from .models import Command, NotificationPayload, PulseSequence

MessageHandler = Callable[[str, bytes], Awaitable[None] | None]


class SignalEncoder(Protocol):
    """Maps a command to the pulse train understood by the air conditioner."""

    def encode(self, command: Command) -> PulseSequence:
        """Return the pulse/space durations for ``command``.

        Must accept unknown enumeration values and encode them as raw fields.
        """
        ...


class Transmitter(Protocol):
    """Emits a pulse train through infrared hardware."""

    def transmit(self, pulses: PulseSequence) -> None:
        """Send the pulses, blocking until done.

        Raises:
            Exception: Any failure means the command was not applied.
        """
        ...


class Notifier(Protocol):
    async def send(self, payload: NotificationPayload) -> None: ...


class RelayMQTTClient(Protocol):
    def subscribe(self, topic: str, qos: int = 1) -> None: ...

    def unsubscribe(self, topic: str) -> None: ...

    def publish(
        self, topic: str, payload: bytes, qos: int = 1, retain: bool = False
    ) -> None: ...

    def set_message_handler(self, handler: Optional[MessageHandler]) -> None: ...
