"""Command relay loop: action topic -> infrared -> state topic."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Optional, Set

from paho.mqtt.client import topic_matches_sub

from .config import RelayConfig
from .core.codec import CommandDecodeError, decode_command, encode_command
from .core.models import Command, NotificationPayload, PulseSequence
from .core.protocols import Notifier, RelayMQTTClient, SignalEncoder, Transmitter
from .messages import build_notification

LOGGER = logging.getLogger(__name__)

_SHUTDOWN = object()


class RelayState(str, Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    SHUTTING_DOWN = "shutting_down"


class RelayTransmitError(RuntimeError):
    """Raised when a command could not be sent to the infrared hardware.

    The hardware channel is considered unusable afterwards, so this error
    terminates the relay loop.
    """

    def __init__(self, message: str, *, command: Command, attempts: int) -> None:
        super().__init__(message)
        self.command = command
        self.attempts = attempts


class RelayLoop:
    """Applies commands received over MQTT to the air conditioner.

    Payloads are queued in arrival order by :meth:`submit` and handled one at
    a time by :meth:`run`. Each command is decoded, transmitted, published to
    the retained state topic and, when a notifier is configured, announced in
    the background. Only a transmit failure stops the loop.
    """

    def __init__(
        self,
        config: RelayConfig,
        *,
        mqtt: RelayMQTTClient,
        encoder: SignalEncoder,
        transmitter: Transmitter,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self._config = config
        self._mqtt = mqtt
        self._encoder = encoder
        self._transmitter = transmitter
        self._notifier = notifier

        self._command_topic = config.topics.command
        self._state_topic = config.topics.state
        self._queue: asyncio.Queue[object] = asyncio.Queue(
            maxsize=config.relay.queue_size
        )
        self._submit_lock = asyncio.Lock()
        self._state = RelayState.IDLE
        self._shutdown_requested = False
        self._handler_registered = False
        self._notification_tasks: Set[asyncio.Task[None]] = set()

    @property
    def state(self) -> RelayState:
        return self._state

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._handler_registered:
            raise RuntimeError("RelayLoop already started")

        self._mqtt.set_message_handler(self.submit)
        self._mqtt.subscribe(self._command_topic, qos=self._config.topics.command_qos)
        self._handler_registered = True
        LOGGER.info("Relay subscribed to %s", self._command_topic)

    async def stop(self) -> None:
        if not self._handler_registered:
            return

        try:
            self._mqtt.unsubscribe(self._command_topic)
        except Exception:  # pragma: no cover - defensive cleanup
            LOGGER.debug("Failed to unsubscribe from %s", self._command_topic, exc_info=True)
        finally:
            self._mqtt.set_message_handler(None)
            self._handler_registered = False

    def resubscribe(self) -> None:
        if not self._handler_registered or self._shutdown_requested:
            return
        try:
            self._mqtt.subscribe(
                self._command_topic, qos=self._config.topics.command_qos
            )
        except Exception as exc:
            LOGGER.error("Failed to resubscribe to %s: %s", self._command_topic, exc)
        else:
            LOGGER.info("Relay resubscribed to %s", self._command_topic)

    async def submit(self, topic: str, payload: bytes) -> None:
        """Queue a raw payload received on ``topic``."""

        if not topic_matches_sub(self._command_topic, topic):
            return
        if self._shutdown_requested:
            LOGGER.debug("Relay shutting down; ignoring message on %s", topic)
            return

        # Queue.put does not wake blocked producers in order; the lock does
        async with self._submit_lock:
            if self._shutdown_requested:
                LOGGER.debug("Relay shutting down; ignoring message on %s", topic)
                return
            await self._queue.put(bytes(payload))

    def request_shutdown(self) -> None:
        if self._shutdown_requested:
            return
        self._shutdown_requested = True
        self._set_state(RelayState.SHUTTING_DOWN)
        with contextlib.suppress(asyncio.QueueFull):
            # a full queue wakes the dispatcher on its own
            self._queue.put_nowait(_SHUTDOWN)

    async def run(self) -> None:
        """Dispatch queued commands until shutdown or a transmit failure."""

        LOGGER.info("Relay loop running")
        try:
            while True:
                item = await self._queue.get()
                if self._shutdown_requested or item is _SHUTDOWN:
                    break

                self._set_state(RelayState.DISPATCHING)
                try:
                    await self.dispatch(item)  # type: ignore[arg-type]
                finally:
                    if not self._shutdown_requested:
                        self._set_state(RelayState.IDLE)
        except RelayTransmitError:
            self._shutdown_requested = True
            raise
        finally:
            self._set_state(RelayState.SHUTTING_DOWN)
            dropped = self._discard_pending()
            if dropped:
                LOGGER.warning("Relay stopped with %d unprocessed command(s)", dropped)
            LOGGER.info("Relay loop stopped")

    async def dispatch(self, payload: bytes) -> Optional[Command]:
        """Run one payload through decode, transmit, publish and notify.

        Returns the applied command, or ``None`` when the payload was dropped.

        Raises:
            RelayTransmitError: If the infrared transmission failed.
        """

        try:
            command = decode_command(payload)
        except CommandDecodeError as exc:
            LOGGER.warning("Dropping invalid command payload (%s): %s", exc.code, exc)
            return None

        try:
            pulses = self._encoder.encode(command)
        except Exception:
            LOGGER.exception("Signal encoder failed; dropping command %s", command)
            return None

        LOGGER.info("Applying command %s", command)
        await self._transmit(command, pulses)
        self._publish_state(command)
        self._schedule_notification(command)
        return command

    async def drain_notifications(self, timeout: float) -> None:
        tasks = set(self._notification_tasks)
        if not tasks:
            return

        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            LOGGER.warning("Abandoned %d pending notification(s)", len(pending))

    async def _transmit(self, command: Command, pulses: PulseSequence) -> None:
        attempts = self._config.infrared.transmit_attempts
        delay = self._config.infrared.retry_delay_seconds
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                await asyncio.to_thread(self._transmitter.transmit, pulses)
            except Exception as exc:
                last_error = exc
                LOGGER.error(
                    "Infrared transmit failed (attempt %d/%d): %s",
                    attempt,
                    attempts,
                    exc,
                )
                if attempt < attempts and delay > 0:
                    await asyncio.sleep(delay)
            else:
                return

        raise RelayTransmitError(
            f"Infrared transmit failed after {attempts} attempt(s): {last_error}",
            command=command,
            attempts=attempts,
        ) from last_error

    def _publish_state(self, command: Command) -> None:
        try:
            self._mqtt.publish(
                self._state_topic,
                encode_command(command),
                qos=self._config.topics.state_qos,
                retain=True,
            )
        except Exception as exc:
            LOGGER.error("Failed to publish state to %s: %s", self._state_topic, exc)

    def _schedule_notification(self, command: Command) -> None:
        if self._notifier is None:
            return

        payload = build_notification(
            command,
            username=self._config.notifier.username,
            icon_emoji=self._config.notifier.icon_emoji,
        )
        task = asyncio.create_task(self._send_notification(payload))
        self._notification_tasks.add(task)
        task.add_done_callback(self._notification_tasks.discard)

    async def _send_notification(self, payload: NotificationPayload) -> None:
        assert self._notifier is not None
        try:
            await self._notifier.send(payload)
        except Exception as exc:
            LOGGER.warning("Notification failed: %s", exc)

    def _discard_pending(self) -> int:
        dropped = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return dropped
            if item is not _SHUTDOWN:
                dropped += 1

    def _set_state(self, state: RelayState) -> None:
        if state == self._state:
            return
        LOGGER.debug("Relay state %s -> %s", self._state.value, state.value)
        self._state = state
