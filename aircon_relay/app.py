"""Main application entry-point for aircon-relay."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from .adapters import (
    EncoderConfigurationError,
    LircTransmitter,
    MQTTClient,
    MQTTConnectionError,
    TransmitterError,
    WebhookNotifier,
    load_encoder,
)
from .config import RelayConfig, RelayConfigurationError, load_config
from .core.protocols import Notifier, SignalEncoder, Transmitter
from .logging import configure_logging
from .relay import RelayLoop, RelayTransmitError

LOGGER = logging.getLogger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class AirconRelayApp:
    """Coordinates startup and shutdown of the relay.

    Collaborators default to the production adapters built from configuration
    (paho-mqtt, a LIRC device, the configured encoder and an optional
    webhook). Any of them can be injected for testing.
    """

    def __init__(
        self,
        config: Optional[RelayConfig] = None,
        *,
        encoder: Optional[SignalEncoder] = None,
        transmitter: Optional[Transmitter] = None,
        notifier: Optional[Notifier] = None,
        mqtt_client: Optional[MQTTClient] = None,
    ) -> None:
        self._config = config or load_config()
        self._encoder = encoder
        self._transmitter = transmitter
        self._notifier = notifier
        self._mqtt_client = mqtt_client
        self._relay: Optional[RelayLoop] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._installed_signals: list[signal.Signals] = []
        self._pending_shutdown = False

    @property
    def relay(self) -> Optional[RelayLoop]:
        return self._relay

    async def run(self) -> None:
        """Start services, relay commands until shutdown, then clean up.

        Raises:
            RelayTransmitError: If the infrared hardware failed.
            RelayConfigurationError: If the encoder or notifier is misconfigured.
            MQTTConnectionError: If the broker could not be reached.
            TransmitterError: If the infrared device could not be opened.
        """

        self._loop = asyncio.get_running_loop()
        self._install_signal_handlers()
        LOGGER.info("aircon-relay starting with config: %s", self._config.path)

        try:
            await self._start_services()
            relay = self._relay
            assert relay is not None
            if self._pending_shutdown:
                relay.request_shutdown()
            await relay.run()
        finally:
            await self._stop_services()
            self._remove_signal_handlers()

    def request_shutdown(self) -> None:
        LOGGER.info("aircon-relay received shutdown signal")
        if self._relay is None:
            self._pending_shutdown = True
            return
        self._relay.request_shutdown()

    @classmethod
    def start(cls, config: Optional[RelayConfig] = None) -> int:
        instance = cls(config=config)
        logging_config = instance._config.logging
        configure_logging(
            logging_config.level,
            log_path=logging_config.path,
            log_network=logging_config.log_network,
        )
        try:
            asyncio.run(instance.run())
        except RelayTransmitError as exc:
            LOGGER.error("Stopping: infrared hardware failure: %s", exc)
            return 1
        except (
            RelayConfigurationError,
            MQTTConnectionError,
            TransmitterError,
        ) as exc:
            LOGGER.error("Startup failed: %s", exc)
            return 1
        except KeyboardInterrupt:
            LOGGER.info("aircon-relay interrupted")
        return 0

    async def _start_services(self) -> None:
        config = self._config

        if self._encoder is None:
            if not config.infrared.encoder:
                raise RelayConfigurationError(
                    "No signal encoder configured; set [infrared] encoder or AIRCON_ENCODER"
                )
            try:
                self._encoder = load_encoder(config.infrared.encoder)
            except EncoderConfigurationError as exc:
                raise RelayConfigurationError(str(exc)) from exc

        if self._transmitter is None:
            self._transmitter = LircTransmitter(
                config.infrared.device, carrier_hz=config.infrared.carrier_hz
            )
        _open = getattr(self._transmitter, "open", None)
        if callable(_open):
            _open()

        if self._notifier is None and config.notifier.enabled:
            self._notifier = WebhookNotifier(config.notifier)
        if self._notifier is not None:
            _start = getattr(self._notifier, "start", None)
            if callable(_start):
                await _start()
            LOGGER.info("Notifications enabled")
        else:
            LOGGER.info("No webhook configured; notifications disabled")

        if self._mqtt_client is None:
            self._mqtt_client = MQTTClient(config.broker)
        await self._mqtt_client.connect()

        self._relay = RelayLoop(
            config,
            mqtt=self._mqtt_client,
            encoder=self._encoder,
            transmitter=self._transmitter,
            notifier=self._notifier,
        )
        await self._relay.start()
        self._mqtt_client.register_connect_handler(self._on_mqtt_connect)
        self._mqtt_client.register_disconnect_handler(self._on_mqtt_disconnect)

    async def _stop_services(self) -> None:
        if self._relay is not None:
            self._relay.request_shutdown()
            await self._relay.stop()
            await self._relay.drain_notifications(
                self._config.relay.notify_drain_seconds
            )

        if self._mqtt_client is not None:
            try:
                await self._mqtt_client.disconnect()
            except Exception:  # pragma: no cover - defensive cleanup
                LOGGER.debug("Error disconnecting from MQTT broker", exc_info=True)

        if self._notifier is not None:
            _stop = getattr(self._notifier, "stop", None)
            if callable(_stop):
                try:
                    await _stop()
                except Exception:  # pragma: no cover - defensive cleanup
                    LOGGER.debug("Error stopping notifier", exc_info=True)

        if self._transmitter is not None:
            _close = getattr(self._transmitter, "close", None)
            if callable(_close):
                _close()

        LOGGER.info("aircon-relay stopped")

    def _on_mqtt_connect(self, rc: int) -> None:
        # paho reconnects on its own; subscriptions do not survive a clean session
        if self._relay is not None:
            self._relay.resubscribe()

    def _on_mqtt_disconnect(self, rc: int) -> None:
        if rc != 0:
            LOGGER.warning("Lost MQTT connection (rc=%s); waiting for reconnect", rc)

    def _install_signal_handlers(self) -> None:
        loop = self._loop
        if loop is None:
            return
        for sig in _SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except (NotImplementedError, RuntimeError, ValueError):
                # not available off the main thread or on Windows
                continue
            self._installed_signals.append(sig)

    def _remove_signal_handlers(self) -> None:
        loop = self._loop
        while self._installed_signals:
            sig = self._installed_signals.pop()
            if loop is not None:
                loop.remove_signal_handler(sig)
