"""Tests for the MQTT adapter."""

import asyncio
from types import SimpleNamespace

import pytest
import pytest_asyncio

from aircon_relay.adapters import MQTTClient, MQTTConnectionError
from aircon_relay.config import BrokerConfig

import paho.mqtt.client as mqtt


class FakeMqttClient:
    """Minimal fake paho-mqtt client for testing."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        events: dict,
        *,
        rc_connect: int = 0,
        rc_disconnect: int = 0,
        publish_rc: int = mqtt.MQTT_ERR_SUCCESS,
        subscribe_rc: int = mqtt.MQTT_ERR_SUCCESS,
    ):
        self._loop = loop
        self._events = events
        self._rc_connect = rc_connect
        self._rc_disconnect = rc_disconnect
        self._publish_rc = publish_rc
        self._subscribe_rc = subscribe_rc

        self.on_connect = None
        self.on_disconnect = None
        self.on_message = None

    # paho interface -------------------------------------------------
    def enable_logger(self, logger):
        self._events["logger"] = logger

    def username_pw_set(self, username, password=None):
        self._events["auth"] = (username, password)

    def connect_async(self, host, port, keepalive):
        self._events["connect_args"] = (host, port, keepalive)
        if self.on_connect:
            self._loop.call_soon(
                self.on_connect,
                self,
                None,
                None,
                self._rc_connect,
                None,
            )

    def loop_start(self):
        self._events["loop_start"] = self._events.get("loop_start", 0) + 1

    def loop_stop(self):
        self._events["loop_stop"] = self._events.get("loop_stop", 0) + 1

    def disconnect(self):
        self._events["disconnect_called"] = True
        if self.on_disconnect:
            self._loop.call_soon(
                self.on_disconnect,
                self,
                None,
                None,
                self._rc_disconnect,
                None,
            )

    def publish(self, topic, payload, qos=0, retain=False):
        self._events.setdefault("published", []).append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self._publish_rc)

    def subscribe(self, topic, qos=0):
        self._events.setdefault("subscribed", []).append((topic, qos))
        return self._subscribe_rc, 1

    def unsubscribe(self, topic):
        self._events.setdefault("unsubscribed", []).append(topic)
        return mqtt.MQTT_ERR_SUCCESS, 2


def _install_fake(monkeypatch, events: dict, **options) -> None:
    loop = asyncio.get_running_loop()

    def factory(*args, **kwargs):
        events["client_args"] = (args, kwargs)
        return FakeMqttClient(loop, events, **options)

    monkeypatch.setattr("aircon_relay.adapters.mqtt.mqtt.Client", factory)


def _broker(**overrides) -> BrokerConfig:
    config = BrokerConfig(
        host="broker.local",
        port=1883,
        username="aircon",
        password="secret",
        client_id="rpizerow_aircon",
        connect_timeout_seconds=1.0,
    )
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


@pytest_asyncio.fixture
async def mqtt_client(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events)

    client = MQTTClient(_broker())
    await client.connect()

    yield client, events

    await client.disconnect()


@pytest.mark.asyncio
async def test_connect_configures_client(mqtt_client):
    client, events = mqtt_client

    args, kwargs = events["client_args"]
    assert args == (mqtt.CallbackAPIVersion.VERSION2,)
    assert kwargs == {"client_id": "rpizerow_aircon"}
    assert events["connect_args"] == ("broker.local", 1883, 60)
    assert events["auth"] == ("aircon", "secret")
    assert events["loop_start"] == 1
    assert client.is_connected()
    assert events["logger"].name == "aircon_relay.adapters.mqtt.paho"


@pytest.mark.asyncio
async def test_anonymous_connect_skips_credentials(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events)

    client = MQTTClient(_broker(username=None, password=None))
    await client.connect()

    assert "auth" not in events

    await client.disconnect()


@pytest.mark.asyncio
async def test_publish_delegates_to_client(mqtt_client):
    client, events = mqtt_client

    client.publish("/aircon/state", b"{}", qos=1, retain=True)

    assert events["published"] == [("/aircon/state", b"{}", 1, True)]


@pytest.mark.asyncio
async def test_subscribe_and_unsubscribe_record_topics(mqtt_client):
    client, events = mqtt_client

    client.subscribe("/aircon/action", qos=0)
    client.unsubscribe("/aircon/action")

    assert events["subscribed"] == [("/aircon/action", 0)]
    assert events["unsubscribed"] == ["/aircon/action"]


@pytest.mark.asyncio
async def test_message_handler_dispatches_async(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events)

    client = MQTTClient(_broker())

    message_event = asyncio.Event()

    async def handler(topic: str, payload: bytes) -> None:
        events["handled"] = (topic, payload)
        message_event.set()

    client.set_message_handler(handler)
    await client.connect()

    message = SimpleNamespace(topic="/aircon/action", payload=b'{"power": 1}')
    client._on_message(client._client, None, message)  # type: ignore[arg-type]

    await asyncio.wait_for(message_event.wait(), timeout=1.0)
    await client.disconnect()

    assert events["handled"] == ("/aircon/action", b'{"power": 1}')


@pytest.mark.asyncio
async def test_publish_failure_raises(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events, publish_rc=mqtt.MQTT_ERR_NO_CONN)

    client = MQTTClient(_broker())
    await client.connect()

    with pytest.raises(MQTTConnectionError):
        client.publish("/aircon/state", b"{}")

    await client.disconnect()


@pytest.mark.asyncio
async def test_publish_before_connect_raises():
    client = MQTTClient(_broker())

    with pytest.raises(RuntimeError):
        client.publish("/aircon/state", b"{}")


@pytest.mark.asyncio
async def test_connect_and_disconnect_handlers_invoked(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events, rc_disconnect=7)

    client = MQTTClient(_broker())

    connected = asyncio.Event()
    disconnected = asyncio.Event()

    def _on_connect(rc: int) -> None:
        events["connect_rc"] = rc
        connected.set()

    def _on_disconnect(rc: int) -> None:
        events["disconnect_rc"] = rc
        disconnected.set()

    client.register_connect_handler(_on_connect)
    client.register_disconnect_handler(_on_disconnect)

    await client.connect()
    await asyncio.wait_for(connected.wait(), timeout=1.0)
    await client.disconnect()
    await asyncio.wait_for(disconnected.wait(), timeout=1.0)

    assert events["connect_rc"] == 0
    assert events["disconnect_rc"] == 7
    assert not client.is_connected()


@pytest.mark.asyncio
async def test_connect_failure_raises(monkeypatch):
    events: dict = {}
    _install_fake(monkeypatch, events, rc_connect=5)

    client = MQTTClient(_broker())

    with pytest.raises(MQTTConnectionError):
        await client.connect()

    assert events["loop_stop"] == 1
