"""Tests for loading the signal encoder from configuration."""

import sys
import types

import pytest

from aircon_relay.adapters import EncoderConfigurationError, FunctionEncoder, load_encoder
from aircon_relay.core import Command, Power


class _TableEncoder:
    def encode(self, command: Command) -> list[int]:
        return [3500, 1750, 440 + command.preset_temp]


@pytest.fixture
def encoder_module(monkeypatch):
    module = types.ModuleType("fake_aircon_protocol")
    module.TableEncoder = _TableEncoder
    module.instance = _TableEncoder()
    module.encode = lambda command: [9000, 4500, 560]
    module.nested = types.SimpleNamespace(encoder=_TableEncoder())
    module.not_an_encoder = 42
    monkeypatch.setitem(sys.modules, "fake_aircon_protocol", module)
    return module


def test_class_reference_is_instantiated(encoder_module):
    encoder = load_encoder("fake_aircon_protocol:TableEncoder")

    assert isinstance(encoder, _TableEncoder)
    assert encoder.encode(Command(power=Power.ON, preset_temp=26)) == [3500, 1750, 466]


def test_instance_reference_is_used_as_is(encoder_module):
    assert load_encoder("fake_aircon_protocol:instance") is encoder_module.instance


def test_dotted_attribute_path(encoder_module):
    assert load_encoder("fake_aircon_protocol:nested.encoder") is encoder_module.nested.encoder


def test_plain_function_is_wrapped(encoder_module):
    encoder = load_encoder("fake_aircon_protocol:encode")

    assert isinstance(encoder, FunctionEncoder)
    assert encoder.encode(Command()) == [9000, 4500, 560]


@pytest.mark.parametrize(
    "reference",
    [
        "fake_aircon_protocol",
        ":encode",
        "fake_aircon_protocol:",
        "fake_aircon_protocol:missing",
        "fake_aircon_protocol:not_an_encoder",
        "no_such_module_for_aircon:encode",
    ],
)
def test_bad_references_raise(encoder_module, reference):
    with pytest.raises(EncoderConfigurationError):
        load_encoder(reference)
