"""Loading of the air-conditioner protocol encoder."""

from __future__ import annotations

import importlib
import inspect
import logging
from typing import Any, Callable

from ..core.models import Command, PulseSequence
from ..core.protocols import SignalEncoder

LOGGER = logging.getLogger(__name__)


class EncoderConfigurationError(RuntimeError):
    """Raised when the configured encoder reference cannot be resolved."""


class FunctionEncoder:
    """Adapts a plain ``command -> pulses`` callable to :class:`SignalEncoder`."""

    def __init__(self, func: Callable[[Command], PulseSequence]) -> None:
        self._func = func

    def encode(self, command: Command) -> PulseSequence:
        return self._func(command)

    def __repr__(self) -> str:
        return f"FunctionEncoder({getattr(self._func, '__qualname__', self._func)!r})"


def load_encoder(reference: str) -> SignalEncoder:
    """Resolve ``"package.module:attribute"`` into a signal encoder.

    The attribute may be an object with an ``encode`` method, a class that
    builds one without arguments, or a plain callable taking a command.
    """

    module_name, sep, attribute_path = reference.strip().partition(":")
    if not sep or not module_name or not attribute_path:
        raise EncoderConfigurationError(
            f"Encoder reference must look like 'package.module:attribute', got {reference!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise EncoderConfigurationError(
            f"Unable to import encoder module {module_name!r}: {exc}"
        ) from exc

    target: Any = module
    for part in attribute_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise EncoderConfigurationError(
                f"Encoder {attribute_path!r} not found in {module_name!r}"
            ) from exc

    if inspect.isclass(target):
        try:
            target = target()
        except Exception as exc:
            raise EncoderConfigurationError(
                f"Unable to instantiate encoder {reference!r}: {exc}"
            ) from exc

    if callable(getattr(target, "encode", None)):
        encoder = target
    elif callable(target):
        encoder = FunctionEncoder(target)
    else:
        raise EncoderConfigurationError(
            f"Encoder {reference!r} is neither callable nor has an encode() method"
        )

    LOGGER.info("Loaded signal encoder %s", reference)
    return encoder
