"""Domain models for air-conditioner commands and notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Sequence

# Alternating pulse/space durations in microseconds, starting with a pulse.
PulseSequence = Sequence[int]


class Power(IntEnum):
    OFF = 0
    ON = 1


class Mode(IntEnum):
    COOLER = 1
    HEATER = 2
    DEHUMIDIFIER = 3


class AirVolume(IntEnum):
    """Known fan speeds. Values 2..6 are numbered levels 1..5."""

    AUTO = 0
    STILL = 1
    POWERFUL = 7


class WindDirection(IntEnum):
    """Known louver positions. Any other value is a numbered step."""

    AUTO = 0


@dataclass(slots=True)
class Command:
    """A single air-conditioner command as carried on the bus.

    Enumerated fields hold plain integers so that values this relay does not
    know about survive a decode/encode cycle unchanged. ``extras`` keeps any
    JSON members outside the known set.
    """

    power: int = Power.OFF
    mode: int = 0
    preset_temp: int = 0
    air_volume: int = AirVolume.AUTO
    wind_direction: int = WindDirection.AUTO
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_on(self) -> bool:
        return self.power == Power.ON


@dataclass(slots=True)
class NotificationPayload:
    username: str = ""
    icon_emoji: str = ""
    text: str = ""

    def as_dict(self) -> Dict[str, str]:
        document: Dict[str, str] = {}
        if self.username:
            document["username"] = self.username
        if self.icon_emoji:
            document["icon_emoji"] = self.icon_emoji
        if self.text:
            document["text"] = self.text
        return document
