"""Tests for the human-readable command summaries."""

import pytest

from aircon_relay.core import AirVolume, Command, Mode, Power, WindDirection
from aircon_relay.messages import OFF_MESSAGE, build_notification, build_summary


def test_cooler_auto_summary():
    command = Command(
        power=Power.ON,
        mode=Mode.COOLER,
        preset_temp=26,
        air_volume=AirVolume.AUTO,
        wind_direction=WindDirection.AUTO,
    )

    assert build_summary(command) == "冷房, 26℃\n風量: 自動, 風向: 自動"


def test_heater_with_level_and_louver_step():
    command = Command(
        power=Power.ON,
        mode=Mode.HEATER,
        preset_temp=20,
        air_volume=3,
        wind_direction=4,
    )

    assert build_summary(command) == "暖房, 20℃\n風量: 2, 風向: 4"


def test_dehumidifier_still_and_powerful_labels():
    still = Command(
        power=Power.ON, mode=Mode.DEHUMIDIFIER, preset_temp=24, air_volume=AirVolume.STILL
    )
    powerful = Command(
        power=Power.ON, mode=Mode.DEHUMIDIFIER, preset_temp=24, air_volume=AirVolume.POWERFUL
    )

    assert build_summary(still) == "除湿, 24℃\n風量: 静, 風向: 自動"
    assert build_summary(powerful) == "除湿, 24℃\n風量: パワフル, 風向: 自動"


def test_unknown_mode_falls_back_to_placeholder():
    command = Command(power=Power.ON, mode=0, preset_temp=25, air_volume=200)

    assert build_summary(command) == "???, 25℃\n風量: 199, 風向: 自動"


@pytest.mark.parametrize(
    "command",
    [
        Command(power=Power.OFF, mode=Mode.COOLER, preset_temp=26),
        Command(power=Power.OFF, mode=77, preset_temp=0, air_volume=9, wind_direction=9),
        Command(power=5, mode=Mode.HEATER, preset_temp=30),
    ],
)
def test_anything_but_power_on_is_off(command):
    assert build_summary(command) == OFF_MESSAGE == "オフ:sleeping:"


@pytest.mark.parametrize("mode", [0, 1, 2, 3, 4, 255])
@pytest.mark.parametrize("air_volume", [0, 1, 2, 6, 7, 8, 255])
@pytest.mark.parametrize("wind_direction", [0, 1, 5, 255])
def test_summary_is_total(mode, air_volume, wind_direction):
    command = Command(
        power=Power.ON,
        mode=mode,
        preset_temp=23,
        air_volume=air_volume,
        wind_direction=wind_direction,
    )

    summary = build_summary(command)

    assert summary
    assert "23℃" in summary


def test_build_notification_wraps_summary():
    payload = build_notification(
        Command(power=Power.OFF), username="エアコン", icon_emoji=":cyclone:"
    )

    assert payload.as_dict() == {
        "username": "エアコン",
        "icon_emoji": ":cyclone:",
        "text": OFF_MESSAGE,
    }
