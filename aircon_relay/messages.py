"""Human-readable summaries of applied commands."""

from __future__ import annotations

from .core.models import AirVolume, Command, Mode, NotificationPayload, WindDirection

OFF_MESSAGE = "オフ:sleeping:"
UNKNOWN_MODE_LABEL = "???"
AUTO_LABEL = "自動"

MODE_LABELS = {
    Mode.COOLER: "冷房",
    Mode.HEATER: "暖房",
    Mode.DEHUMIDIFIER: "除湿",
}

AIR_VOLUME_LABELS = {
    AirVolume.AUTO: AUTO_LABEL,
    AirVolume.STILL: "静",
    AirVolume.POWERFUL: "パワフル",
}


def build_summary(command: Command) -> str:
    """Describe ``command`` in one or two lines of Japanese.

    Never raises: values without a label fall back to ``???`` for the mode and
    to plain integers for the fan speed and louver position.
    """

    if not command.is_on:
        return OFF_MESSAGE

    mode = MODE_LABELS.get(command.mode, UNKNOWN_MODE_LABEL)

    air_volume = AIR_VOLUME_LABELS.get(command.air_volume)
    if air_volume is None:
        # levels are offset by one on the wire
        air_volume = str(int(command.air_volume) - 1)

    if command.wind_direction == WindDirection.AUTO:
        wind_direction = AUTO_LABEL
    else:
        wind_direction = str(int(command.wind_direction))

    return (
        f"{mode}, {int(command.preset_temp)}℃\n"
        f"風量: {air_volume}, 風向: {wind_direction}"
    )


def build_notification(
    command: Command, *, username: str, icon_emoji: str
) -> NotificationPayload:
    return NotificationPayload(
        username=username, icon_emoji=icon_emoji, text=build_summary(command)
    )
