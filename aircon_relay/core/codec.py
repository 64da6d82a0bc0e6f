"""JSON codec for commands on the action and state topics."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .models import Command

# Wire member name -> Command attribute, in wire order.
WIRE_FIELDS = {
    "power": "power",
    "mode": "mode",
    "presetTemp": "preset_temp",
    "airVolume": "air_volume",
    "windDirection": "wind_direction",
}


class CommandDecodeError(ValueError):
    """Raised when an inbound payload cannot be turned into a command."""

    def __init__(self, message: str, *, code: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.field = field


def decode_command(raw_payload: bytes) -> Command:
    try:
        decoded = raw_payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CommandDecodeError(
            "Payload is not valid UTF-8", code="invalid_encoding"
        ) from exc

    try:
        data = json.loads(decoded, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise CommandDecodeError(
            "Payload is not valid JSON", code="invalid_json"
        ) from exc

    if not isinstance(data, dict):
        raise CommandDecodeError(
            "Command payload must be a JSON object", code="invalid_payload"
        )

    values: Dict[str, int] = {}
    extras: Dict[str, Any] = {}
    for key, value in data.items():
        attribute = WIRE_FIELDS.get(key)
        if attribute is None:
            extras[key] = value
            continue
        values[attribute] = _coerce_field(key, value)

    return Command(extras=extras, **values)


def encode_command(command: Command) -> bytes:
    document: Dict[str, Any] = {
        key: int(getattr(command, attribute)) for key, attribute in WIRE_FIELDS.items()
    }
    for key, value in command.extras.items():
        if key not in document:
            document[key] = value
    return json.dumps(document, ensure_ascii=False, allow_nan=False).encode("utf-8")


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by the json module but are not JSON
    raise CommandDecodeError(
        f"Payload contains non-standard constant {name}", code="invalid_json"
    )


def _coerce_field(key: str, value: Any) -> int:
    # bool is an int subclass but never a valid field value
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandDecodeError(
            f"{key} must be an integer, got {type(value).__name__}",
            code="invalid_field",
            field=key,
        )
    if value < 0:
        raise CommandDecodeError(
            f"{key} must not be negative", code="invalid_field", field=key
        )
    return value
