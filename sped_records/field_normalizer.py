"""Convert raw form input into storage-ready values using a field-type table."""

import math
import re
from enum import Enum


class FieldKind(Enum):
    """How a form field is parsed before it is sent to the store."""
    TEXT = "text"
    INT = "int"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    LABELS = "labels"


INT_PATTERN = re.compile(r"^[+-]?\d+$")
DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
TRUTHY_STRINGS = {"true", "on", "yes", "1"}

# Sentinel for "leave this field out of the payload"
_ABSENT = object()


def parse_int(value) -> int | None:
    """Parse an integer form value. Returns None when empty or unparsable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not INT_PATTERN.match(text):
        return None
    return int(text)


def parse_decimal(value) -> float | None:
    """Parse a decimal form value. Returns None when empty, unparsable or not finite."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not DECIMAL_PATTERN.match(text):
            return None
        number = float(text)
    return number if math.isfinite(number) else None


def parse_boolean(value) -> bool:
    """Coerce a checkbox value to a strict bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUTHY_STRINGS


def parse_labels(value) -> list[str]:
    """Trim labels, drop blanks and suppress duplicates keeping the first one."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    labels = []
    for item in value:
        label = str(item).strip() if item is not None else ""
        if label and label not in labels:
            labels.append(label)
    return labels


def normalize_value(kind: FieldKind, value):
    """Normalize a single value. Returns the _ABSENT sentinel for omitted fields."""
    if kind == FieldKind.BOOLEAN:
        return parse_boolean(value)

    if kind == FieldKind.INT:
        parsed = parse_int(value)
        return _ABSENT if parsed is None else parsed

    if kind == FieldKind.DECIMAL:
        parsed = parse_decimal(value)
        return _ABSENT if parsed is None else parsed

    if kind == FieldKind.LABELS:
        labels = parse_labels(value)
        return labels if labels else _ABSENT

    # TEXT, DATE and TIME are all trimmed strings
    if value is None:
        return _ABSENT
    text = str(value).strip()
    return text if text else _ABSENT


def normalize_record(raw: dict, field_types: dict[str, FieldKind]) -> dict:
    """
    Normalize a raw form record.

    Only fields named in field_types are carried over. Boolean fields are
    always present; every other kind is omitted when empty or unparsable.
    """
    normalized = {}
    for field, kind in field_types.items():
        value = normalize_value(kind, raw.get(field))
        if value is not _ABSENT:
            normalized[field] = value
    return normalized


def empty_value(kind: FieldKind):
    """The form value shown for an absent field of this kind."""
    if kind == FieldKind.BOOLEAN:
        return False
    if kind == FieldKind.LABELS:
        return []
    return ""


def to_form_value(kind: FieldKind, value):
    """Render a stored value back into the shape a form control holds."""
    if value is None:
        return empty_value(kind)
    if kind == FieldKind.BOOLEAN:
        return bool(value)
    if kind == FieldKind.LABELS:
        return list(value)
    return str(value)


def form_values(
    entity: dict | None,
    field_types: dict[str, FieldKind],
    defaults: dict | None = None,
) -> dict:
    """Build the pre-populated form for an entity, or a blank form when entity is None."""
    defaults = defaults or {}
    form = {}
    for field, kind in field_types.items():
        if entity is None:
            form[field] = defaults.get(field, empty_value(kind))
        else:
            form[field] = to_form_value(kind, entity.get(field))
    return form
