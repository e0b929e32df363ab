"""Local form validation and translation of store rejections into user messages."""

import re
from datetime import date

from sped_records.entities import ENTITIES, EntityConfig
from sped_records.errors import ConstraintKind, ConstraintViolation, StoreError, ValidationError
from sped_records.field_normalizer import FieldKind

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")

DUPLICATE_KEY_MESSAGE = "A record with this identifier already exists."
DUPLICATE_RECORD_MESSAGE = "A record with this information already exists."
INVALID_REFERENCE_MESSAGE = "Invalid reference to another record."


def is_valid_date(value: str | None) -> bool:
    """
    Check that a date string is empty or a real YYYY-MM-DD calendar date.

    The pattern check rejects strings a date parser would accept
    ("2023/02/10"); the calendar check rejects impossible dates that match
    the pattern ("2023-02-30").
    """
    if not value:
        return True
    if not DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_time(value: str | None) -> bool:
    """Check that a time string is empty or a wall-clock HH:MM[:SS]."""
    if not value:
        return True
    match = TIME_PATTERN.match(value)
    if not match:
        return False
    hours, minutes, seconds = match.groups()
    return int(hours) < 24 and int(minutes) < 60 and int(seconds or 0) < 60


def missing_required_fields(record: dict, required) -> list[str]:
    """Return required fields that are absent from a normalized record."""
    return [f for f in required if record.get(f) in (None, "", [])]


def find_field_errors(record: dict, config: EntityConfig) -> dict[str, str]:
    """Check formats, allowed choices and numeric ranges of a normalized record."""
    errors = {}
    for field, kind in config.field_types.items():
        value = record.get(field)
        if value is None:
            continue
        if kind == FieldKind.DATE and not is_valid_date(value):
            errors[field] = f"{field} must be a valid date (YYYY-MM-DD)"
        elif kind == FieldKind.TIME and not is_valid_time(value):
            errors[field] = f"{field} must be a valid time (HH:MM)"
        elif field in config.choices and value not in config.choices[field]:
            errors[field] = f"{field} must be one of: " + ", ".join(
                str(choice) for choice in config.choices[field]
            )
        elif field in config.non_negative and value < 0:
            errors[field] = f"{field} cannot be negative"
    return errors


def validate_record(record: dict, config: EntityConfig) -> None:
    """Raise ValidationError when a normalized record cannot be submitted."""
    missing = missing_required_fields(record, config.required)
    field_errors = find_field_errors(record, config)

    if not missing and not field_errors:
        return

    if missing:
        message = f"Please fill in all required fields: {', '.join(missing)}"
    else:
        message = "; ".join(field_errors.values())
    raise ValidationError(message, missing_fields=missing, field_errors=field_errors)


def translate_store_error(error: Exception, config: EntityConfig | None = None) -> str:
    """
    Turn a store failure into the message shown in the page banner.

    First match wins:
        - uniqueness on the business key   -> identifier message
        - uniqueness, generic              -> duplicate record message
        - foreign key naming a reference   -> "The referenced <label> does not exist."
        - foreign key, generic             -> invalid reference message
        - not-null                         -> "Required field is missing: <detail>."
        - anything else                    -> the raw error message
    """
    if isinstance(error, ConstraintViolation):
        detail = error.detail or ""
        configs = [config] if config else list(ENTITIES.values())

        if error.kind == ConstraintKind.UNIQUE:
            business_keys = [c.business_key for c in configs if c.business_key]
            if any(key in detail for key in business_keys):
                return DUPLICATE_KEY_MESSAGE
            return DUPLICATE_RECORD_MESSAGE

        if error.kind == ConstraintKind.FOREIGN_KEY:
            references = {}
            for c in configs:
                references.update(c.references)
            for field, label in references.items():
                if field in detail:
                    return f"The referenced {label} does not exist."
            return INVALID_REFERENCE_MESSAGE

        if error.kind == ConstraintKind.NOT_NULL:
            return f"Required field is missing: {detail.rstrip('.')}."

    if isinstance(error, (StoreError, ValidationError)):
        return str(error)
    return str(error) or "An unexpected error occurred"
