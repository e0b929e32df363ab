"""Form editors that turn user input into create and update payloads."""

import logging
from typing import Callable

from sped_records.entities import CLAIM, SERVICE, USER, EntityConfig
from sped_records.errors import ValidationError
from sped_records.field_normalizer import FieldKind, form_values, normalize_record, parse_int
from sped_records.validator import TIME_PATTERN, is_valid_time, validate_record

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def calculate_end_time(service_time: str | None, duration_minutes) -> str | None:
    """
    Add a duration to a wall-clock start time.

    Returns "HH:MM", or None when either input is missing or malformed.
    Times past midnight wrap around (23:30 + 60 -> 00:30).
    """
    if not service_time or not is_valid_time(service_time.strip()):
        return None
    minutes = parse_int(duration_minutes)
    if minutes is None or minutes < 0:
        return None

    hours, mins, _ = TIME_PATTERN.match(service_time.strip()).groups()
    total = (int(hours) * 60 + int(mins) + minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


class EntityEditor:
    """Holds the form state for one create or edit session."""

    def __init__(self, config: EntityConfig, entity: dict | None = None, options: dict | None = None):
        self.config = config
        self.entity = entity
        self.form = form_values(entity, config.field_types, config.defaults)
        self.options = options or {}
        self.submitting = False
        self.form_error: str | None = None
        self.field_errors: dict[str, str] = {}

    @property
    def is_edit(self) -> bool:
        return self.entity is not None

    @property
    def title(self) -> str:
        action = "Edit" if self.is_edit else "Create New"
        return f"{action} {self.config.label}"

    def set_field(self, name: str, value) -> None:
        """Set a form control value."""
        if name not in self.config.field_types:
            raise KeyError(f"{self.config.name} has no field {name!r}")
        self.form[name] = value

    def sections(self) -> list[tuple[str, list[str]]]:
        """Fields grouped by tab, in display order."""
        return [(title, list(fields)) for title, fields in self.config.sections]

    def build_payload(self) -> dict:
        """Normalize and validate the form. Raises ValidationError."""
        payload = normalize_record(self.form, self.config.field_types)
        entered = set(payload)
        self._adjust_payload(payload)
        dropped = entered - set(payload)
        validate_record(payload, self.config)

        if self.is_edit:
            # Emptied fields that had a stored value are sent as null;
            # fields dropped by _adjust_payload keep their stored value
            for field in self.config.optional_fields:
                if self.config.field_types[field] == FieldKind.BOOLEAN or field in dropped:
                    continue
                if field not in payload and self.entity.get(field) not in (None, "", []):
                    payload[field] = None
            payload["id"] = self.entity["id"]
        return payload

    def submit(self, save: Callable[[dict], object]):
        """
        Validate and hand the payload to save.

        Returns whatever save returns, or None if a submission is already in flight.
        """
        if self.submitting:
            logger.warning("Ignoring %s submit while another is in flight", self.config.name)
            return None

        self.form_error = None
        self.field_errors = {}
        try:
            payload = self.build_payload()
        except ValidationError as e:
            self.form_error = str(e)
            self.field_errors = dict(e.field_errors)
            for field in e.missing_fields:
                self.field_errors.setdefault(field, "This field is required")
            raise

        self.submitting = True
        try:
            return save(payload)
        finally:
            self.submitting = False

    def _adjust_payload(self, payload: dict) -> None:
        """Hook for entity-specific payload rules."""
        pass


class ServiceEditor(EntityEditor):
    """Service form; keeps end_time in step with start time and duration."""

    def set_field(self, name: str, value) -> None:
        super().set_field(name, value)
        if name in ("service_time", "duration_minutes"):
            self.recompute_end_time()

    def recompute_end_time(self) -> None:
        # Advisory only: the user may still overwrite end_time afterwards
        end_time = calculate_end_time(self.form.get("service_time"), self.form.get("duration_minutes"))
        if end_time:
            self.form["end_time"] = end_time

    def _adjust_payload(self, payload: dict) -> None:
        if not payload.get("is_group_service"):
            payload.pop("group_name", None)


class UserEditor(EntityEditor):
    """Staff form with an editable set of district labels."""

    def add_district(self, label: str) -> bool:
        label = (label or "").strip()
        districts = self.form["districts"]
        if not label or label in districts:
            return False
        self.form["districts"] = districts + [label]
        return True

    def remove_district(self, label: str) -> None:
        self.form["districts"] = [d for d in self.form["districts"] if d != label]


class ClaimEditor(EntityEditor):
    """Claim form; copies a point-in-time student snapshot into the claim."""

    def select_student(self, student: dict) -> None:
        self.form["student_ssid"] = student.get("ssid") or ""
        self.form["student_name"] = f"{student.get('first_name', '')} {student.get('last_name', '')}".strip()
        self.form["student_dob"] = student.get("birthdate") or ""
        if student.get("district"):
            self.form["district"] = student["district"]


EDITOR_CLASSES = {
    SERVICE.name: ServiceEditor,
    USER.name: UserEditor,
    CLAIM.name: ClaimEditor,
}


def open_editor(config: EntityConfig, entity: dict | None = None, options: dict | None = None) -> EntityEditor:
    """Open the right editor for a record type, blank or pre-populated from entity."""
    editor_class = EDITOR_CLASSES.get(config.name, EntityEditor)
    return editor_class(config, entity, options)
