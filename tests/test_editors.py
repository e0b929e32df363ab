"""Tests for the entity editors."""

import pytest

from sped_records.editors import (
    ClaimEditor,
    EntityEditor,
    ServiceEditor,
    UserEditor,
    calculate_end_time,
    open_editor,
)
from sped_records.entities import CLAIM, ENTITIES, SERVICE, STUDENT, USER
from sped_records.errors import ValidationError


def expected_update(config, entity):
    """The payload an unchanged edit form should produce."""
    payload = {
        field: value
        for field, value in entity.items()
        if value is not None and field not in config.server_fields
    }
    payload["id"] = entity["id"]
    return payload


class TestCalculateEndTime:

    def test_adds_minutes(self):
        assert calculate_end_time("09:00", 30) == "09:30"

    def test_rolls_into_next_hour(self):
        assert calculate_end_time("09:00", 90) == "10:30"

    def test_wraps_past_midnight(self):
        assert calculate_end_time("23:30", 60) == "00:30"

    def test_duration_as_string(self):
        assert calculate_end_time("13:30", "45") == "14:15"

    @pytest.mark.parametrize("start,duration", [("", 30), ("09:00", ""), ("9am", 30), ("09:00", "abc"), (None, None)])
    def test_missing_or_malformed(self, start, duration):
        assert calculate_end_time(start, duration) is None


class TestOpenEditor:

    def test_picks_editor_class(self):
        assert type(open_editor(SERVICE)) is ServiceEditor
        assert type(open_editor(USER)) is UserEditor
        assert type(open_editor(CLAIM)) is ClaimEditor
        assert type(open_editor(STUDENT)) is EntityEditor

    def test_titles(self, student):
        assert open_editor(STUDENT).title == "Create New Student"
        assert open_editor(STUDENT, student).title == "Edit Student"

    def test_create_form_uses_defaults(self):
        editor = open_editor(USER)
        assert editor.form["status"] == "Active"
        assert editor.form["role"] == "Practitioner"
        assert editor.form["districts"] == []

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError):
            open_editor(STUDENT).set_field("favorite_color", "blue")


class TestPrefill:
    """Edit forms start from the stored record."""

    def test_stored_values_shown(self, student):
        editor = open_editor(STUDENT, student)
        assert editor.form["first_name"] == "Ava"
        assert editor.form["grade"] == "4"
        assert editor.form["medi_cal_eligible"] is True

    def test_absent_values_are_empty_controls(self, student):
        editor = open_editor(STUDENT, student)
        assert editor.form["preferred_name"] == ""
        assert editor.form["next_review_date"] == ""


class TestRoundTrip:
    """Submitting an unchanged edit form sends back exactly what was stored."""

    def test_student(self, student):
        assert open_editor(STUDENT, student).build_payload() == expected_update(STUDENT, student)

    def test_user(self, practitioner):
        assert open_editor(USER, practitioner).build_payload() == expected_update(USER, practitioner)

    def test_service(self, store, service):
        stored = store.list("service", joins=SERVICE.joins)[0]
        assert open_editor(SERVICE, stored).build_payload() == expected_update(SERVICE, stored)

    def test_claim(self, claim):
        assert open_editor(CLAIM, claim).build_payload() == expected_update(CLAIM, claim)

    @pytest.mark.parametrize("name", sorted(ENTITIES))
    def test_no_server_fields_in_payload(self, name, store, practitioner, student, service, claim):
        config = ENTITIES[name]
        entity = store.list(config.collection, joins=config.joins)[0]
        payload = open_editor(config, entity).build_payload()
        assert not (set(payload) - {"id"}) & set(config.server_fields)


class TestBuildPayload:

    def test_create_has_no_id(self):
        editor = open_editor(CLAIM)
        editor.set_field("claim_number", " CLM-1 ")
        payload = editor.build_payload()
        assert "id" not in payload
        assert payload["claim_number"] == "CLM-1"
        assert payload["status"] == "Incomplete"

    def test_cleared_field_sent_as_null_on_update(self, student):
        editor = open_editor(STUDENT, student)
        editor.set_field("school", "")
        payload = editor.build_payload()
        assert payload["school"] is None

    def test_never_set_field_not_sent_on_update(self, student):
        payload = open_editor(STUDENT, student).build_payload()
        assert "preferred_name" not in payload

    def test_cleared_field_omitted_on_create(self):
        editor = open_editor(CLAIM)
        editor.set_field("claim_number", "CLM-1")
        editor.set_field("batch_number", "")
        assert "batch_number" not in editor.build_payload()

    def test_invalid_form_raises(self):
        editor = open_editor(STUDENT)
        with pytest.raises(ValidationError):
            editor.build_payload()


class TestSubmit:
    """Test submit and its in-flight guard."""

    def test_validation_error_kept_on_editor(self):
        editor = open_editor(STUDENT)
        editor.set_field("first_name", "Ava")
        save_calls = []
        with pytest.raises(ValidationError):
            editor.submit(save_calls.append)
        assert save_calls == []
        assert editor.form_error.startswith("Please fill in all required fields")
        assert editor.field_errors["ssid"] == "This field is required"
        assert editor.form["first_name"] == "Ava"

    def test_returns_save_result(self):
        editor = open_editor(CLAIM)
        editor.set_field("claim_number", "CLM-1")
        assert editor.submit(lambda payload: {"id": 9, **payload})["id"] == 9
        assert editor.submitting is False

    def test_second_submit_while_in_flight_ignored(self):
        editor = open_editor(CLAIM)
        editor.set_field("claim_number", "CLM-1")
        nested = []

        def save(payload):
            nested.append(editor.submit(lambda p: {"id": 2}))
            return {"id": 1}

        assert editor.submit(save) == {"id": 1}
        assert nested == [None]

    def test_submitting_cleared_after_failure(self):
        editor = open_editor(CLAIM)
        editor.set_field("claim_number", "CLM-1")

        def save(payload):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            editor.submit(save)
        assert editor.submitting is False


class TestServiceEditor:
    """End time follows start time and duration."""

    def test_end_time_recomputed(self):
        editor = open_editor(SERVICE)
        editor.set_field("service_time", "09:00")
        editor.set_field("duration_minutes", "30")
        assert editor.form["end_time"] == "09:30"
        editor.set_field("duration_minutes", "90")
        assert editor.form["end_time"] == "10:30"

    def test_end_time_can_be_overridden(self):
        editor = open_editor(SERVICE)
        editor.set_field("service_time", "09:00")
        editor.set_field("duration_minutes", "30")
        editor.set_field("end_time", "09:45")
        assert editor.form["end_time"] == "09:45"

    def test_incomplete_inputs_leave_end_time(self):
        editor = open_editor(SERVICE)
        editor.set_field("end_time", "11:00")
        editor.set_field("service_time", "09:00")
        assert editor.form["end_time"] == "11:00"

    def test_group_name_dropped_when_not_group(self):
        editor = open_editor(SERVICE)
        for field, value in {
            "student_id": "1",
            "practitioner_id": "2",
            "service_date": "2026-10-01",
            "group_name": "Fine Motor Group",
        }.items():
            editor.set_field(field, value)
        assert "group_name" not in editor.build_payload()

        editor.set_field("is_group_service", True)
        assert editor.build_payload()["group_name"] == "Fine Motor Group"


class TestUserEditor:

    def test_add_district(self):
        editor = open_editor(USER)
        assert editor.add_district(" Oakridge Unified ")
        assert editor.form["districts"] == ["Oakridge Unified"]

    def test_duplicate_and_blank_rejected(self):
        editor = open_editor(USER)
        editor.add_district("Oakridge Unified")
        assert not editor.add_district("Oakridge Unified")
        assert not editor.add_district("   ")
        assert editor.form["districts"] == ["Oakridge Unified"]

    def test_remove_district(self, practitioner):
        editor = open_editor(USER, practitioner)
        editor.remove_district("Oakridge Unified")
        assert editor.form["districts"] == []
        assert editor.build_payload()["districts"] is None


class TestClaimEditor:

    def test_select_student_copies_snapshot(self, student):
        editor = open_editor(CLAIM)
        editor.select_student(student)
        assert editor.form["student_ssid"] == "SSID-100001"
        assert editor.form["student_name"] == "Ava Thompson"
        assert editor.form["student_dob"] == "2015-04-12"
        assert editor.form["district"] == "Oakridge Unified"


class TestStoredGroupName:
    """A stored group name on a non-group service survives an unchanged edit."""

    @pytest.fixture
    def stale_group_service(self, store, student, practitioner):
        store.insert("service", {
            "student_id": student["id"],
            "practitioner_id": practitioner["id"],
            "service_date": "2026-10-03",
            "is_group_service": False,
            "group_name": "Fine Motor Group",
        })
        return store.list("service", joins=SERVICE.joins)[0]

    def test_unchanged_edit_keeps_group_name(self, stale_group_service):
        payload = open_editor(SERVICE, stale_group_service).build_payload()
        assert "group_name" not in payload

    def test_cleared_group_name_is_nulled(self, stale_group_service):
        editor = open_editor(SERVICE, stale_group_service)
        editor.set_field("group_name", "")
        assert editor.build_payload()["group_name"] is None
