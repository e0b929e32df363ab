"""Tests for the management page state machine."""

from unittest.mock import MagicMock

import pytest

from sped_records.entities import CLAIM, SERVICE, STUDENT, USER
from sped_records.errors import NotFound, StoreError
from sped_records.page_controller import STALE_RECORD_MESSAGE, PageController, PageState
from sped_records.validator import DUPLICATE_KEY_MESSAGE


def fill(editor, **values):
    for field, value in values.items():
        editor.set_field(field, value)


@pytest.fixture
def confirmations():
    """Messages shown to the confirm callback; answers yes."""
    messages = []

    def confirm(message):
        messages.append(message)
        return True

    confirm.messages = messages
    return confirm


@pytest.fixture
def student_page(store, student, confirmations):
    page = PageController(STUDENT, store, confirm=confirmations)
    page.mount()
    return page


class TestMount:
    """Test loading a page."""

    def test_starts_loading(self, store):
        page = PageController(STUDENT, store)
        assert page.state == PageState.LOADING

    def test_mount_loads_records(self, student_page, student):
        assert student_page.state == PageState.READY
        assert [s["id"] for s in student_page.records] == [student["id"]]
        assert student_page.error is None

    def test_services_newest_first_with_joins(self, store, student, practitioner, service):
        store.insert("service", {
            "student_id": student["id"],
            "practitioner_id": practitioner["id"],
            "service_date": "2026-10-05",
        })
        page = PageController(SERVICE, store)
        page.mount()
        assert [s["service_date"] for s in page.records] == ["2026-10-05", "2026-10-01"]
        assert page.records[0]["student"]["first_name"] == "Ava"

    def test_load_failure_shows_banner(self):
        store = MagicMock()
        store.list.side_effect = StoreError("Permission denied: RLS")
        page = PageController(CLAIM, store)
        page.mount()
        assert page.state == PageState.READY
        assert page.records == []
        assert page.error == "Permission denied: RLS"

    def test_refresh_after_unmount_ignored(self, student_page):
        student_page.records = []
        student_page.unmount()
        student_page.refresh()
        assert student_page.records == []


class TestCreate:
    """Test submitting a create form."""

    def test_create_appends_stored_record(self, student_page):
        editor = student_page.open_create()
        fill(editor, ssid="SSID-2", first_name="Noah", last_name="Garcia", birthdate="2019-11-03", district="Pine")

        assert student_page.submit() is True

        created = student_page.records[-1]
        assert created["ssid"] == "SSID-2"
        assert created["last_modified_at"] is not None
        assert student_page.editor is None
        assert student_page.state == PageState.READY

    def test_local_collection_uses_store_response(self):
        store = MagicMock()
        store.list.return_value = []
        store.insert.return_value = {"id": 42, "claim_number": "C-1", "status": "Pending"}
        page = PageController(CLAIM, store)
        page.mount()

        fill(page.open_create(), claim_number="C-1")
        assert page.submit() is True

        assert page.records == [{"id": 42, "claim_number": "C-1", "status": "Pending"}]
        collection, payload = store.insert.call_args.args
        assert collection == "claim"
        assert payload["status"] == "Incomplete"

    def test_validation_failure_never_reaches_store(self):
        store = MagicMock()
        store.list.return_value = []
        page = PageController(STUDENT, store)
        page.mount()
        editor = page.open_create()
        fill(editor, first_name="Ava")

        assert page.submit() is False

        store.insert.assert_not_called()
        assert editor.form_error.startswith("Please fill in all required fields")
        assert page.error is None
        assert page.editor is editor
        assert page.state == PageState.READY

    def test_duplicate_shows_banner_and_keeps_form(self, student_page, student):
        editor = student_page.open_create()
        fill(editor, ssid=student["ssid"], first_name="Other", last_name="Kid", birthdate="2016-01-01", district="Pine")

        assert student_page.submit() is False

        assert student_page.error == DUPLICATE_KEY_MESSAGE
        assert student_page.editor is editor
        assert editor.form["first_name"] == "Other"
        assert len(student_page.records) == 1

    def test_dismiss_error(self, student_page):
        student_page.error = "boom"
        student_page.dismiss_error()
        assert student_page.error is None

    def test_submit_after_unmount_ignored(self, store):
        page = PageController(CLAIM, store)
        page.mount()
        fill(page.open_create(), claim_number="C-1")
        real_insert = store.insert

        def insert_then_leave(*args, **kwargs):
            page.unmount()
            return real_insert(*args, **kwargs)

        page.store = MagicMock(wraps=store)
        page.store.insert.side_effect = insert_then_leave
        assert page.submit() is False
        assert page.records == []


class TestEdit:

    def test_update_replaces_record(self, student_page, student):
        editor = student_page.open_edit(student["id"])
        fill(editor, school="Pine Elementary")

        assert student_page.submit() is True

        assert len(student_page.records) == 1
        assert student_page.records[0]["school"] == "Pine Elementary"

    def test_open_missing_record(self, student_page):
        assert student_page.open_edit(999) is None
        assert student_page.error == STALE_RECORD_MESSAGE

    def test_record_deleted_behind_our_back(self, student_page, store, student, service):
        editor = student_page.open_edit(student["id"])
        fill(editor, school="Pine Elementary")
        store.delete("service", service["id"])
        store.delete("student", student["id"])

        assert student_page.submit() is False
        assert student_page.error == STALE_RECORD_MESSAGE

    def test_submit_ignored_while_submitting(self, student_page, student):
        student_page.open_edit(student["id"])
        student_page.state = PageState.SUBMITTING
        assert student_page.submit() is False


class TestOptions:
    """Reference pick-lists loaded with the form."""

    def test_practitioner_options_filtered(self, store, practitioner, supervisor):
        store.insert("user", {"first_name": "Tom", "last_name": "Becker", "email": "tom@example.org", "role": "Admin"})
        store.insert("user", {
            "first_name": "Old", "last_name": "Timer", "email": "old@example.org",
            "role": "Practitioner", "status": "Inactive",
        })
        page = PageController(STUDENT, store)
        page.mount()

        options = page.open_create().options["practitioner_id"]

        assert [o["last_name"] for o in options] == ["Alvarez", "Kim"]
        assert set(options[0]) == {"id", "first_name", "last_name", "role"}

    def test_option_failure_leaves_list_empty(self):
        store = MagicMock()
        store.list.side_effect = [[], StoreError("boom"), []]
        page = PageController(SERVICE, store)
        page.mount()

        editor = page.open_create()

        assert editor.options == {"student_id": [], "practitioner_id": []}
        assert page.error is None


class TestDelete:
    """Deletes need confirmation and are idempotent."""

    def test_delete_after_confirm(self, student_page, store, student, confirmations):
        assert student_page.delete(student["id"]) is True
        assert student_page.records == []
        assert store.list("student") == []
        assert confirmations.messages == [
            "Are you sure you want to delete this student? This action cannot be undone."
        ]

    def test_declined_confirm(self, student):
        store = MagicMock()
        store.list.return_value = [student]
        page = PageController(STUDENT, store, confirm=lambda message: False)
        page.mount()

        assert page.delete(student["id"]) is False
        store.delete.assert_not_called()
        assert len(page.records) == 1

    def test_unconfirmed_by_default(self, store, student):
        page = PageController(STUDENT, store)
        page.mount()
        assert page.delete(student["id"]) is False
        assert len(store.list("student")) == 1

    def test_unknown_id_is_noop(self, student_page, confirmations):
        assert student_page.delete(999) is False
        assert confirmations.messages == []
        assert student_page.error is None
        assert len(student_page.records) == 1

    def test_already_deleted_in_store(self, student_page, store, student):
        store.delete("student", student["id"])
        assert student_page.delete(student["id"]) is True
        assert student_page.records == []
        assert student_page.error is None

    def test_referenced_record_shows_banner(self, student_page, student, service):
        assert student_page.delete(student["id"]) is False
        assert student_page.error == "Invalid reference to another record."
        assert len(student_page.records) == 1
        assert student_page.state == PageState.READY

    def test_user_label_in_prompt(self, store, practitioner, confirmations):
        page = PageController(USER, store, confirm=confirmations)
        page.mount()
        page.delete(practitioner["id"])
        assert "delete this user?" in confirmations.messages[0]
