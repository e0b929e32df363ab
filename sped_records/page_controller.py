"""Page state machine: load a collection, edit it through a form, keep it in sync with the store."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from sped_records.editors import EntityEditor, open_editor
from sped_records.entities import EntityConfig
from sped_records.errors import NotFound, StoreError, ValidationError
from sped_records.validator import translate_store_error

logger = logging.getLogger(__name__)

STALE_RECORD_MESSAGE = "This record no longer exists. Refresh the list and try again."


class PageState(Enum):
    """States of a management page."""
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"


def _deny(message: str) -> bool:
    return False


@dataclass
class PageController:
    """
    One management page (users, students, services or claims).

    The local collection is only ever updated from what the store returns,
    never from the submitted payload. Errors from the store go to the
    dismissable `error` banner; local validation errors stay on the editor.
    """
    config: EntityConfig
    store: object
    confirm: Callable[[str], bool] = _deny

    state: PageState = PageState.LOADING
    records: list = field(default_factory=list)
    error: str | None = None
    editor: EntityEditor | None = None
    mounted: bool = False

    # Lifecycle

    def mount(self) -> None:
        """Show the page and load its collection."""
        self.mounted = True
        self.state = PageState.LOADING
        self.refresh()

    def unmount(self) -> None:
        """Tear the page down; results that arrive afterwards are ignored."""
        self.mounted = False
        self.editor = None

    def refresh(self) -> None:
        try:
            records = self.store.list(
                self.config.collection,
                order_by=self.config.order_by,
                ascending=self.config.ascending,
                joins=self.config.joins,
            )
        except StoreError as e:
            logger.error("Error fetching %s records: %s", self.config.name, e)
            if self.mounted:
                self.error = translate_store_error(e, self.config)
                self.state = PageState.READY
            return

        if not self.mounted:
            return
        self.records = list(records)
        self.state = PageState.READY

    # Form

    def open_create(self) -> EntityEditor:
        self.editor = open_editor(self.config, None, self.load_options())
        return self.editor

    def open_edit(self, record_id: int) -> EntityEditor | None:
        entity = self.find(record_id)
        if entity is None:
            self.error = STALE_RECORD_MESSAGE
            return None
        self.editor = open_editor(self.config, entity, self.load_options())
        return self.editor

    def close_form(self) -> None:
        self.editor = None

    def load_options(self) -> dict:
        """Load reference pick-lists. They are optional, so failures only get logged."""
        options = {}
        for key, lookup in self.config.lookups.items():
            try:
                rows = self.store.list(lookup.collection, order_by=lookup.order_by, filters=lookup.filters)
            except StoreError as e:
                logger.error("Error loading %s options for %s: %s", lookup.collection, self.config.name, e)
                options[key] = []
                continue
            options[key] = [{column: row.get(column) for column in lookup.columns} for row in rows]
        return options

    def submit(self) -> bool:
        """Submit the open form. Returns True when the store accepted the record."""
        if self.editor is None or self.state == PageState.SUBMITTING:
            return False

        editor = self.editor
        self.state = PageState.SUBMITTING
        try:
            saved = editor.submit(self._save)
        except ValidationError:
            # Shown inline on the form; the store was never called
            return False
        except NotFound as e:
            logger.warning("Stale %s record: %s", self.config.name, e)
            if self.mounted:
                self.error = STALE_RECORD_MESSAGE
            return False
        except StoreError as e:
            logger.error("Error saving %s: %s", self.config.name, e)
            if self.mounted:
                self.error = translate_store_error(e, self.config)
            return False
        finally:
            self.state = PageState.READY

        if saved is None or not self.mounted:
            return False

        self._apply(saved)
        self.editor = None
        self.error = None
        return True

    # Deletion

    def delete(self, record_id: int) -> bool:
        """
        Delete a record after explicit confirmation.

        Deleting an id that is not in the local collection is a no-op, and a
        NotFound from the store counts as already deleted.
        """
        if self.find(record_id) is None:
            logger.info("%s %s is not in the local collection; nothing to delete", self.config.name, record_id)
            return False

        label = self.config.label.lower()
        if not self.confirm(f"Are you sure you want to delete this {label}? This action cannot be undone."):
            return False

        self.state = PageState.SUBMITTING
        try:
            self.store.delete(self.config.collection, record_id)
        except NotFound:
            logger.warning("%s %s was already deleted", self.config.name, record_id)
        except StoreError as e:
            logger.error("Error deleting %s %s: %s", self.config.name, record_id, e)
            if self.mounted:
                self.error = translate_store_error(e, self.config)
            return False
        finally:
            self.state = PageState.READY

        if not self.mounted:
            return False
        self.records = [r for r in self.records if r["id"] != record_id]
        self.error = None
        return True

    def dismiss_error(self) -> None:
        self.error = None

    def find(self, record_id: int) -> dict | None:
        for record in self.records:
            if record["id"] == record_id:
                return record
        return None

    # Private helpers

    def _save(self, payload: dict) -> dict:
        payload = dict(payload)
        record_id = payload.pop("id", None)
        if record_id is None:
            return self.store.insert(self.config.collection, payload, joins=self.config.joins)
        return self.store.update(self.config.collection, record_id, payload, joins=self.config.joins)

    def _apply(self, saved: dict) -> None:
        for i, record in enumerate(self.records):
            if record["id"] == saved["id"]:
                self.records[i] = saved
                logger.info("Updated %s %s", self.config.name, saved["id"])
                return
        self.records.append(saved)
        logger.info("Created %s %s", self.config.name, saved["id"])
