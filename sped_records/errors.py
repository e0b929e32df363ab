"""Error types shared by the record store, validator and page controllers."""

from enum import Enum


class ConstraintKind(Enum):
    """Constraint families a record store can reject a write with."""
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    NOT_NULL = "not_null"


class ValidationError(Exception):
    """Raised when a form fails local validation. Never reaches the store."""

    def __init__(
        self,
        message: str,
        missing_fields: list[str] | None = None,
        field_errors: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.missing_fields = missing_fields or []
        self.field_errors = field_errors or {}


class StoreError(Exception):
    """Raised on transport, permission or unexpected record store failures."""
    pass


class ConstraintViolation(StoreError):
    """Raised when the store rejects a write on a table constraint."""

    def __init__(self, kind: ConstraintKind, detail: str):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail


class NotFound(StoreError):
    """Raised when an update or delete targets an id the store does not have."""

    def __init__(self, collection: str, record_id: int):
        super().__init__(f"No {collection} record with id {record_id}")
        self.collection = collection
        self.record_id = record_id
