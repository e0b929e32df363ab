"""Build the configured record store."""

from sped_records import settings
from sped_records.errors import StoreError

from .connection import init_database
from .rest_store import RestRecordStore
from .sqlite_store import SqliteRecordStore


def get_record_store():
    """Return the record store selected by RECORD_STORE_BACKEND."""
    if settings.RECORD_STORE_BACKEND == "sqlite":
        init_database(settings.DB_PATH)
        return SqliteRecordStore(settings.DB_PATH)
    if settings.RECORD_STORE_BACKEND == "rest":
        return RestRecordStore(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY,
            timeout=settings.STORE_TIMEOUT_SECONDS,
        )
    raise StoreError(f"Unknown RECORD_STORE_BACKEND: {settings.RECORD_STORE_BACKEND}")
