from .connection import get_connection, init_database
from .factory import get_record_store
from .rest_store import RestRecordStore
from .sqlite_store import SqliteRecordStore

__all__ = ["get_connection", "init_database", "get_record_store", "RestRecordStore", "SqliteRecordStore"]
