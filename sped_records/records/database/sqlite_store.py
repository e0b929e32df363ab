"""SQLite-backed record store with generic CRUD by collection name."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from sped_records.entities import Join
from sped_records.errors import ConstraintKind, ConstraintViolation, NotFound, StoreError

from .connection import get_connection

logger = logging.getLogger(__name__)

# Collection name -> physical table
COLLECTION_TABLES = {
    "user": "app_user",
    "student": "student",
    "service": "service",
    "claim": "claim",
}


class SqliteRecordStore:
    """Record store over the local SQLite database."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path
        self._column_types: dict[str, dict[str, str]] = {}

    def list(
        self,
        collection: str,
        order_by: str | None = None,
        ascending: bool = True,
        filters: dict | None = None,
        joins: tuple[Join, ...] | list[Join] | None = None,
    ) -> list[dict]:
        """Select all rows of a collection matching equality filters, in order."""
        table = self._table(collection)
        conn = self._connect()
        try:
            columns = self._columns(conn, table)
            query = f"SELECT * FROM {table}"
            where, params = self._where_clause(table, columns, filters or {})
            if where:
                query += f" WHERE {where}"
            if order_by:
                self._check_columns(table, columns, [order_by])
                query += f" ORDER BY {order_by} {'ASC' if ascending else 'DESC'}, id ASC"

            logger.debug("list %s: %s %s", collection, query, params)
            rows = [self._decode(columns, row) for row in conn.execute(query, params).fetchall()]
            self._attach_joins(conn, rows, joins)
            return rows
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def insert(self, collection: str, payload: dict, joins=None) -> dict:
        """Insert one row and return it as stored, with its generated id and defaults."""
        table = self._table(collection)
        conn = self._connect()
        try:
            columns = self._columns(conn, table)
            self._check_columns(table, columns, payload)

            cursor = conn.cursor()
            if payload:
                names = ", ".join(payload)
                placeholders = ", ".join("?" for _ in payload)
                cursor.execute(
                    f"INSERT INTO {table} ({names}) VALUES ({placeholders})",
                    [self._encode(v) for v in payload.values()],
                )
            else:
                cursor.execute(f"INSERT INTO {table} DEFAULT VALUES")
            conn.commit()
            record_id = cursor.lastrowid
            logger.info("Inserted %s %s", collection, record_id)
            return self._fetch(conn, table, columns, record_id, joins)
        except sqlite3.IntegrityError as e:
            raise self._constraint_error(conn, table, payload, e) from e
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def update(self, collection: str, record_id: int, payload: dict, joins=None) -> dict:
        """Update the given fields of one row and return the row as stored."""
        table = self._table(collection)
        updates = {k: v for k, v in payload.items() if k != "id"}
        conn = self._connect()
        try:
            columns = self._columns(conn, table)
            self._check_columns(table, columns, updates)

            existing = conn.execute(f"SELECT id FROM {table} WHERE id = ?", (record_id,)).fetchone()
            if not existing:
                raise NotFound(collection, record_id)

            if updates:
                set_clause = ", ".join(f"{field} = ?" for field in updates)
                values = [self._encode(v) for v in updates.values()] + [record_id]
                conn.execute(f"UPDATE {table} SET {set_clause} WHERE id = ?", values)
                conn.commit()
                logger.info("Updated %s %s (%s)", collection, record_id, ", ".join(updates))
            return self._fetch(conn, table, columns, record_id, joins)
        except sqlite3.IntegrityError as e:
            raise self._constraint_error(conn, table, updates, e) from e
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def delete(self, collection: str, record_id: int) -> None:
        """Delete one row by id."""
        table = self._table(collection)
        conn = self._connect()
        try:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            if cursor.rowcount == 0:
                raise NotFound(collection, record_id)
            conn.commit()
            logger.info("Deleted %s %s", collection, record_id)
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY" in str(e):
                raise ConstraintViolation(
                    ConstraintKind.FOREIGN_KEY,
                    f"{e}: {table} {record_id} is still referenced by other records",
                ) from e
            raise StoreError(str(e)) from e
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    # Private helpers

    def _connect(self) -> sqlite3.Connection:
        return get_connection(self.db_path)

    def _table(self, collection: str) -> str:
        if collection not in COLLECTION_TABLES:
            raise StoreError(f"Unknown collection: {collection}")
        return COLLECTION_TABLES[collection]

    def _columns(self, conn: sqlite3.Connection, table: str) -> dict[str, str]:
        """Column name -> declared type, read once per table."""
        if table not in self._column_types:
            rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
            self._column_types[table] = {row["name"]: (row["type"] or "").upper() for row in rows}
        return self._column_types[table]

    def _check_columns(self, table: str, columns: dict, names) -> None:
        unknown = [name for name in names if name not in columns]
        if unknown:
            raise StoreError(f"Unknown column(s) for {table}: {', '.join(unknown)}")

    def _where_clause(self, table: str, columns: dict, filters: dict) -> tuple[str, list]:
        self._check_columns(table, columns, filters)
        clauses = []
        params = []
        for field, value in filters.items():
            if isinstance(value, (list, tuple, set)):
                if not value:
                    clauses.append("0")
                    continue
                clauses.append(f"{field} IN ({', '.join('?' for _ in value)})")
                params.extend(self._encode(v) for v in value)
            elif value is None:
                clauses.append(f"{field} IS NULL")
            else:
                clauses.append(f"{field} = ?")
                params.append(self._encode(value))
        return " AND ".join(clauses), params

    def _fetch(self, conn, table: str, columns: dict, record_id: int, joins=None) -> dict:
        row = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()
        record = self._decode(columns, row)
        self._attach_joins(conn, [record], joins)
        return record

    def _attach_joins(self, conn, records: list[dict], joins) -> None:
        """Embed referenced rows under each join's alias (None when unset or missing)."""
        for join in joins or ():
            ref_table = self._table(join.collection)
            ref_columns = self._columns(conn, ref_table)
            self._check_columns(ref_table, ref_columns, join.columns)

            ids = sorted({r[join.foreign_key] for r in records if r.get(join.foreign_key) is not None})
            found = {}
            if ids:
                placeholders = ", ".join("?" for _ in ids)
                rows = conn.execute(
                    f"SELECT {', '.join(join.columns)} FROM {ref_table} WHERE id IN ({placeholders})",
                    ids,
                ).fetchall()
                for row in rows:
                    nested = self._decode(ref_columns, row)
                    found[nested["id"]] = nested
            for record in records:
                record[join.alias] = found.get(record.get(join.foreign_key))

    def _decode(self, columns: dict, row) -> dict:
        record = dict(row)
        for field, value in record.items():
            if value is None:
                continue
            declared = columns.get(field, "")
            if declared == "BOOLEAN":
                record[field] = bool(value)
            elif declared == "JSON":
                record[field] = json.loads(value)
        return record

    def _encode(self, value):
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (list, dict)):
            return json.dumps(value)
        return value

    def _constraint_error(self, conn, table: str, payload: dict, error: sqlite3.IntegrityError) -> StoreError:
        """Classify an IntegrityError by its message."""
        message = str(error)
        if message.startswith("UNIQUE constraint failed"):
            return ConstraintViolation(ConstraintKind.UNIQUE, message)
        if message.startswith("NOT NULL constraint failed"):
            return ConstraintViolation(ConstraintKind.NOT_NULL, message)
        if message.startswith("FOREIGN KEY constraint failed"):
            column = self._dangling_reference(conn, table, payload)
            detail = f"{message}: {table}.{column}" if column else message
            return ConstraintViolation(ConstraintKind.FOREIGN_KEY, detail)
        return StoreError(message)

    def _dangling_reference(self, conn, table: str, payload: dict) -> str | None:
        """Find the payload column whose referenced row does not exist."""
        try:
            for fk in conn.execute(f"PRAGMA foreign_key_list({table})").fetchall():
                column = fk["from"]
                value = payload.get(column)
                if value is None:
                    continue
                target = fk["to"] or "id"
                row = conn.execute(
                    f"SELECT 1 FROM {fk['table']} WHERE {target} = ?", (value,)
                ).fetchone()
                if row is None:
                    return column
        except sqlite3.Error:
            logger.warning("Could not inspect foreign keys of %s", table, exc_info=True)
        return None
