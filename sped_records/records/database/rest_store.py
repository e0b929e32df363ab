"""Record store backed by a hosted PostgREST API (the portal's hosted backend)."""

from __future__ import annotations

import logging

import requests
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from sped_records.errors import ConstraintKind, ConstraintViolation, NotFound, StoreError

from .sqlite_store import COLLECTION_TABLES

logger = logging.getLogger(__name__)

# Postgres SQLSTATE codes for constraint violations
CONSTRAINT_CODES = {
    "23505": ConstraintKind.UNIQUE,
    "23503": ConstraintKind.FOREIGN_KEY,
    "23502": ConstraintKind.NOT_NULL,
}


class PostgrestError(BaseModel):
    """Error body returned by the REST backend."""

    code: str | None = Field(None, description="Postgres SQLSTATE or PGRST error code")
    message: str = Field("", description="Human-readable error message")
    details: str | None = Field(None, description="Extra detail, e.g. the offending key")
    hint: str | None = None


class RestRecordStore:
    """Record store talking to a PostgREST endpoint over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        if not base_url or not api_key:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY must be set for the REST record store")
        self.base_url = base_url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def list(self, collection: str, order_by=None, ascending=True, filters=None, joins=None) -> list[dict]:
        params = {"select": self._select(joins)}
        if order_by:
            params["order"] = f"{order_by}.{'asc' if ascending else 'desc'}"
        params.update(self._filter_params(filters or {}))
        return self._request("GET", collection, params=params)

    def insert(self, collection: str, payload: dict, joins=None) -> dict:
        rows = self._request(
            "POST",
            collection,
            params={"select": self._select(joins)},
            json=[payload],
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise StoreError(f"Insert into {collection} returned no rows")
        return rows[0]

    def update(self, collection: str, record_id: int, payload: dict, joins=None) -> dict:
        updates = {k: v for k, v in payload.items() if k != "id"}
        rows = self._request(
            "PATCH",
            collection,
            params={"select": self._select(joins), "id": f"eq.{record_id}"},
            json=updates,
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise NotFound(collection, record_id)
        return rows[0]

    def delete(self, collection: str, record_id: int) -> None:
        rows = self._request(
            "DELETE",
            collection,
            params={"id": f"eq.{record_id}"},
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise NotFound(collection, record_id)

    # Private helpers

    def _url(self, collection: str) -> str:
        if collection not in COLLECTION_TABLES:
            raise StoreError(f"Unknown collection: {collection}")
        return f"{self.base_url}/{COLLECTION_TABLES[collection]}"

    def _select(self, joins) -> str:
        parts = ["*"]
        for join in joins or ():
            parts.append(f"{join.alias}:{join.foreign_key}({','.join(join.columns)})")
        return ",".join(parts)

    def _filter_params(self, filters: dict) -> dict:
        params = {}
        for field, value in filters.items():
            if isinstance(value, (list, tuple, set)):
                params[field] = "in.(" + ",".join(self._literal(v) for v in value) + ")"
            elif value is None:
                params[field] = "is.null"
            else:
                params[field] = f"eq.{self._literal(value)}"
        return params

    def _literal(self, value) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def _request(self, method: str, collection: str, **kwargs):
        url = self._url(collection)
        logger.debug("%s %s %s", method, url, kwargs.get("params"))
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise StoreError("Record store request timed out") from e
        except requests.exceptions.ConnectionError as e:
            raise StoreError("Failed to connect to record store") from e
        except requests.exceptions.RequestException as e:
            raise StoreError(f"Record store request failed: {e}") from e

        if response.status_code >= 400:
            raise self._error(response)
        if not response.content:
            return []
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"Record store returned an invalid response ({response.status_code})") from e

    def _error(self, response) -> StoreError:
        """Map an error response to ConstraintViolation or StoreError."""
        try:
            body = PostgrestError.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            body = PostgrestError(message=response.text or "")

        message = body.message or f"Record store error: {response.status_code}"
        kind = CONSTRAINT_CODES.get(body.code or "")
        if kind is not None:
            detail = f"{message} {body.details}" if body.details else message
            return ConstraintViolation(kind, detail)

        if response.status_code in (401, 403):
            return StoreError(f"Permission denied: {message}")
        return StoreError(message)
