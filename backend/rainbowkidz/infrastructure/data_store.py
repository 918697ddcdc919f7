"""Data Store Client — async REST query surface for the remote relational store.

Invariants:
    - Every call carries the service credential as `apikey` and `Authorization: Bearer`
    - Every call has an explicit timeout; no call is retried
    - Transport failures and non-2xx responses are mapped to DataStoreError
      (upstream detail is logged, never returned to clients)
    - Missing URL/key raises ConfigurationError("data_store_env_missing") at call time
    - Filters are typed (eq / is_null / in_) and rendered to the wire syntax here only

Design Decisions:
    - httpx.AsyncClient owned by the app instance: one connection pool per process,
      closed in the lifespan shutdown
    - Thin verbs (select/insert/update/delete/rpc) over a query builder: route handlers
      read like the queries they issue
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import httpx

from rainbowkidz.core.errors import (
    ConfigurationError,
    DataStoreError,
    StorageUploadError,
)

logger = logging.getLogger(__name__)


# ─── Query Vocabulary ────────────────────────────────────────────

@dataclass(frozen=True)
class Filter:
    """A single column predicate (`column=operator.value` on the wire)."""
    column: str
    operator: str
    value: Any = None

    def render(self) -> str:
        if self.operator == "in":
            return "in.(" + ",".join(_render_value(v) for v in self.value) + ")"
        return f"{self.operator}.{_render_value(self.value)}"


@dataclass(frozen=True)
class Order:
    column: str
    descending: bool = False

    def render(self) -> str:
        return f"{self.column}.{'desc' if self.descending else 'asc'}"


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def is_null(column: str) -> Filter:
    return Filter(column, "is", None)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def asc(column: str) -> Order:
    return Order(column)


def desc(column: str) -> Order:
    return Order(column, descending=True)


def _render_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _name(table: Any) -> str:
    return str(getattr(table, "value", table))


# ─── Client ──────────────────────────────────────────────────────

class DataStoreClient:
    """REST client for tables, stored procedures and object storage."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── tables ──

    async def select(
        self,
        table: Any,
        columns: str = "*",
        where: Sequence[Filter] = (),
        order: Sequence[Order] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict]:
        params = [("select", columns)] + self._filters(where)
        if order:
            params.append(("order", ",".join(o.render() for o in order)))
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))
        response = await self._request(
            "GET", f"/rest/v1/{_name(table)}", operation="select",
            table=_name(table), params=params,
        )
        return response.json()

    async def first(
        self, table: Any, columns: str = "*", where: Sequence[Filter] = (),
    ) -> dict | None:
        rows = await self.select(table, columns, where=where, limit=1)
        return rows[0] if rows else None

    async def insert(
        self,
        table: Any,
        rows: dict | list[dict],
        *,
        returning: bool = True,
        on_conflict: str | None = None,
        duplicates: str | None = None,
    ) -> list[dict]:
        """Insert rows. `duplicates` is "merge" (upsert) or "ignore" (idempotent insert)."""
        prefer = []
        if duplicates:
            prefer.append(f"resolution={duplicates}-duplicates")
        prefer.append("return=representation" if returning else "return=minimal")
        params = [("on_conflict", on_conflict)] if on_conflict else []
        response = await self._request(
            "POST", f"/rest/v1/{_name(table)}", operation="insert",
            table=_name(table), params=params, json=rows,
            headers={"Prefer": ",".join(prefer)},
        )
        return response.json() if returning else []

    async def update(
        self,
        table: Any,
        values: dict,
        where: Sequence[Filter],
        *,
        returning: bool = False,
    ) -> list[dict]:
        response = await self._request(
            "PATCH", f"/rest/v1/{_name(table)}", operation="update",
            table=_name(table), params=self._filters(where), json=values,
            headers={"Prefer": "return=representation" if returning else "return=minimal"},
        )
        return response.json() if returning else []

    async def delete(self, table: Any, where: Sequence[Filter]) -> None:
        await self._request(
            "DELETE", f"/rest/v1/{_name(table)}", operation="delete",
            table=_name(table), params=self._filters(where),
            headers={"Prefer": "return=minimal"},
        )

    async def rpc(self, function: Any, params: dict) -> Any:
        response = await self._request(
            "POST", f"/rest/v1/rpc/{_name(function)}", operation="rpc",
            table=_name(function), json=params,
        )
        return response.json()

    # ── object storage ──

    def public_object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    async def upload_object(self, path: str, content: bytes, content_type: str) -> str:
        """Upload raw bytes (overwriting) and return the public retrieval URL."""
        self._ensure_configured()
        try:
            response = await self._client.post(
                f"/storage/v1/object/{self.bucket}/{path}",
                content=content,
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "Content-Type": content_type,
                    "x-upsert": "true",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Storage upload transport error: {e}", extra={"operation": "upload"})
            raise StorageUploadError(str(e))
        if response.is_error:
            logger.error(
                f"Storage upload rejected: {response.text}",
                extra={"operation": "upload", "status_code": response.status_code},
            )
            raise StorageUploadError(response.text, response.status_code)
        return self.public_object_url(path)

    async def health_check(self) -> bool:
        """Readiness probe: can we read the boards table?"""
        try:
            await self.select("boards", "id", limit=1)
            return True
        except (DataStoreError, ConfigurationError) as e:
            logger.error(f"Data store health check failed: {e.message}")
            return False

    # ── internals ──

    def _ensure_configured(self) -> None:
        if not self.base_url or not self.service_key:
            raise ConfigurationError("data_store_env_missing")

    def _filters(self, where: Sequence[Filter]) -> list[tuple[str, str]]:
        return [(f.column, f.render()) for f in where]

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        self._ensure_configured()
        request_headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json",
            **(headers or {}),
        }
        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=request_headers,
            )
        except httpx.HTTPError as e:
            logger.error(
                f"Data store transport error: {e}",
                extra={"operation": operation, "table": table},
            )
            raise DataStoreError(str(e), operation)
        if response.is_error:
            logger.error(
                f"Data store {operation} on {table} returned {response.status_code}: "
                f"{response.text[:500]}",
                extra={
                    "operation": operation, "table": table,
                    "status_code": response.status_code,
                },
            )
            raise DataStoreError(
                f"HTTP {response.status_code}", operation, response.status_code,
            )
        return response
