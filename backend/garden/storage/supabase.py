"""Supabase-backed store: Storage REST for objects, PostgREST for tables."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from garden.canvas.export import PNG_CONTENT_TYPE
from garden.errors import PersistenceFailure, RecordNotFound, UploadCollision
from garden.storage.base import GardenStore, UploadResult

logger = logging.getLogger(__name__)


def _eq(value: Any) -> str:
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def parse_content_range(header: str | None) -> int:
    """``0-199/1234`` or ``*/0`` → 1234 / 0."""
    if not header or "/" not in header:
        raise PersistenceFailure(f"Missing exact count in Content-Range: {header!r}")
    total = header.rsplit("/", 1)[1]
    if total == "*":
        raise PersistenceFailure("Count was not computed (Prefer: count=exact missing)")
    try:
        return int(total)
    except ValueError as e:
        raise PersistenceFailure(f"Malformed Content-Range: {header!r}") from e


class SupabaseStore(GardenStore):
    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        service_key: str,
        bucket: str = "garden",
        cache_control: str = "31536000",
    ) -> None:
        self._client = client
        self._url = url.rstrip("/")
        self._bucket = bucket
        self._cache_control = cache_control
        self._auth = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        }

    # ── Objects ──

    def public_url(self, filename: str) -> str:
        return f"{self._url}/storage/v1/object/public/{self._bucket}/{quote(filename)}"

    async def upload(
        self, data: bytes, filename: str, content_type: str = PNG_CONTENT_TYPE
    ) -> UploadResult:
        endpoint = f"{self._url}/storage/v1/object/{self._bucket}/{quote(filename)}"
        try:
            response = await self._client.post(
                endpoint,
                content=data,
                headers={
                    **self._auth,
                    "Content-Type": content_type,
                    "Cache-Control": f"max-age={self._cache_control}",
                    "x-upsert": "false",
                },
            )
        except httpx.HTTPError as e:
            raise PersistenceFailure(f"Upload of {filename} failed: {e}") from e

        if response.status_code == 409 or _is_duplicate(response):
            raise UploadCollision(f"Object already exists: {filename}")
        if response.is_error:
            raise PersistenceFailure(
                f"Upload of {filename} failed: HTTP {response.status_code} {response.text}"
            )
        path = _json_object(response).get("Key", f"{self._bucket}/{filename}")
        return UploadResult(url=self.public_url(filename), path=path)

    # ── Tables ──

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            "POST",
            table,
            json=[row],
            headers={"Prefer": "return=representation"},
        )
        rows = _json_rows(response, table)
        if not rows:
            raise PersistenceFailure(f"Insert into {table} returned no row")
        return rows[0]

    async def update(self, table: str, record_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        response = await self._request(
            "PATCH",
            table,
            params={"id": _eq(record_id)},
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        rows = _json_rows(response, table)
        if not rows:
            raise RecordNotFound(f"No record {record_id} in {table}")
        return rows[0]

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": "*", "order": f"{order_by}.{'desc' if descending else 'asc'}"}
        params.update({k: _eq(v) for k, v in (filters or {}).items()})
        if offset:
            params["offset"] = str(offset)
        if limit is not None:
            params["limit"] = str(limit)
        response = await self._request("GET", table, params=params)
        return _json_rows(response, table)

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        params = {"select": "*"}
        params.update({k: _eq(v) for k, v in (filters or {}).items()})
        response = await self._request(
            "HEAD", table, params=params, headers={"Prefer": "count=exact"}
        )
        return parse_content_range(response.headers.get("content-range"))

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"{self._url}/rest/v1/{table}",
                params=params,
                json=json,
                headers={**self._auth, **(headers or {})},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceFailure(
                f"{method} {table} failed: HTTP {e.response.status_code} {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceFailure(f"{method} {table} failed: {e}") from e
        return response


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """The response body if it is a JSON object, else an empty dict."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _is_duplicate(response: httpx.Response) -> bool:
    """Storage reports collisions as 400 with a 409 body on some versions."""
    if response.status_code != 400:
        return False
    body = _json_object(response)
    return str(body.get("statusCode")) == "409" or body.get("error") == "Duplicate"


def _json_rows(response: httpx.Response, table: str) -> list[dict[str, Any]]:
    try:
        body = response.json()
    except ValueError as e:
        raise PersistenceFailure(f"{table} returned invalid JSON: {e}") from e
    if not isinstance(body, list):
        raise PersistenceFailure(f"{table} returned {body!r}, expected a list of rows")
    return body
