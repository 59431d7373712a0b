"""Tests for the Supabase REST adapter (HTTP mocked with httpx.MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest

from garden.admission.quota import check_server_quota
from garden.errors import PersistenceFailure, RecordNotFound, UploadCollision
from garden.storage.supabase import SupabaseStore, parse_content_range
from tests.conftest import run

BASE = "https://proj.supabase.co"


def _call(handler, op):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            store = SupabaseStore(http, url=BASE, service_key="svc", bucket="garden")
            return await op(store)

    return run(go())


def test_upload_sets_no_upsert_and_content_type():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json={"Key": "garden/flowers-1.png"})

    result = _call(handler, lambda s: s.upload(b"png", "flowers-1.png"))

    req = seen["request"]
    assert req.method == "POST"
    assert req.url.path == "/storage/v1/object/garden/flowers-1.png"
    assert req.headers["x-upsert"] == "false"
    assert req.headers["content-type"] == "image/png"
    assert req.headers["authorization"] == "Bearer svc"
    assert result.url == f"{BASE}/storage/v1/object/public/garden/flowers-1.png"
    assert result.path == "garden/flowers-1.png"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(409, json={"error": "Duplicate"}),
        httpx.Response(400, json={"statusCode": "409", "error": "Duplicate", "message": "exists"}),
    ],
)
def test_upload_collision(response):
    with pytest.raises(UploadCollision):
        _call(lambda request: response, lambda s: s.upload(b"png", "flowers-1.png"))


def test_upload_server_error():
    with pytest.raises(PersistenceFailure):
        _call(lambda request: httpx.Response(500, text="boom"), lambda s: s.upload(b"x", "f.png"))


def test_insert_returns_representation():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["prefer"] = request.headers["prefer"]
        return httpx.Response(201, json=[{**seen["body"][0], "id": 7}])

    row = _call(handler, lambda s: s.insert("flowers", {"filename": "f.png"}))

    assert row == {"filename": "f.png", "id": 7}
    assert seen["body"] == [{"filename": "f.png"}]
    assert seen["prefer"] == "return=representation"


def test_update_missing_row():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.99"
        return httpx.Response(200, json=[])

    with pytest.raises(RecordNotFound):
        _call(handler, lambda s: s.update("flowers", 99, {"manual_moderation": True}))


def test_select_builds_postgrest_query():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = request.url.params
        seen["path"] = request.url.path
        return httpx.Response(200, json=[])

    _call(
        handler,
        lambda s: s.select("public_flowers", {"submitter_identity": "a"}, offset=200, limit=200),
    )

    assert seen["path"] == "/rest/v1/public_flowers"
    assert seen["params"]["order"] == "created_at.desc"
    assert seen["params"]["submitter_identity"] == "eq.a"
    assert seen["params"]["offset"] == "200"
    assert seen["params"]["limit"] == "200"


def test_count_uses_exact_count_header():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        assert request.headers["prefer"] == "count=exact"
        return httpx.Response(200, headers={"content-range": "0-9/10"})

    assert _call(handler, lambda s: s.count("flowers", {"submitter_identity": "a"})) == 10


def test_rest_error_is_persistence_failure():
    with pytest.raises(PersistenceFailure):
        _call(lambda request: httpx.Response(503), lambda s: s.count("flowers"))


def test_parse_content_range():
    assert parse_content_range("*/0") == 0
    assert parse_content_range("0-199/1234") == 1234
    with pytest.raises(PersistenceFailure):
        parse_content_range(None)
    with pytest.raises(PersistenceFailure):
        parse_content_range("0-9/*")
    with pytest.raises(PersistenceFailure):
        parse_content_range("0-9/ten")


def test_malformed_count_fails_open():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-range": "0-9/ten"})

    assert _call(handler, lambda s: check_server_quota(s, "203.0.113.7")) == -1


def test_upload_400_with_list_body_is_plain_failure():
    response = httpx.Response(400, json=[{"statusCode": "409"}])
    with pytest.raises(PersistenceFailure) as info:
        _call(lambda request: response, lambda s: s.upload(b"png", "flowers-1.png"))
    assert not isinstance(info.value, UploadCollision)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"message": "not rows"}),
        httpx.Response(200, text="<html>gateway</html>"),
    ],
)
def test_select_rejects_non_row_bodies(response):
    with pytest.raises(PersistenceFailure):
        _call(lambda request: response, lambda s: s.select("public_flowers"))
