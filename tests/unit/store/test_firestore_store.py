"""Unit tests for the Firestore REST document store."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from core.exceptions import StoreRejectedError, StoreUnavailableError
from domain.entities.identity import IdentityRecord
from domain.services.profile_reconciler import ProfileReconciler
from infrastructure.store.firestore_store import (
    FirestoreDocumentStore,
    decode_fields,
    decode_value,
    encode_fields,
    encode_value,
)

DOCUMENTS_URL = "https://firestore.test/v1/projects/quecocino-test/databases/(default)/documents"
CREATED_AT = datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc)


def _store(handler, id_token: str | None = "id-token") -> FirestoreDocumentStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreDocumentStore(client, DOCUMENTS_URL, "users", id_token=id_token)


def _error(status_code: int, status: str) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"error": {"code": status_code, "message": status.lower(), "status": status}},
    )


# ---------------------------------------------------------------------------
# Value encoding
# ---------------------------------------------------------------------------


class TestValueEncoding:
    def test_encodes_profile_fields(self):
        fields = encode_fields({"name": "Ana", "createdAt": CREATED_AT})

        assert fields == {
            "name": {"stringValue": "Ana"},
            "createdAt": {"timestampValue": "2026-01-01T10:00:00Z"},
        }

    def test_naive_datetime_is_treated_as_utc(self):
        assert encode_value(datetime(2026, 1, 1, 10, 0)) == {
            "timestampValue": "2026-01-01T10:00:00Z"
        }

    def test_integers_are_strings_on_the_wire(self):
        assert encode_value(42) == {"integerValue": "42"}
        assert decode_value({"integerValue": "42"}) == 42

    def test_bool_is_not_encoded_as_integer(self):
        assert encode_value(True) == {"booleanValue": True}

    def test_nested_values(self):
        value = {"tags": ["vegano", 3], "prefs": {"spicy": False}, "note": None}

        assert decode_fields(encode_fields(value)) == value

    def test_decodes_firestore_timestamp(self):
        decoded = decode_value({"timestampValue": "2026-01-01T10:00:00.123456Z"})

        assert decoded == datetime(2026, 1, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)

    def test_decodes_empty_map_and_array(self):
        assert decode_value({"mapValue": {}}) == {}
        assert decode_value({"arrayValue": {}}) == []

    def test_rejects_unsupported_types(self):
        with pytest.raises(TypeError):
            encode_value(object())


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------


class TestGet:
    async def test_returns_decoded_fields(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "name": "projects/quecocino-test/databases/(default)/documents/users/abc",
                    "fields": {
                        "id": {"stringValue": "abc"},
                        "name": {"stringValue": "Ana"},
                        "createdAt": {"timestampValue": "2026-01-01T10:00:00Z"},
                    },
                },
            )

        result = await _store(handler).get("abc")

        assert result == {"id": "abc", "name": "Ana", "createdAt": CREATED_AT}
        assert seen[0].method == "GET"
        assert seen[0].url.path.endswith("/documents/users/abc")
        assert seen[0].headers["Authorization"] == "Bearer id-token"

    async def test_returns_none_on_404(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(404, "NOT_FOUND")

        assert await _store(handler).get("missing") is None

    async def test_omits_authorization_without_token(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _error(404, "NOT_FOUND")

        await _store(handler, id_token=None).get("abc")

        assert "Authorization" not in seen[0].headers

    async def test_permission_denied_raises_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(403, "PERMISSION_DENIED")

        with pytest.raises(StoreRejectedError) as exc_info:
            await _store(handler).get("abc")

        assert exc_info.value.operation == "get"
        assert "PERMISSION_DENIED" in exc_info.value.message

    async def test_connection_error_raises_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await _store(handler).get("abc")

        assert exc_info.value.operation == "get"

    async def test_timeout_raises_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(StoreUnavailableError):
            await _store(handler).get("abc")

    @pytest.mark.parametrize("status_code, status", [(503, "UNAVAILABLE"), (429, "RESOURCE_EXHAUSTED")])
    async def test_transient_statuses_raise_unavailable(self, status_code: int, status: str):
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(status_code, status)

        with pytest.raises(StoreUnavailableError):
            await _store(handler).get("abc")

    async def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="Unauthorized")

        with pytest.raises(StoreRejectedError) as exc_info:
            await _store(handler).get("abc")

        assert "HTTP 401" in exc_info.value.message


# ---------------------------------------------------------------------------
# create / set
# ---------------------------------------------------------------------------


class TestCreate:
    async def test_posts_document_with_id(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"fields": json.loads(request.content)["fields"]})

        created = await _store(handler).create("abc", {"name": "Ana", "createdAt": CREATED_AT})

        assert created is True
        request = seen[0]
        assert request.method == "POST"
        assert request.url.path.endswith("/documents/users")
        assert request.url.params["documentId"] == "abc"
        assert json.loads(request.content) == {
            "fields": {
                "name": {"stringValue": "Ana"},
                "createdAt": {"timestampValue": "2026-01-01T10:00:00Z"},
            }
        }

    async def test_already_exists_returns_false(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(409, "ALREADY_EXISTS")

        assert await _store(handler).create("abc", {"name": "Ana"}) is False

    async def test_permission_denied_raises_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(403, "PERMISSION_DENIED")

        with pytest.raises(StoreRejectedError) as exc_info:
            await _store(handler).create("abc", {"name": "Ana"})

        assert exc_info.value.operation == "create"


class TestSet:
    async def test_patches_document(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        await _store(handler).set("abc", {"name": "Ana"})

        assert seen[0].method == "PATCH"
        assert seen[0].url.path.endswith("/documents/users/abc")
        assert json.loads(seen[0].content) == {"fields": {"name": {"stringValue": "Ana"}}}

    async def test_server_error_raises_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return _error(500, "INTERNAL")

        with pytest.raises(StoreUnavailableError):
            await _store(handler).set("abc", {"name": "Ana"})


# ---------------------------------------------------------------------------
# Documents written by the mobile app
# ---------------------------------------------------------------------------


class TestMobileAppDocuments:
    async def test_reconcile_returns_stored_photo_url(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            return httpx.Response(
                200,
                json={
                    "name": f"{DOCUMENTS_URL}/users/u1",
                    "fields": {
                        "uid": {"stringValue": "u1"},
                        "name": {"stringValue": "Ana"},
                        "email": {"stringValue": "ana@x.com"},
                        "photoUrl": {"stringValue": "http://x/p.png"},
                        "createdAt": {"timestampValue": "2026-01-01T10:00:00.123456Z"},
                    },
                },
            )

        reconciler = ProfileReconciler(_store(handler))

        profile = await reconciler.reconcile(IdentityRecord(id="u1", display_name="Other"))

        assert profile.id == "u1"
        assert profile.name == "Ana"
        assert profile.avatar_url == "http://x/p.png"
        assert profile.created_at is not None
