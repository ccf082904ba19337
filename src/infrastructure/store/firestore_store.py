"""Firestore implementation of the document store, over the REST API.

Documents are addressed as::

    {documents_url}/{collection}/{key}

Firestore wraps every field in a typed value object, e.g.
``{"name": {"stringValue": "Ana"}}``; ``encode_fields`` / ``decode_fields``
convert between that form and plain dicts.
"""

from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from core.exceptions import StoreRejectedError, StoreUnavailableError
from domain.repositories.document_store import Document

logger = structlog.get_logger()

# Statuses worth retrying from the caller's point of view
_UNAVAILABLE_STATUSES = {408, 429, 500, 502, 503, 504}


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a Python value as a Firestore ``Value``."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        timestamp = value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        return {"timestampValue": timestamp}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"Cannot store value of type {type(value).__name__} in Firestore")


def decode_value(value: dict[str, Any]) -> Any:
    """Decode a Firestore ``Value`` into a Python value."""
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return datetime.fromisoformat(value["timestampValue"])
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    # bytesValue, referenceValue and geoPointValue pass through untouched
    _, raw = next(iter(value.items()))
    return raw


def encode_fields(document: Document) -> dict[str, Any]:
    return {name: encode_value(value) for name, value in document.items()}


def decode_fields(fields: dict[str, Any]) -> Document:
    return {name: decode_value(value) for name, value in fields.items()}


class FirestoreDocumentStore:
    """IDocumentStore backed by one Firestore collection.

    ``id_token`` is the caller's Firebase ID token; sending it as bearer
    credentials makes Firestore evaluate its security rules for that user.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        documents_url: str,
        collection: str,
        id_token: str | None = None,
    ) -> None:
        self._client = client
        self._collection_url = f"{documents_url.rstrip('/')}/{quote(collection, safe='')}"
        self._headers = {"Authorization": f"Bearer {id_token}"} if id_token else {}

    def _document_url(self, key: str) -> str:
        return f"{self._collection_url}/{quote(key, safe='')}"

    async def get(self, key: str) -> Document | None:
        """Get the document at key, or None on 404."""
        response = await self._send("get", key, "GET", self._document_url(key))
        if response.status_code == 404:
            return None
        self._raise_for_status("get", key, response)
        return decode_fields(response.json().get("fields", {}))

    async def set(self, key: str, document: Document) -> None:
        """Overwrite the document at key (PATCH without an update mask)."""
        response = await self._send(
            "set",
            key,
            "PATCH",
            self._document_url(key),
            json={"fields": encode_fields(document)},
        )
        self._raise_for_status("set", key, response)

    async def create(self, key: str, document: Document) -> bool:
        """Create the document; Firestore answers 409 if the id is taken."""
        response = await self._send(
            "create",
            key,
            "POST",
            self._collection_url,
            params={"documentId": key},
            json={"fields": encode_fields(document)},
        )
        if response.status_code == 409:
            return False
        self._raise_for_status("create", key, response)
        return True

    async def _send(
        self, operation: str, key: str, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        try:
            return await self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning(
                "store_unavailable",
                backend="firestore",
                operation=operation,
                key=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StoreUnavailableError(operation, key, reason=type(e).__name__) from e

    @staticmethod
    def _raise_for_status(operation: str, key: str, response: httpx.Response) -> None:
        if response.is_success:
            return

        reason = _error_status(response)
        if response.status_code in _UNAVAILABLE_STATUSES:
            logger.warning(
                "store_unavailable",
                backend="firestore",
                operation=operation,
                key=key,
                status_code=response.status_code,
                reason=reason,
            )
            raise StoreUnavailableError(operation, key, reason=reason)

        logger.warning(
            "store_rejected",
            backend="firestore",
            operation=operation,
            key=key,
            status_code=response.status_code,
            reason=reason,
        )
        raise StoreRejectedError(operation, key, reason=reason)


def _error_status(response: httpx.Response) -> str:
    """Pull the canonical status (e.g. PERMISSION_DENIED) out of an error body."""
    fallback = f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return fallback
    return error.get("status") or error.get("message") or fallback
