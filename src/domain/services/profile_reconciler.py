"""Profile reconciliation: create the profile on first sign-in, else return it."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

import structlog

from core.exceptions import StoreUnavailableError
from domain.entities.identity import IdentityRecord
from domain.entities.profile import ProfileDocument
from domain.repositories.document_store import IDocumentStore

logger = structlog.get_logger()

T = TypeVar("T")


class ProfileReconciler:
    """Ensures a profile document exists for an authenticated identity.

    Holds no state between calls; the store owns the persisted record.
    """

    def __init__(self, store: IDocumentStore, timeout_seconds: float | None = None) -> None:
        self._store = store
        self._timeout_seconds = timeout_seconds

    async def reconcile(self, identity: IdentityRecord) -> ProfileDocument:
        """Return the stored profile for identity, creating it if absent.

        At most one write is attempted per call, and only when no document
        exists at ``identity.id``. An existing document is returned verbatim
        even if the identity's name, email or avatar have changed since.

        Raises:
            StoreUnavailableError: The store could not be reached or timed out
            StoreRejectedError: The store refused the read or write
        """
        key = identity.id

        existing = await self._call("get", key, self._store.get(key))
        if existing is not None:
            logger.debug("profile_found", user_id=key)
            return ProfileDocument.from_document(key, existing)

        candidate = ProfileDocument.from_identity(identity)
        created = await self._call(
            "create", key, self._store.create(key, candidate.to_document())
        )
        if created:
            logger.info("profile_created", user_id=key)
            return candidate

        # Another session created the document between our read and write.
        winner = await self._call("get", key, self._store.get(key))
        if winner is None:
            raise StoreUnavailableError(
                "get", key, reason="document vanished after conditional create"
            )
        logger.info("profile_create_race_lost", user_id=key)
        return ProfileDocument.from_document(key, winner)

    async def get(self, user_id: str) -> ProfileDocument | None:
        """Read the stored profile without creating one."""
        data = await self._call("get", user_id, self._store.get(user_id))
        if data is None:
            return None
        return ProfileDocument.from_document(user_id, data)

    async def _call(self, operation: str, key: str, awaitable: Awaitable[T]) -> T:
        """Await a store call under the configured deadline."""
        try:
            async with asyncio.timeout(self._timeout_seconds):
                return await awaitable
        except TimeoutError as e:
            logger.warning(
                "store_timeout",
                operation=operation,
                user_id=key,
                timeout_seconds=self._timeout_seconds,
            )
            raise StoreUnavailableError(operation, key, reason="timed out") from e
