"""SQLAlchemy implementation of the document store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import exc as sa_exc
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import StoreRejectedError, StoreUnavailableError
from domain.repositories.document_store import Document
from infrastructure.database.models import DocumentModel

logger = structlog.get_logger()

# Errors raised when the database cannot be reached at all
_UNAVAILABLE_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.TimeoutError,
    OSError,
)


def _to_json(value: Any) -> Any:
    """Make a document JSON-safe; datetimes become ISO-8601 strings."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


class SQLAlchemyDocumentStore:
    """IDocumentStore backed by the ``documents`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        collection: str,
    ) -> None:
        self._session_factory = session_factory
        self._collection = collection

    async def get(self, key: str) -> Document | None:
        """Get the document at key."""
        async with self._translate_errors("get", key):
            async with self._session_factory() as session:
                stmt = select(DocumentModel.data).where(
                    DocumentModel.collection == self._collection,
                    DocumentModel.key == key,
                )
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

    async def set(self, key: str, document: Document) -> None:
        """Insert or replace the document at key."""
        async with self._translate_errors("set", key):
            async with self._session_factory() as session:
                await session.merge(
                    DocumentModel(
                        collection=self._collection,
                        key=key,
                        data=_to_json(document),
                    )
                )
                await session.commit()

    async def create(self, key: str, document: Document) -> bool:
        """Insert the document; a primary key collision means it already exists."""
        async with self._translate_errors("create", key):
            async with self._session_factory() as session:
                session.add(
                    DocumentModel(
                        collection=self._collection,
                        key=key,
                        data=_to_json(document),
                    )
                )
                try:
                    await session.commit()
                except sa_exc.IntegrityError:
                    await session.rollback()
                    return False
                return True

    @asynccontextmanager
    async def _translate_errors(self, operation: str, key: str) -> AsyncIterator[None]:
        try:
            yield
        except _UNAVAILABLE_ERRORS as e:
            logger.warning(
                "store_unavailable",
                backend="sql",
                operation=operation,
                key=key,
                error_type=type(e).__name__,
            )
            raise StoreUnavailableError(operation, key, reason=type(e).__name__) from e
        except sa_exc.DBAPIError as e:
            logger.warning(
                "store_rejected",
                backend="sql",
                operation=operation,
                key=key,
                error_type=type(e).__name__,
            )
            raise StoreRejectedError(operation, key, reason=type(e).__name__) from e
