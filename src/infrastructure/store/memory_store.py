"""In-process document store for local development and tests."""

import asyncio
import copy

from domain.repositories.document_store import Document


class InMemoryDocumentStore:
    """Dict-backed implementation of IDocumentStore."""

    def __init__(self, documents: dict[str, Document] | None = None) -> None:
        self._documents: dict[str, Document] = copy.deepcopy(documents) if documents else {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Document | None:
        """Get a copy of the document at key."""
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    async def set(self, key: str, document: Document) -> None:
        """Replace the document at key."""
        async with self._lock:
            self._documents[key] = copy.deepcopy(document)

    async def create(self, key: str, document: Document) -> bool:
        """Insert the document unless key is taken."""
        async with self._lock:
            if key in self._documents:
                return False
            self._documents[key] = copy.deepcopy(document)
            return True

    def __len__(self) -> int:
        return len(self._documents)
