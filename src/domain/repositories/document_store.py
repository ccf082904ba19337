"""Document store protocol."""

from typing import Any, Protocol

Document = dict[str, Any]


class IDocumentStore(Protocol):
    """Key-addressed document collection.

    Implementations raise ``StoreUnavailableError`` when the backend cannot be
    reached and ``StoreRejectedError`` when it refuses an operation.
    """

    async def get(self, key: str) -> Document | None:
        """Get the document at key, or None if absent."""
        ...

    async def set(self, key: str, document: Document) -> None:
        """Write the document at key, replacing any existing one."""
        ...

    async def create(self, key: str, document: Document) -> bool:
        """Write the document only if key is absent.

        Returns:
            True if the document was written, False if one already existed
        """
        ...
