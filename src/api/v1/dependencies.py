"""Dependency injection factories for API v1."""

from functools import lru_cache

import httpx
from fastapi import Depends

from api.dependencies.auth import BearerToken
from core.config import settings
from domain.repositories.document_store import IDocumentStore
from domain.services.profile_reconciler import ProfileReconciler
from infrastructure.database.session import get_session_factory
from infrastructure.store.firestore_store import FirestoreDocumentStore
from infrastructure.store.memory_store import InMemoryDocumentStore
from infrastructure.store.sqlalchemy_store import SQLAlchemyDocumentStore


@lru_cache
def get_http_client() -> httpx.AsyncClient:
    """Shared HTTP client for Firestore; closed in the app lifespan."""
    return httpx.AsyncClient(timeout=settings.store_timeout_seconds)


@lru_cache
def get_memory_store() -> InMemoryDocumentStore:
    """Process-wide in-memory store for the ``memory`` backend."""
    return InMemoryDocumentStore()


def build_document_store(id_token: str | None = None) -> IDocumentStore:
    """Build the profile store for the configured backend.

    Firestore calls are made with the caller's own ID token so that the
    project's security rules decide what the user may read and write.
    """
    if settings.store_backend == "firestore":
        return FirestoreDocumentStore(
            get_http_client(),
            settings.firestore_documents_url,
            settings.users_collection,
            id_token=id_token,
        )
    if settings.store_backend == "sql":
        return SQLAlchemyDocumentStore(get_session_factory(), settings.users_collection)
    return get_memory_store()


def get_document_store(token: BearerToken) -> IDocumentStore:
    """Get the store acting on behalf of the request's bearer."""
    return build_document_store(id_token=token)


def get_profile_reconciler(
    store: IDocumentStore = Depends(get_document_store),
) -> ProfileReconciler:
    """Get a ProfileReconciler bound to the request's store."""
    return ProfileReconciler(store, timeout_seconds=settings.store_timeout_seconds)
