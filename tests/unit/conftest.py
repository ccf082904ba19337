"""Shared fixtures for unit tests."""

import pytest

from tests.fakes import FakeDocumentStore


@pytest.fixture
def store() -> FakeDocumentStore:
    """Create a fresh FakeDocumentStore."""
    return FakeDocumentStore()
