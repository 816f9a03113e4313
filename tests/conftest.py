"""
Shared pytest fixtures for the store tests.

Each test gets its own MemoryStore, so no state leaks between tests.
"""
import pytest

from authdb.db.memory import MemoryStore
from tests.factories import account_data, new_id


@pytest.fixture
def store():
    """A fresh, empty store."""
    return MemoryStore()


@pytest.fixture
def uid():
    return new_id()


@pytest.fixture
def make_account(store):
    """Create an account and return its uid."""

    async def _make(email: str = "foo@example.com", **overrides) -> bytes:
        account_uid = overrides.pop("uid", None) or new_id()
        await store.create_account(account_uid, account_data(email, **overrides))
        return account_uid

    return _make
