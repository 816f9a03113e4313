"""
authdb: an in-process, non-persistent account / session / token store.

Usage:
    import authdb

    store = await authdb.connect()
    await store.create_account(uid, {...})
    record = await store.account(uid)
"""
from authdb.core.errors import (
    AppError,
    Duplicate,
    IncorrectPassword,
    IntegrityViolation,
    NotFound,
)
from authdb.db.memory import MemoryStore, connect

__version__ = "1.0.0"

__all__ = [
    "AppError",
    "Duplicate",
    "IncorrectPassword",
    "IntegrityViolation",
    "MemoryStore",
    "NotFound",
    "connect",
]
