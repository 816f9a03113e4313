# authdb/db/__init__.py
from authdb.db.base import Row, Table
from authdb.db.memory import MemoryStore, connect
from authdb.db.session import Tables, transaction

__all__ = [
    "MemoryStore",
    "Row",
    "Table",
    "Tables",
    "connect",
    "transaction",
]
