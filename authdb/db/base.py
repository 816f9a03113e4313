# authdb/db/base.py
"""
Row base class and the generic table type.

Every stored record is a mutable pydantic model held in a Table keyed
by the lowercase hex form of its identifier.
"""
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict

from authdb.core.errors import IntegrityViolation


# ─────────────────────────────────────────────────────────────────────────────
# Base for row models
# All models inherit from this class
# ─────────────────────────────────────────────────────────────────────────────
class Row(BaseModel):
    """
    Base class for all stored rows.

    Usage:
        class KeyFetchToken(Row):
            uid: str
            auth_key: bytes
            ...
    """

    model_config = ConfigDict(extra="forbid")


RowT = TypeVar("RowT", bound=Row)


class Table(Generic[RowT]):
    """Rows keyed by hex identifier."""

    def __init__(self, name: str):
        self.name = name
        self._rows: Dict[str, RowT] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def get(self, key: Optional[str]) -> Optional[RowT]:
        if key is None:
            return None
        return self._rows.get(key)

    def insert(self, key: str, row: RowT) -> None:
        self._rows[key] = row

    def pop(self, key: Optional[str]) -> Optional[RowT]:
        if key is None:
            return None
        return self._rows.pop(key, None)

    def owned_by(self, uid: str) -> List[Tuple[str, RowT]]:
        return [(key, row) for key, row in self._rows.items() if row.uid == uid]

    def delete_by_owner(self, uid: str) -> int:
        """
        Remove every row whose owner is ``uid``.

        A row without an owner means the table is corrupt. That is raised
        before anything is deleted from this table.

        Returns:
            Number of rows removed
        """
        doomed = []
        for key, row in self._rows.items():
            owner = getattr(row, "uid", None)
            if not owner:
                raise IntegrityViolation(f'No "uid" property in {self.name} row {key}')
            if owner == uid:
                doomed.append(key)

        for key in doomed:
            del self._rows[key]
        return len(doomed)
