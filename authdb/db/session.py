# authdb/db/session.py
"""
Table container and transaction handling.

A MemoryStore owns one Tables instance and one asyncio.Lock. Every
operation holds the lock for its whole body, so operations never
interleave. Most operations check everything before their first write
and need nothing more. The account-wide cascades and the forgot-password
completion can fail part way, so they run inside ``transaction``, which
snapshots the tables first and puts the snapshot back if the body raises.
The snapshot copies every table, so keep it to those operations.
"""
import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from authdb.db.base import Table
from authdb.models.account import Account, UnlockCode
from authdb.models.tokens import (
    AccountResetToken,
    KeyFetchToken,
    PasswordChangeToken,
    PasswordForgotToken,
    SessionToken,
)

logger = logging.getLogger(__name__)


class Tables:
    """All store state. Index entries only change with their account row."""

    def __init__(self):
        self.accounts: Table[Account] = Table("accounts")
        self.uid_by_normalized_email: Dict[str, str] = {}
        self.uid_by_open_id: Dict[str, str] = {}

        self.session_tokens: Table[SessionToken] = Table("sessionTokens")
        self.key_fetch_tokens: Table[KeyFetchToken] = Table("keyFetchTokens")
        self.password_forgot_tokens: Table[PasswordForgotToken] = Table("passwordForgotTokens")
        self.password_change_tokens: Table[PasswordChangeToken] = Table("passwordChangeTokens")
        self.account_reset_tokens: Table[AccountResetToken] = Table("accountResetTokens")
        self.account_unlock_codes: Table[UnlockCode] = Table("accountUnlockCodes")

    # ─────────────────────────────────────────────────────────────────────
    # Identity table + indices
    # ─────────────────────────────────────────────────────────────────────
    def find_uid_by_email(self, normalized_email: str) -> Optional[str]:
        return self.uid_by_normalized_email.get(normalized_email)

    def find_uid_by_open_id(self, open_id: str) -> Optional[str]:
        return self.uid_by_open_id.get(open_id)

    def insert_account(self, account: Account) -> None:
        self.accounts.insert(account.uid, account)
        self.uid_by_normalized_email[account.normalized_email] = account.uid
        if account.open_id:
            self.uid_by_open_id[account.open_id] = account.uid

    def remove_account(self, account: Account) -> None:
        self.uid_by_normalized_email.pop(account.normalized_email, None)
        if account.open_id:
            self.uid_by_open_id.pop(account.open_id, None)
        self.accounts.pop(account.uid)

    # ─────────────────────────────────────────────────────────────────────
    # Cascades
    # ─────────────────────────────────────────────────────────────────────
    def owned_tables(self) -> List[Table]:
        """Tables whose rows die with their account."""
        return [
            self.session_tokens,
            self.key_fetch_tokens,
            self.account_reset_tokens,
            self.password_change_tokens,
            self.password_forgot_tokens,
            self.account_unlock_codes,
        ]

    def delete_owned_rows(self, uid: str) -> None:
        for table in self.owned_tables():
            removed = table.delete_by_owner(uid)
            if removed:
                logger.debug(f"Cascade: removed {removed} row(s) from {table.name} for uid={uid}")

    # ─────────────────────────────────────────────────────────────────────
    # Snapshots
    # ─────────────────────────────────────────────────────────────────────
    def snapshot(self) -> dict:
        return copy.deepcopy(self.__dict__)

    def restore(self, snapshot: dict) -> None:
        self.__dict__.clear()
        self.__dict__.update(snapshot)


@asynccontextmanager
async def transaction(lock: asyncio.Lock, tables: Tables) -> AsyncGenerator[Tables, None]:
    """
    Run a block of table mutations as one unit.

    Usage:
        async with transaction(self._lock, self._tables) as t:
            t.password_forgot_tokens.pop(key)
            ...

    The lock is held for the whole block. If the block raises, every
    table is restored to its state on entry and the error propagates.
    """
    async with lock:
        snapshot = tables.snapshot()
        try:
            yield tables
        except BaseException as exc:
            tables.restore(snapshot)
            logger.debug(f"Transaction rolled back: {type(exc).__name__}")
            raise
