# authdb/models/tokens.py
"""
Token rows.

Every token row carries the owning account's uid so account deletion
and reset can cascade with Table.delete_by_owner.
"""
from typing import Optional

from authdb.db.base import Row


class SessionToken(Row):
    data: bytes
    uid: str
    created_at: int
    last_access_time: int

    ua_browser: Optional[str] = None
    ua_browser_version: Optional[str] = None
    ua_os: Optional[str] = None
    ua_os_version: Optional[str] = None
    ua_device_type: Optional[str] = None

    # Back-reference to the device using this session, at most one
    device_key: Optional[str] = None


class KeyFetchToken(Row):
    auth_key: bytes
    uid: str
    key_bundle: bytes
    created_at: int


class PasswordForgotToken(Row):
    token_data: bytes
    uid: str
    pass_code: bytes
    tries: int = 0
    created_at: int


class PasswordChangeToken(Row):
    token_data: bytes
    uid: str
    created_at: int


class AccountResetToken(Row):
    token_data: bytes
    uid: str
    created_at: int
