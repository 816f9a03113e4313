# authdb/models/account.py
from typing import Dict, Optional

from pydantic import Field

from authdb.db.base import Row
from authdb.models.device import Device


class Account(Row):
    uid: str
    normalized_email: str
    email: str
    open_id: Optional[str] = None

    # Never leaves the store. Only compared by check_password
    verify_hash: bytes

    auth_salt: bytes
    wrap_wrap_kb: bytes
    verifier_set_at: int
    verifier_version: int

    email_verified: bool = False
    email_code: Optional[bytes] = None
    locale: Optional[str] = None
    created_at: int
    locked_at: Optional[int] = None

    # device key (hex) -> Device, owned by the account
    devices: Dict[str, Device] = Field(default_factory=dict)


class UnlockCode(Row):
    """Issued when an account is locked, keyed by the account uid."""
    uid: str
    unlock_code: bytes
