# authdb/schemas/session.py
from typing import Optional

from pydantic import BaseModel

from authdb.models.account import Account
from authdb.models.tokens import SessionToken
from authdb.schemas.fields import HexId
from authdb.security.keys import from_hex


class UserAgentFields(BaseModel):
    ua_browser: Optional[str] = None
    ua_browser_version: Optional[str] = None
    ua_os: Optional[str] = None
    ua_os_version: Optional[str] = None
    ua_device_type: Optional[str] = None


class SessionTokenCreate(UserAgentFields):
    data: bytes
    uid: HexId
    created_at: int


class SessionTokenUpdate(UserAgentFields):
    # Every field is overwritten, including the ones left as None
    last_access_time: Optional[int] = None


def _ua_fields(row: SessionToken) -> dict:
    # Empty strings are reported as unset
    return {
        "ua_browser": row.ua_browser or None,
        "ua_browser_version": row.ua_browser_version or None,
        "ua_os": row.ua_os or None,
        "ua_os_version": row.ua_os_version or None,
        "ua_device_type": row.ua_device_type or None,
    }


class SessionSummary(UserAgentFields):
    """One entry of an account's session list."""
    token_id: bytes
    uid: bytes
    created_at: int
    last_access_time: Optional[int] = None

    @classmethod
    def from_row(cls, key: str, row: SessionToken) -> "SessionSummary":
        return cls(
            token_id=from_hex(key),
            uid=from_hex(row.uid),
            created_at=row.created_at,
            last_access_time=row.last_access_time,
            **_ua_fields(row),
        )


class SessionTokenRecord(UserAgentFields):
    """A session token joined with the account fields callers need."""
    token_data: bytes
    uid: bytes
    created_at: int
    last_access_time: Optional[int] = None

    email_verified: bool
    email: str
    email_code: Optional[bytes] = None
    verifier_set_at: int
    locale: Optional[str] = None
    account_created_at: int

    @classmethod
    def from_row(cls, row: SessionToken, account: Account) -> "SessionTokenRecord":
        return cls(
            token_data=row.data,
            uid=from_hex(row.uid),
            created_at=row.created_at,
            last_access_time=row.last_access_time,
            email_verified=account.email_verified,
            email=account.email,
            email_code=account.email_code,
            verifier_set_at=account.verifier_set_at,
            locale=account.locale,
            account_created_at=account.created_at,
            **_ua_fields(row),
        )
