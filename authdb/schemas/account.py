# authdb/schemas/account.py
"""
Payloads and read records for accounts.

verify_hash appears only on the create and reset payloads. No record
returned to a caller has the field.
"""
from typing import Optional

from pydantic import BaseModel, model_validator

from authdb.models.account import Account, UnlockCode
from authdb.schemas.fields import HexBytes, NormalizedEmail, OpenId
from authdb.security.keys import from_hex, normalize_email


class AccountCreate(BaseModel):
    """
    Data for a new account.

    normalized_email defaults to the lower-cased email when omitted.
    """
    email: str
    normalized_email: Optional[NormalizedEmail] = None
    open_id: Optional[OpenId] = None
    email_code: Optional[bytes] = None
    email_verified: bool = False
    verify_hash: HexBytes
    auth_salt: bytes
    wrap_wrap_kb: bytes
    verifier_set_at: int
    verifier_version: int = 1
    locale: Optional[str] = None
    created_at: int

    @model_validator(mode="after")
    def default_normalized_email(self) -> "AccountCreate":
        if self.normalized_email is None:
            self.normalized_email = normalize_email(self.email)
        return self


class AccountResetData(BaseModel):
    """Credential fields replaced by reset_account."""
    verify_hash: HexBytes
    auth_salt: bytes
    wrap_wrap_kb: bytes
    verifier_set_at: int
    verifier_version: int = 1


class AccountRecord(BaseModel):
    """Filtered view of an account (no verify hash, no devices)."""
    uid: bytes
    normalized_email: str
    email: str
    open_id: Optional[str] = None
    email_code: Optional[bytes] = None
    email_verified: bool
    auth_salt: bytes
    wrap_wrap_kb: bytes
    verifier_set_at: int
    verifier_version: int
    locale: Optional[str] = None
    created_at: int
    locked_at: Optional[int] = None

    @classmethod
    def from_row(cls, row: Account) -> "AccountRecord":
        data = row.model_dump(exclude={"uid", "verify_hash", "devices"})
        return cls(uid=from_hex(row.uid), **data)


class UnlockCodeRecord(BaseModel):
    uid: bytes
    unlock_code: bytes

    @classmethod
    def from_row(cls, row: UnlockCode) -> "UnlockCodeRecord":
        return cls(uid=from_hex(row.uid), unlock_code=row.unlock_code)
