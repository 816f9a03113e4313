# authdb/schemas/tokens.py
"""
Payloads and read records for key-fetch and workflow tokens.

Each read record is joined with the few account fields the matching
workflow needs, so callers never do a second lookup.
"""
from typing import Optional

from pydantic import BaseModel

from authdb.models.account import Account
from authdb.models.tokens import KeyFetchToken, PasswordForgotToken
from authdb.schemas.fields import HexId
from authdb.security.keys import from_hex


# ─────────────────────────────────────────────────────────────────────────────
# Create payloads
# ─────────────────────────────────────────────────────────────────────────────
class KeyFetchTokenCreate(BaseModel):
    auth_key: bytes
    uid: HexId
    key_bundle: bytes
    created_at: int


class PasswordForgotTokenCreate(BaseModel):
    data: bytes
    uid: HexId
    pass_code: bytes
    tries: int = 0
    created_at: int


class PasswordChangeTokenCreate(BaseModel):
    data: bytes
    uid: HexId
    created_at: int


class AccountResetTokenCreate(BaseModel):
    """
    token_id is only needed by forgot_password_verified, which creates
    the reset token from this payload alone.
    """
    token_id: Optional[HexId] = None
    data: bytes
    uid: HexId
    created_at: int


# ─────────────────────────────────────────────────────────────────────────────
# Read records
# ─────────────────────────────────────────────────────────────────────────────
class KeyFetchTokenRecord(BaseModel):
    auth_key: bytes
    uid: bytes
    key_bundle: bytes
    created_at: int
    email_verified: bool
    verifier_set_at: int

    @classmethod
    def from_row(cls, row: KeyFetchToken, account: Account) -> "KeyFetchTokenRecord":
        return cls(
            auth_key=row.auth_key,
            uid=from_hex(row.uid),
            key_bundle=row.key_bundle,
            created_at=row.created_at,
            email_verified=account.email_verified,
            verifier_set_at=account.verifier_set_at,
        )


class WorkflowTokenRecord(BaseModel):
    token_data: bytes
    uid: bytes
    created_at: int
    email: str
    verifier_set_at: int

    @classmethod
    def from_row(cls, row, account: Account):
        return cls(
            token_data=row.token_data,
            uid=from_hex(row.uid),
            created_at=row.created_at,
            email=account.email,
            verifier_set_at=account.verifier_set_at,
        )


class PasswordChangeTokenRecord(WorkflowTokenRecord):
    pass


class AccountResetTokenRecord(WorkflowTokenRecord):
    pass


class PasswordForgotTokenRecord(WorkflowTokenRecord):
    pass_code: bytes
    tries: int

    @classmethod
    def from_row(cls, row: PasswordForgotToken, account: Account) -> "PasswordForgotTokenRecord":
        return cls(
            token_data=row.token_data,
            uid=from_hex(row.uid),
            pass_code=row.pass_code,
            tries=row.tries,
            created_at=row.created_at,
            email=account.email,
            verifier_set_at=account.verifier_set_at,
        )
