from authdb.schemas.account import (
    AccountCreate,
    AccountRecord,
    AccountResetData,
    UnlockCodeRecord,
)
from authdb.schemas.device import DeviceInfo, DeviceRecord
from authdb.schemas.session import (
    SessionSummary,
    SessionTokenCreate,
    SessionTokenRecord,
    SessionTokenUpdate,
)
from authdb.schemas.tokens import (
    AccountResetTokenCreate,
    AccountResetTokenRecord,
    KeyFetchTokenCreate,
    KeyFetchTokenRecord,
    PasswordChangeTokenCreate,
    PasswordChangeTokenRecord,
    PasswordForgotTokenCreate,
    PasswordForgotTokenRecord,
)

__all__ = [
    "AccountCreate",
    "AccountRecord",
    "AccountResetData",
    "AccountResetTokenCreate",
    "AccountResetTokenRecord",
    "DeviceInfo",
    "DeviceRecord",
    "KeyFetchTokenCreate",
    "KeyFetchTokenRecord",
    "PasswordChangeTokenCreate",
    "PasswordChangeTokenRecord",
    "PasswordForgotTokenCreate",
    "PasswordForgotTokenRecord",
    "SessionSummary",
    "SessionTokenCreate",
    "SessionTokenRecord",
    "SessionTokenUpdate",
    "UnlockCodeRecord",
]
