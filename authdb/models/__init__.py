from authdb.models.device import DEVICE_FIELDS, Device
from authdb.models.account import Account, UnlockCode
from authdb.models.tokens import (
    AccountResetToken,
    KeyFetchToken,
    PasswordChangeToken,
    PasswordForgotToken,
    SessionToken,
)

__all__ = [
    "Account",
    "AccountResetToken",
    "DEVICE_FIELDS",
    "Device",
    "KeyFetchToken",
    "PasswordChangeToken",
    "PasswordForgotToken",
    "SessionToken",
    "UnlockCode",
]
