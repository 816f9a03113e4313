# authdb/db/memory.py
"""
In-memory implementation of the account data-access contract.

MemoryStore keeps every table in process memory and offers the same
operations as a durable backend. State lives on the instance, so
independent stores can coexist (one per test, for example).

Identifiers may be passed as bytes or as hex text. Mutations return
None; reads return pydantic records from authdb.schemas. Failures raise
NotFound, Duplicate or IncorrectPassword from authdb.core.errors.
"""
import asyncio
import logging
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel

from authdb.core.config import Settings, get_settings, resolve_settings
from authdb.core.errors import Duplicate, IncorrectPassword, NotFound
from authdb.db import relations
from authdb.db.session import Tables, transaction
from authdb.models.account import Account, UnlockCode
from authdb.models.device import DEVICE_FIELDS, Device
from authdb.models.tokens import (
    AccountResetToken,
    KeyFetchToken,
    PasswordChangeToken,
    PasswordForgotToken,
    SessionToken,
)
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
from authdb.security.keys import (
    Identifier,
    from_hex,
    is_blank,
    normalize_email,
    normalize_open_id,
    to_hex,
    verify_hash_matches,
)

logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], BaseModel]


class MemoryStore:
    """Non-persistent store for accounts, tokens, devices and lock state"""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or get_settings()
        self._tables = Tables()
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, options: Union[Settings, Mapping[str, Any], None] = None) -> "MemoryStore":
        """
        Build a ready-to-use store.

        ``options`` mirrors a durable backend's connection options. It is
        validated into Settings but nothing is opened.
        """
        config = resolve_settings(options)
        logger.debug(f"Memory store connected (environment={config.ENVIRONMENT})")
        return cls(config)

    # ─────────────────────────────────────────────────────────────────────
    # Internal lookups. Callers hold the lock.
    # ─────────────────────────────────────────────────────────────────────
    def _find_account(self, uid: Optional[Identifier]) -> Optional[Account]:
        if is_blank(uid):
            return None
        return self._tables.accounts.get(to_hex(uid))

    def _account_row(self, uid: Optional[Identifier]) -> Account:
        account = self._find_account(uid)
        if account is None:
            raise NotFound()
        return account

    def _owner(self, row) -> Account:
        # Token rows are cascaded with their account, so the owner exists
        return self._account_row(row.uid)

    def _verify_email(self, uid: Identifier) -> None:
        account = self._find_account(uid)
        if account is not None:
            account.email_verified = True

    def _unlock_account(self, uid: Identifier) -> None:
        # Missing accounts are ignored: callers check existence first
        account = self._find_account(uid)
        if account is None:
            return
        account.locked_at = None
        self._tables.account_unlock_codes.pop(account.uid)

    def _insert_account_reset_token(self, key: str, token: AccountResetTokenCreate) -> None:
        # Only one reset token per account
        table = self._tables.account_reset_tokens
        table.delete_by_owner(token.uid)
        table.insert(key, AccountResetToken(
            token_data=token.data,
            uid=token.uid,
            created_at=token.created_at,
        ))

    def _apply_device_info(self, device: Device, info: DeviceInfo) -> Device:
        """
        Merge a partial payload into a device row and maintain its session link.

        With no session_token_id in the payload the device keeps (and
        refreshes) its current binding. Every check runs before the first
        write, so a rejected payload leaves the tables untouched.

        Raises:
            NotFound: The requested session belongs to another account
            Duplicate: The requested session already serves another device
        """
        changes = info.changes()
        requested = changes.get("session_token_id")
        session_key = requested or device.session_token_id
        session = self._tables.session_tokens.get(session_key)

        if session is not None and not relations.belongs_to(session, device):
            if requested:
                raise NotFound()
            # A stored id that now names a foreign session is left dangling
            session = None

        relations.ensure_available(session, device.id)

        if device.session_token_id and device.session_token_id != session_key:
            relations.release_session(self._tables, device.session_token_id)

        for field in DEVICE_FIELDS:
            if field in changes:
                setattr(device, field, changes[field])

        if session is not None:
            relations.link(session_key, session, device)
        return device

    # ─────────────────────────────────────────────────────────────────────
    # CREATE
    # ─────────────────────────────────────────────────────────────────────
    async def create_account(self, uid: Identifier, data: Payload) -> None:
        data = AccountCreate.model_validate(data)
        key = to_hex(uid)

        async with self._lock:
            t = self._tables
            if key in t.accounts:
                raise Duplicate()
            if t.find_uid_by_email(data.normalized_email):
                raise Duplicate()
            if data.open_id and t.find_uid_by_open_id(data.open_id):
                raise Duplicate()

            t.insert_account(Account(uid=key, **data.model_dump()))

        logger.info(f"Account created: uid={key}")

    async def create_session_token(self, token_id: Identifier, token: Payload) -> None:
        token = SessionTokenCreate.model_validate(token)
        key = to_hex(token_id)

        async with self._lock:
            if key in self._tables.session_tokens:
                raise Duplicate()

            self._tables.session_tokens.insert(key, SessionToken(
                last_access_time=token.created_at,
                **token.model_dump(),
            ))

    async def create_key_fetch_token(self, token_id: Identifier, token: Payload) -> None:
        token = KeyFetchTokenCreate.model_validate(token)
        key = to_hex(token_id)

        async with self._lock:
            if key in self._tables.key_fetch_tokens:
                raise Duplicate()

            self._tables.key_fetch_tokens.insert(key, KeyFetchToken(**token.model_dump()))

    async def create_password_forgot_token(self, token_id: Identifier, token: Payload) -> None:
        token = PasswordForgotTokenCreate.model_validate(token)
        key = to_hex(token_id)

        async with self._lock:
            table = self._tables.password_forgot_tokens
            if key in table:
                raise Duplicate()

            # Only one forgot token per account
            table.delete_by_owner(token.uid)
            table.insert(key, PasswordForgotToken(
                token_data=token.data,
                uid=token.uid,
                pass_code=token.pass_code,
                tries=token.tries,
                created_at=token.created_at,
            ))

    async def create_password_change_token(self, token_id: Identifier, token: Payload) -> None:
        token = PasswordChangeTokenCreate.model_validate(token)
        key = to_hex(token_id)

        async with self._lock:
            table = self._tables.password_change_tokens
            if key in table:
                raise Duplicate()

            # Only one change token per account
            table.delete_by_owner(token.uid)
            table.insert(key, PasswordChangeToken(
                token_data=token.data,
                uid=token.uid,
                created_at=token.created_at,
            ))

    async def create_account_reset_token(self, token_id: Identifier, token: Payload) -> None:
        token = AccountResetTokenCreate.model_validate(token)

        async with self._lock:
            self._insert_account_reset_token(to_hex(token_id), token)

    async def create_device(self, uid: Identifier, device_id: Identifier, info: Payload = None) -> None:
        info = DeviceInfo.model_validate(info or {})
        device_key = to_hex(device_id)

        async with self._lock:
            account = self._account_row(uid)
            if device_key in account.devices:
                raise Duplicate()

            device = Device(id=device_key, uid=account.uid)
            account.devices[device_key] = self._apply_device_info(device, info)

        logger.debug(f"Device created: uid={account.uid} device={device_key}")

    # ─────────────────────────────────────────────────────────────────────
    # UPDATE
    # ─────────────────────────────────────────────────────────────────────
    async def update_device(self, uid: Identifier, device_id: Identifier, info: Payload = None) -> None:
        info = DeviceInfo.model_validate(info or {})
        device_key = to_hex(device_id)

        async with self._lock:
            account = self._account_row(uid)
            device = account.devices.get(device_key)
            if device is None:
                raise NotFound()

            self._apply_device_info(device, info)

    async def update_session_token(self, token_id: Identifier, data: Payload) -> None:
        data = SessionTokenUpdate.model_validate(data)

        async with self._lock:
            session = self._tables.session_tokens.get(to_hex(token_id))
            if session is None:
                raise NotFound()

            for field, value in data.model_dump().items():
                setattr(session, field, value)

    async def update_password_forgot_token(self, token_id: Identifier, tries: int) -> None:
        async with self._lock:
            token = self._tables.password_forgot_tokens.get(to_hex(token_id))
            if token is None:
                raise NotFound()
            token.tries = tries

    async def update_locale(self, uid: Identifier, locale: Optional[str]) -> None:
        async with self._lock:
            self._account_row(uid).locale = locale

    # ─────────────────────────────────────────────────────────────────────
    # DELETE
    # ─────────────────────────────────────────────────────────────────────
    async def delete_session_token(self, token_id: Identifier) -> None:
        key = to_hex(token_id)

        async with self._lock:
            session = self._tables.session_tokens.pop(key)
            if session is not None:
                relations.release_device(self._tables, key, session)

    async def delete_key_fetch_token(self, token_id: Identifier) -> None:
        async with self._lock:
            self._tables.key_fetch_tokens.pop(to_hex(token_id))

    async def delete_password_forgot_token(self, token_id: Identifier) -> None:
        async with self._lock:
            self._tables.password_forgot_tokens.pop(to_hex(token_id))

    async def delete_password_change_token(self, token_id: Identifier) -> None:
        async with self._lock:
            self._tables.password_change_tokens.pop(to_hex(token_id))

    async def delete_account_reset_token(self, token_id: Identifier) -> None:
        async with self._lock:
            self._tables.account_reset_tokens.pop(to_hex(token_id))

    async def delete_device(self, uid: Identifier, device_id: Identifier) -> None:
        device_key = to_hex(device_id)

        async with self._lock:
            account = self._account_row(uid)
            device = account.devices.get(device_key)
            if device is None:
                raise NotFound()

            # The device's session goes with it
            session = self._tables.session_tokens.get(device.session_token_id)
            if relations.belongs_to(session, device):
                self._tables.session_tokens.pop(device.session_token_id)
            del account.devices[device_key]

        logger.debug(f"Device deleted: uid={account.uid} device={device_key}")

    async def delete_account(self, uid: Identifier) -> None:
        async with transaction(self._lock, self._tables) as t:
            account = self._account_row(uid)
            t.delete_owned_rows(account.uid)
            t.remove_account(account)

        logger.info(f"Account deleted: uid={account.uid}")

    # ─────────────────────────────────────────────────────────────────────
    # READ
    # ─────────────────────────────────────────────────────────────────────
    async def account_exists(self, email: Union[bytes, str]) -> None:
        async with self._lock:
            if not self._tables.find_uid_by_email(normalize_email(email)):
                raise NotFound()

    async def check_password(self, uid: Identifier, verify_hash: Union[bytes, str]) -> bytes:
        """
        Compare a verify hash with the stored one.

        An unknown account and a wrong hash both raise IncorrectPassword,
        so the result does not reveal whether the account exists.
        """
        async with self._lock:
            account = self._find_account(uid)
            if account is None or not verify_hash_matches(account.verify_hash, verify_hash):
                raise IncorrectPassword()
            return from_hex(account.uid)

    async def account(self, uid: Identifier) -> AccountRecord:
        async with self._lock:
            return AccountRecord.from_row(self._account_row(uid))

    async def email_record(self, email: Union[bytes, str]) -> AccountRecord:
        async with self._lock:
            uid = self._tables.find_uid_by_email(normalize_email(email))
            return AccountRecord.from_row(self._account_row(uid))

    async def open_id_record(self, open_id: Union[bytes, str]) -> AccountRecord:
        async with self._lock:
            uid = self._tables.find_uid_by_open_id(normalize_open_id(open_id))
            return AccountRecord.from_row(self._account_row(uid))

    async def account_devices(self, uid: Identifier) -> List[DeviceRecord]:
        async with self._lock:
            # Devices of a missing account are simply "no devices"
            account = self._find_account(uid)
            if account is None:
                return []

            records = []
            for device in account.devices.values():
                session = self._tables.session_tokens.get(device.session_token_id)
                if relations.belongs_to(session, device):
                    relations.mirror(session, device)
                records.append(DeviceRecord.from_row(device))
            return records

    async def sessions(self, uid: Identifier) -> List[SessionSummary]:
        owner = to_hex(uid)
        async with self._lock:
            return [
                SessionSummary.from_row(key, session)
                for key, session in self._tables.session_tokens.owned_by(owner)
            ]

    async def session_token(self, token_id: Identifier) -> SessionTokenRecord:
        async with self._lock:
            session = self._tables.session_tokens.get(to_hex(token_id))
            if session is None:
                raise NotFound()
            return SessionTokenRecord.from_row(session, self._owner(session))

    async def key_fetch_token(self, token_id: Identifier) -> KeyFetchTokenRecord:
        async with self._lock:
            token = self._tables.key_fetch_tokens.get(to_hex(token_id))
            if token is None:
                raise NotFound()
            return KeyFetchTokenRecord.from_row(token, self._owner(token))

    async def password_forgot_token(self, token_id: Identifier) -> PasswordForgotTokenRecord:
        async with self._lock:
            token = self._tables.password_forgot_tokens.get(to_hex(token_id))
            if token is None:
                raise NotFound()
            return PasswordForgotTokenRecord.from_row(token, self._owner(token))

    async def password_change_token(self, token_id: Identifier) -> PasswordChangeTokenRecord:
        async with self._lock:
            token = self._tables.password_change_tokens.get(to_hex(token_id))
            if token is None:
                raise NotFound()
            return PasswordChangeTokenRecord.from_row(token, self._owner(token))

    async def account_reset_token(self, token_id: Identifier) -> AccountResetTokenRecord:
        async with self._lock:
            token = self._tables.account_reset_tokens.get(to_hex(token_id))
            if token is None:
                raise NotFound()
            return AccountResetTokenRecord.from_row(token, self._owner(token))

    async def unlock_code(self, uid: Identifier) -> UnlockCodeRecord:
        async with self._lock:
            code = self._tables.account_unlock_codes.get(to_hex(uid))
            if code is None:
                raise NotFound()
            return UnlockCodeRecord.from_row(code)

    # ─────────────────────────────────────────────────────────────────────
    # BATCH
    # ─────────────────────────────────────────────────────────────────────
    async def verify_email(self, uid: Identifier) -> None:
        async with self._lock:
            self._verify_email(uid)

    async def forgot_password_verified(self, token_id: Identifier, reset_token: Payload) -> None:
        """
        Finish the forgot-password flow in one step.

        Deletes the forgot token, installs the account reset token, marks
        the email verified and unlocks the account. Either all of it
        happens or none of it does.
        """
        reset_token = AccountResetTokenCreate.model_validate(reset_token)
        if reset_token.token_id is None:
            raise ValueError("reset_token.token_id is required")

        async with transaction(self._lock, self._tables) as t:
            t.password_forgot_tokens.pop(to_hex(token_id))
            self._insert_account_reset_token(reset_token.token_id, reset_token)
            self._verify_email(reset_token.uid)
            self._unlock_account(reset_token.uid)

        logger.info(f"Forgot-password flow verified: uid={reset_token.uid}")

    async def reset_account(self, uid: Identifier, data: Payload) -> None:
        data = AccountResetData.model_validate(data)

        async with transaction(self._lock, self._tables) as t:
            account = self._account_row(uid)
            t.delete_owned_rows(account.uid)

            account.verify_hash = data.verify_hash
            account.auth_salt = data.auth_salt
            account.wrap_wrap_kb = data.wrap_wrap_kb
            account.verifier_set_at = data.verifier_set_at
            account.verifier_version = data.verifier_version
            account.devices = {}

        logger.info(f"Account reset: uid={account.uid}")

    async def lock_account(self, uid: Identifier, locked_at: int, unlock_code: Union[bytes, str]) -> None:
        async with self._lock:
            account = self._account_row(uid)
            code = UnlockCode(uid=account.uid, unlock_code=unlock_code)
            account.locked_at = locked_at
            self._tables.account_unlock_codes.insert(account.uid, code)

        logger.info(f"Account locked: uid={account.uid}")

    async def unlock_account(self, uid: Identifier) -> None:
        async with self._lock:
            self._unlock_account(uid)

    # ─────────────────────────────────────────────────────────────────────
    # UTILITY
    # ─────────────────────────────────────────────────────────────────────
    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        # Nothing is held open
        logger.debug("Memory store closed")


async def connect(options: Union[Settings, Mapping[str, Any], None] = None) -> MemoryStore:
    """Module-level entry point, matching durable backends."""
    return await MemoryStore.connect(options)
