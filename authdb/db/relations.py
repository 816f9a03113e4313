# authdb/db/relations.py
"""
The session <-> device link.

A device names its session through Device.session_token_id and the
session names the device through SessionToken.device_key. Both halves
are only ever written here, so they change together.
"""
from typing import Optional

from authdb.core.errors import Duplicate
from authdb.db.session import Tables
from authdb.models.device import Device
from authdb.models.tokens import SessionToken

# Session fields copied onto a bound device
SESSION_FIELDS = (
    "ua_browser",
    "ua_browser_version",
    "ua_os",
    "ua_os_version",
    "ua_device_type",
    "last_access_time",
)


def belongs_to(session: Optional[SessionToken], device: Device) -> bool:
    """True when the session exists and has the same owner as the device."""
    return session is not None and session.uid == device.uid


def ensure_available(session: Optional[SessionToken], device_key: str) -> None:
    """Raise Duplicate if the session already serves a different device."""
    if session is not None and session.device_key and session.device_key != device_key:
        raise Duplicate()


def mirror(session: SessionToken, device: Device) -> None:
    for field in SESSION_FIELDS:
        setattr(device, field, getattr(session, field))


def link(session_key: str, session: SessionToken, device: Device) -> None:
    ensure_available(session, device.id)
    device.session_token_id = session_key
    mirror(session, device)
    session.device_key = device.id


def release_session(tables: Tables, session_key: str) -> None:
    """Clear the back-reference of a session a device is moving away from."""
    session = tables.session_tokens.get(session_key)
    if session is not None:
        session.device_key = None


def release_device(tables: Tables, session_key: str, session: SessionToken) -> None:
    """Clear the forward reference of the device bound to ``session``."""
    if not session.device_key:
        return
    account = tables.accounts.get(session.uid)
    device = account.devices.get(session.device_key) if account is not None else None
    if device is not None and device.session_token_id == session_key:
        device.session_token_id = None
    session.device_key = None
