# authdb/schemas/device.py
from typing import Optional

from pydantic import BaseModel, field_validator

from authdb.models.device import Device
from authdb.schemas.fields import HexId
from authdb.security.keys import from_hex, normalize_public_key


class DeviceInfo(BaseModel):
    """
    Partial device payload for create_device / update_device.

    Fields left out (or passed as None) keep the device's current value.
    An empty callback_public_key is stored as 32 zero bytes.
    """
    session_token_id: Optional[HexId] = None
    name: Optional[str] = None
    type: Optional[str] = None
    created_at: Optional[int] = None
    callback_url: Optional[str] = None
    callback_public_key: Optional[bytes] = None

    @field_validator("callback_public_key", mode="before")
    @classmethod
    def zero_empty_key(cls, v):
        return normalize_public_key(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class DeviceRecord(BaseModel):
    id: bytes
    uid: bytes
    session_token_id: Optional[bytes] = None
    name: Optional[str] = None
    type: Optional[str] = None
    created_at: Optional[int] = None
    callback_url: Optional[str] = None
    callback_public_key: Optional[bytes] = None
    ua_browser: Optional[str] = None
    ua_browser_version: Optional[str] = None
    ua_os: Optional[str] = None
    ua_os_version: Optional[str] = None
    ua_device_type: Optional[str] = None
    last_access_time: Optional[int] = None

    @classmethod
    def from_row(cls, row: Device) -> "DeviceRecord":
        data = row.model_dump(exclude={"id", "uid", "session_token_id"})
        session_token_id = row.session_token_id
        return cls(
            id=from_hex(row.id),
            uid=from_hex(row.uid),
            session_token_id=from_hex(session_token_id) if session_token_id else None,
            **data,
        )
