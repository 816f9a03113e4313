# authdb/models/device.py
from typing import Optional

from authdb.db.base import Row

# Fields a device-info payload may set on a device row
DEVICE_FIELDS = (
    "session_token_id",
    "name",
    "type",
    "created_at",
    "callback_url",
    "callback_public_key",
)


class Device(Row):
    id: str
    uid: str

    # Forward half of the session link. The session's device_key is the other half
    session_token_id: Optional[str] = None

    name: Optional[str] = None
    type: Optional[str] = None
    created_at: Optional[int] = None
    callback_url: Optional[str] = None
    callback_public_key: Optional[bytes] = None

    # Copied from the bound session so device listings need no join
    ua_browser: Optional[str] = None
    ua_browser_version: Optional[str] = None
    ua_os: Optional[str] = None
    ua_os_version: Optional[str] = None
    ua_device_type: Optional[str] = None
    last_access_time: Optional[int] = None
