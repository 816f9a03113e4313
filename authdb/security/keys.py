# authdb/security/keys.py
"""
Key, identifier and credential helpers.

This module handles:
- Identifier normalisation (bytes or hex text -> lowercase hex key)
- Email / openId normalisation for the lookup indices
- Verify-hash comparison (constant-time)

Hashing and key derivation happen in the caller. The store only ever
compares values it was given.
"""
import secrets
from typing import Optional, Union

Identifier = Union[bytes, bytearray, memoryview, str]

# Stored in place of a device's callback public key when the device
# registers with an empty one
ZERO_PUBLIC_KEY = bytes(32)


def to_hex(identifier: Identifier) -> str:
    """
    Normalise an identifier to the lowercase hex key used by every table.

    Args:
        identifier: Raw bytes, or text that is already hex encoded

    Returns:
        Lowercase hex string

    Raises:
        ValueError: If text is not valid hex
    """
    if isinstance(identifier, str):
        return bytes.fromhex(identifier).hex()
    return bytes(identifier).hex()


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Normalise a binary value that may arrive hex encoded.

    Raises:
        ValueError: If text is not valid hex
    """
    if isinstance(value, str):
        return bytes.fromhex(value)
    return bytes(value)


def from_hex(key: str) -> bytes:
    """Rebuild the raw identifier from a table key."""
    return bytes.fromhex(key)


def is_blank(identifier: Optional[Identifier]) -> bool:
    """True for None and for zero-length identifiers."""
    return identifier is None or len(identifier) == 0


def _as_text(value: Union[bytes, str]) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8")
    return value


def normalize_email(email: Union[bytes, str]) -> str:
    """Case-fold an email address for the uniqueness index."""
    return _as_text(email).lower()


def normalize_open_id(open_id: Union[bytes, str]) -> str:
    """OpenIds are matched exactly; only the encoding is normalised."""
    return _as_text(open_id)


def normalize_public_key(key: Optional[Union[bytes, str]]) -> Optional[bytes]:
    """
    Map an empty callback public key to the all-zero sentinel.

    An empty key means "registered without a key", which is stored
    explicitly rather than as a missing value.
    """
    if key is None:
        return None
    if len(key) == 0:
        return ZERO_PUBLIC_KEY
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings in constant time.

    Args:
        a: Stored value
        b: Provided value

    Returns:
        True if the values match, False otherwise
    """
    if len(a) != len(b):
        # Still do the comparison to maintain constant time
        secrets.compare_digest(a, a)
        return False
    return secrets.compare_digest(a, b)


def verify_hash_matches(stored: Optional[bytes], provided: Optional[Union[bytes, str]]) -> bool:
    """Check a caller-supplied verify hash against the stored one."""
    if stored is None or provided is None:
        return False
    try:
        provided = to_bytes(provided)
    except ValueError:
        return False
    return constant_time_compare(bytes(stored), provided)
