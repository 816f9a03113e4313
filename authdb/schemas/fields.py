# authdb/schemas/fields.py
"""Reusable field types for payload schemas."""
from typing import Annotated

from pydantic import BeforeValidator

from authdb.security.keys import normalize_email, normalize_open_id, to_bytes, to_hex

# Accepts raw bytes or hex text and stores the lowercase hex key
HexId = Annotated[str, BeforeValidator(to_hex)]

# Accepts raw bytes or hex text and stores the raw bytes
HexBytes = Annotated[bytes, BeforeValidator(to_bytes)]

# Accepts bytes or text; lower-cased for the uniqueness index
NormalizedEmail = Annotated[str, BeforeValidator(normalize_email)]

OpenId = Annotated[str, BeforeValidator(normalize_open_id)]
