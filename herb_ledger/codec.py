"""
Record codec: Herb <-> ledger value bytes.

The stored value is a flat JSON object, one camelCase key per
attribute, every value a string. Unknown keys are ignored on decode and
missing or null keys read as empty strings, so older or partial records still
load; anything that is not a JSON object of strings is a DecodeError.
"""

from __future__ import annotations

import json
from typing import Optional

from pydantic import ValidationError

from .errors import DecodeError
from .models import Herb


def encode(herb: Herb) -> bytes:
    return json.dumps(herb.to_record(), separators=(",", ":")).encode("utf-8")


def decode(raw: bytes, key: Optional[str] = None) -> Herb:
    try:
        obj = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"value is not JSON ({e})", key=key) from e

    if not isinstance(obj, dict):
        raise DecodeError(f"expected a JSON object, got {type(obj).__name__}", key=key)

    try:
        return Herb.model_validate(obj)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise DecodeError(f"non-string or malformed field(s): {fields}", key=key) from e


def try_decode(raw: Optional[bytes]) -> Optional[Herb]:
    """Decode, returning None instead of raising. Used for history replay."""
    if not raw:
        return None
    try:
        return decode(raw)
    except DecodeError:
        return None
