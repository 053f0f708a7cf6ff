"""
Field validation seam.

Records are stored with every attribute as an opaque string. The default
validator keeps that contract and only insists on a key. A stricter
reading (parsed dates, numeric coordinates) can be swapped in without
touching the stored encoding.
"""

from __future__ import annotations

import math
from datetime import date, datetime

from .errors import InvalidRecord
from .models import Herb


class RecordValidator:
    """Checks a record before it is written. Raises InvalidRecord."""

    def validate(self, herb: Herb) -> None:
        raise NotImplementedError


class OpaqueFieldValidator(RecordValidator):
    """Accepts every field verbatim; only the key must be present."""

    def validate(self, herb: Herb) -> None:
        if not herb.herb_id:
            raise InvalidRecord("herbID", "must be non-empty")


def _parse_date(value: str) -> None:
    try:
        date.fromisoformat(value)
        return
    except ValueError:
        pass
    datetime.fromisoformat(value.replace("Z", "+00:00"))


def _parse_float(value: str, field: str, lo: float | None = None, hi: float | None = None) -> None:
    try:
        v = float(value)
    except ValueError:
        raise InvalidRecord(field, f"{value!r} is not a number")
    if not math.isfinite(v):
        raise InvalidRecord(field, f"{value!r} is not a finite number")
    if lo is not None and v < lo:
        raise InvalidRecord(field, f"{v} is below {lo}")
    if hi is not None and v > hi:
        raise InvalidRecord(field, f"{v} is above {hi}")


class StrictFieldValidator(OpaqueFieldValidator):
    """
    Opt-in typed reading of the string fields.

    Empty optional values pass; non-empty ones must parse:
    - plantingDate / harvestDate: YYYY-MM-DD or RFC3339
    - latitude in [-90, 90], longitude in [-180, 180]
    - quantity: non-negative number
    """

    def validate(self, herb: Herb) -> None:
        super().validate(herb)
        for field, value in (("plantingDate", herb.planting_date), ("harvestDate", herb.harvest_date)):
            if not value:
                continue
            try:
                _parse_date(value)
            except ValueError:
                raise InvalidRecord(field, f"{value!r} is not a date")
        if herb.latitude:
            _parse_float(herb.latitude, "latitude", -90.0, 90.0)
        if herb.longitude:
            _parse_float(herb.longitude, "longitude", -180.0, 180.0)
        if herb.quantity:
            _parse_float(herb.quantity, "quantity", lo=0.0)
