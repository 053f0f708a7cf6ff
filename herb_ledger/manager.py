"""
Record Manager - create and mutate Herb records.

Each method reads what it needs, validates, and performs at most one
write through the store. The caller owns the transaction; an exception
anywhere before commit leaves the ledger unchanged.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from herb_ledger import INITIAL_STATUS

from .codec import decode, encode
from .errors import AlreadyExists, InvalidRecord, NotFound
from .models import Herb, now_utc
from .store import LedgerStore
from .validation import OpaqueFieldValidator, RecordValidator

logger = logging.getLogger(__name__)


class RecordManager:
    """
    Stateless rules for the Herb lifecycle.

    Usage:
        manager = RecordManager()
        with store.transaction():
            manager.create(store, "H1", name="Tulsi", region="Kerala")
    """

    def __init__(
        self,
        validator: Optional[RecordValidator] = None,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.validator = validator or OpaqueFieldValidator()
        self.clock = clock or now_utc

    def exists(self, store: LedgerStore, herb_id: str) -> bool:
        return store.get(herb_id) is not None

    def get(self, store: LedgerStore, herb_id: str) -> Herb:
        raw = store.get(herb_id)
        if raw is None:
            raise NotFound(herb_id)
        return decode(raw, key=herb_id)

    def create(
        self,
        store: LedgerStore,
        herb_id: str,
        name: str = "",
        scientific_name: str = "",
        farmer: str = "",
        quantity: str = "",
        latitude: str = "",
        longitude: str = "",
        region: str = "",
        place_name: str = "",
        growth_stage: str = "",
        planting_date: str = "",
    ) -> Herb:
        if not herb_id:
            raise InvalidRecord("herbID", "must be non-empty")
        if self.exists(store, herb_id):
            raise AlreadyExists(herb_id)

        herb = Herb(
            herb_id=herb_id,
            name=name,
            scientific_name=scientific_name,
            farmer=farmer,
            quantity=quantity,
            latitude=latitude,
            longitude=longitude,
            region=region,
            place_name=place_name,
            growth_stage=growth_stage,
            planting_date=planting_date,
            status=INITIAL_STATUS,
            timestamp=self.clock(),
        )
        self._write(store, herb)
        logger.info(f"Created herb {herb_id} ({name or 'unnamed'}, region={region or '-'})")
        return herb

    def update_growth_stage(self, store: LedgerStore, herb_id: str, new_stage: str) -> Herb:
        # Any stage string is accepted; stages are not ordered here.
        herb = self.get(store, herb_id)
        herb = herb.model_copy(update={"growth_stage": new_stage, "timestamp": self.clock()})
        self._write(store, herb)
        logger.info(f"Herb {herb_id} growth stage -> {new_stage!r}")
        return herb

    def update_lab_report(self, store: LedgerStore, herb_id: str, lab_hash: str, status: str) -> Herb:
        # Both fields are set together; status may move to any value, earlier ones included.
        herb = self.get(store, herb_id)
        herb = herb.model_copy(
            update={"lab_report_hash": lab_hash, "status": status, "timestamp": self.clock()}
        )
        self._write(store, herb)
        logger.info(f"Herb {herb_id} lab report {lab_hash[:16]!r}, status -> {status!r}")
        return herb

    def _write(self, store: LedgerStore, herb: Herb) -> None:
        self.validator.validate(herb)
        store.put(herb.herb_id, encode(herb))
