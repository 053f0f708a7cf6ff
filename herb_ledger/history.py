from __future__ import annotations

import logging
from typing import List

from .codec import try_decode
from .models import HistoryEntry
from .store import LedgerStore

logger = logging.getLogger(__name__)


class HistoryReader:
    """
    Timeline of one record, in the order the ledger returns it.

    Unlike listing, a historical value that no longer decodes does not
    fail the call: that entry is kept with value=None.
    """

    def get_history(self, store: LedgerStore, herb_id: str) -> List[HistoryEntry]:
        entries = []
        for mod in store.history(herb_id):
            value = None if mod.is_delete else try_decode(mod.value)
            if value is None and not mod.is_delete:
                logger.warning(f"History of {herb_id}: tx {mod.tx_id[:12]} value does not decode, omitted")
            entries.append(
                HistoryEntry(
                    tx_id=mod.tx_id,
                    timestamp=mod.timestamp,
                    is_delete=mod.is_delete,
                    value=value,
                )
            )
        return entries
