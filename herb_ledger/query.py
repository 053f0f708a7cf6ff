from __future__ import annotations

import logging
from typing import List

from .codec import decode
from .models import Herb
from .store import LedgerStore

logger = logging.getLogger(__name__)


class QueryEngine:
    """
    Ad-hoc views over a full ledger scan.

    There is no index: every query walks every key. Results keep the
    scan order (lexicographic by key). A single undecodable value aborts
    the whole listing rather than returning a partial result.
    """

    def list_all(self, store: LedgerStore) -> List[Herb]:
        out = [decode(raw, key=key) for key, raw in store.range_scan("", "")]
        logger.debug(f"Full scan returned {len(out)} herb(s)")
        return out

    def by_region(self, store: LedgerStore, region: str) -> List[Herb]:
        """Exact region match, ignoring case."""
        wanted = region.casefold()
        return [h for h in self.list_all(store) if h.region.casefold() == wanted]

    def by_name(self, store: LedgerStore, name_substr: str) -> List[Herb]:
        """Substring of name OR scientific name, ignoring case."""
        needle = name_substr.casefold()
        return [
            h for h in self.list_all(store)
            if needle in h.name.casefold() or needle in h.scientific_name.casefold()
        ]
