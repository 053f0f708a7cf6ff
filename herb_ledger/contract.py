"""
Herb Passport contract - the public operation surface.

HerbContract is built once per process and holds no ledger state. Every
operation receives the LedgerStore explicitly and runs inside exactly
one store transaction, so a failure at any point commits nothing.

Operations can be called directly (add_herb, get_herb, ...) or by
transaction name with string arguments through invoke(), the way a
ledger client submits them:

    contract.invoke(store, "AddHerb", ["H1", "Tulsi", "Ocimum tenuiflorum", ...])
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .errors import InvalidInvocation
from .history import HistoryReader
from .manager import RecordManager
from .models import Herb, HistoryEntry
from .query import QueryEngine
from .store import LedgerStore
from .validation import RecordValidator

logger = logging.getLogger(__name__)


class HerbContract:

    def __init__(
        self,
        validator: Optional[RecordValidator] = None,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.records = RecordManager(validator=validator, clock=clock)
        self.queries = QueryEngine()
        self.history = HistoryReader()

    def _run(self, store: LedgerStore, op: str, fn: Callable[[], Any]) -> Any:
        try:
            with store.transaction() as tx:
                result = fn()
        except Exception as e:
            logger.error(f"{op} aborted: {type(e).__name__}: {e}")
            raise
        logger.debug(f"{op} ok (tx {tx.tx_id[:12]})")
        return result

    # --- Record Manager ----------------------------------------------------

    def add_herb(
        self,
        store: LedgerStore,
        herb_id: str,
        name: str,
        scientific_name: str,
        farmer: str,
        quantity: str,
        latitude: str,
        longitude: str,
        region: str,
        place_name: str,
        growth_stage: str,
        planting_date: str,
    ) -> None:
        self._run(store, "AddHerb", lambda: self.records.create(
            store,
            herb_id,
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
        ))

    def update_growth_stage(self, store: LedgerStore, herb_id: str, new_stage: str) -> None:
        self._run(store, "UpdateGrowthStage",
                  lambda: self.records.update_growth_stage(store, herb_id, new_stage))

    def update_lab_report(self, store: LedgerStore, herb_id: str, lab_hash: str, status: str) -> None:
        self._run(store, "UpdateLabReport",
                  lambda: self.records.update_lab_report(store, herb_id, lab_hash, status))

    def herb_exists(self, store: LedgerStore, herb_id: str) -> bool:
        return self._run(store, "HerbExists", lambda: self.records.exists(store, herb_id))

    def get_herb(self, store: LedgerStore, herb_id: str) -> Herb:
        return self._run(store, "GetHerb", lambda: self.records.get(store, herb_id))

    # --- Query Engine ------------------------------------------------------

    def get_all_herbs(self, store: LedgerStore) -> List[Herb]:
        return self._run(store, "GetAllHerbs", lambda: self.queries.list_all(store))

    def query_herbs_by_region(self, store: LedgerStore, region: str) -> List[Herb]:
        return self._run(store, "QueryHerbsByRegion", lambda: self.queries.by_region(store, region))

    def query_herbs_by_name(self, store: LedgerStore, name_substr: str) -> List[Herb]:
        return self._run(store, "QueryHerbsByName", lambda: self.queries.by_name(store, name_substr))

    # --- History Reader ----------------------------------------------------

    def get_history(self, store: LedgerStore, herb_id: str) -> List[HistoryEntry]:
        return self._run(store, "GetHistory", lambda: self.history.get_history(store, herb_id))

    # --- Named dispatch ----------------------------------------------------

    def transactions(self) -> Dict[str, Tuple[Callable[..., Any], int]]:
        """Transaction name -> (bound method, number of string arguments)."""
        return {
            "AddHerb": (self.add_herb, 11),
            "UpdateGrowthStage": (self.update_growth_stage, 2),
            "UpdateLabReport": (self.update_lab_report, 3),
            "GetHerb": (self.get_herb, 1),
            "GetAllHerbs": (self.get_all_herbs, 0),
            "QueryHerbsByRegion": (self.query_herbs_by_region, 1),
            "QueryHerbsByName": (self.query_herbs_by_name, 1),
            "HerbExists": (self.herb_exists, 1),
            "GetHistory": (self.get_history, 1),
        }

    def invoke(self, store: LedgerStore, name: str, args: Sequence[str]) -> Any:
        """
        Run a transaction by name. Returns a JSON-ready value: None for
        mutations, a camelCase record dict, a list of those, or a bool.
        """
        table = self.transactions()
        if name not in table:
            raise InvalidInvocation(
                f"Unknown transaction '{name}'. Known: {sorted(table)}"
            )
        fn, arity = table[name]
        if len(args) != arity:
            raise InvalidInvocation(f"{name} takes {arity} argument(s), got {len(args)}")
        if not all(isinstance(a, str) for a in args):
            raise InvalidInvocation(f"{name} arguments must all be strings")
        return to_json_ready(fn(store, *args))


def to_json_ready(result: Any) -> Any:
    if isinstance(result, (Herb, HistoryEntry)):
        return result.to_record()
    if isinstance(result, list):
        return [to_json_ready(r) for r in result]
    return result
