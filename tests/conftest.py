from datetime import datetime, timedelta

import pytest

from herb_ledger.contract import HerbContract
from herb_ledger.store import MemoryLedgerStore


class TickingClock:
    """RFC3339 clock that advances one second per reading."""

    def __init__(self, start: str = "2025-03-01T08:00:00Z"):
        self.t = datetime.strptime(start, "%Y-%m-%dT%H:%M:%SZ")

    def __call__(self) -> str:
        s = self.t.strftime("%Y-%m-%dT%H:%M:%SZ")
        self.t += timedelta(seconds=1)
        return s


TULSI = dict(
    name="Tulsi",
    scientific_name="Ocimum tenuiflorum",
    farmer="Ravi",
    quantity="12.5",
    latitude="10.85",
    longitude="76.27",
    region="Kerala",
    place_name="Palakkad",
    growth_stage="Seedling",
    planting_date="2025-01-15",
)

ASHWAGANDHA = dict(
    name="Ashwagandha",
    scientific_name="Withania somnifera",
    farmer="Meena",
    quantity="40",
    latitude="15.31",
    longitude="75.71",
    region="Karnataka",
    place_name="Hubli",
    growth_stage="Vegetative",
    planting_date="2024-11-02",
)


@pytest.fixture
def store():
    return MemoryLedgerStore(clock=TickingClock("2025-03-01T00:00:00Z"))


@pytest.fixture
def contract():
    return HerbContract(clock=TickingClock())


def add(contract, store, herb_id, fields):
    contract.add_herb(store, herb_id, **fields)


def corrupt(store, key, raw=b"{not json"):
    """Write raw bytes under key, bypassing the codec."""
    with store.transaction():
        store.put(key, raw)
