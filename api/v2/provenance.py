"""
FastAPI v2 Provenance Endpoints for the Herb Passport ledger.

Read-only views built on the same contract as the v1 REST API:
- Per-herb lifecycle timeline with the fields each transaction changed
- Ledger summary by region and by status

Usage:
    uvicorn api.v2.provenance:app --host 0.0.0.0 --port 8081
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from herb_ledger import __version__
from herb_ledger.contract import HerbContract
from herb_ledger.errors import DecodeError, StoreUnavailable
from herb_ledger.models import HistoryEntry
from herb_ledger.settings import Settings
from herb_ledger.store import JsonlLedgerStore, LedgerStore

# Initialize FastAPI app
app = FastAPI(
    title="Herb Passport Provenance API",
    description="Lifecycle timelines and ledger summaries for herb lots",
    version=__version__,
)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

contract = HerbContract()

# Changes on every write, so never reported as a changed field
IGNORED_FIELDS = {"timestamp"}


# --- Pydantic Models for API Responses ---

class TimelineEvent(BaseModel):
    """One ledger transaction that touched the herb."""
    tx_id: str
    timestamp: str
    event_type: str  # created, growth_stage, lab_report, updated, deleted, undecodable
    description: str
    changed_fields: List[str]
    record: Optional[Dict[str, str]] = None


class TimelineResponse(BaseModel):
    herb_id: str
    events: List[TimelineEvent]


class SummaryResponse(BaseModel):
    total_herbs: int
    by_region: Dict[str, int]
    by_status: Dict[str, int]


# --- Dependencies ---

def get_store() -> LedgerStore:
    """JSONL ledger from the environment settings. Overridden in tests."""
    try:
        return JsonlLedgerStore(Settings.load().ledger_path)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))


# --- Helper Functions ---

def changed_fields(prev: Optional[Dict[str, str]], cur: Dict[str, str]) -> List[str]:
    if prev is None:
        return [k for k, v in cur.items() if v and k not in IGNORED_FIELDS]
    return [k for k, v in cur.items() if prev.get(k) != v and k not in IGNORED_FIELDS]


def classify(entry: HistoryEntry, prev: Optional[Dict[str, str]], changed: List[str]) -> tuple[str, str]:
    if entry.is_delete:
        return "deleted", "Record tombstoned on the ledger"
    if entry.value is None:
        return "undecodable", "Stored value could not be decoded"
    herb = entry.value
    if prev is None:
        return "created", f"Registered by {herb.farmer or 'unknown farmer'} in {herb.region or 'unknown region'}"
    if set(changed) == {"growthStage"}:
        return "growth_stage", f"Growth stage set to {herb.growth_stage}"
    if changed and set(changed) <= {"labReportHash", "status"}:
        return "lab_report", f"Lab report recorded, status {herb.status}"
    return "updated", "Record rewritten"


def build_timeline(herb_id: str, entries: List[HistoryEntry]) -> TimelineResponse:
    events = []
    prev: Optional[Dict[str, str]] = None
    for entry in entries:
        record = entry.value.to_record() if entry.value is not None else None
        changed = changed_fields(prev, record) if record is not None else []
        event_type, description = classify(entry, prev, changed)
        events.append(TimelineEvent(
            tx_id=entry.tx_id,
            timestamp=entry.timestamp,
            event_type=event_type,
            description=description,
            changed_fields=changed,
            record=record,
        ))
        if entry.is_delete:
            prev = None
        elif record is not None:
            prev = record
    return TimelineResponse(herb_id=herb_id, events=events)


# --- API Endpoints ---

@app.get("/", tags=["Meta"])
def root() -> Dict[str, Any]:
    """API root with version info."""
    return {
        "name": "Herb Passport Provenance API",
        "version": __version__,
        "endpoints": [
            "/v2/herbs/{herb_id}/timeline",
            "/v2/summary",
        ],
    }


@app.get("/v2/herbs/{herb_id}/timeline", response_model=TimelineResponse, tags=["Provenance"])
def herb_timeline(herb_id: str, store: LedgerStore = Depends(get_store)):
    """
    Lifecycle timeline for one herb, oldest first.

    Entries whose stored value no longer decodes are kept and marked
    "undecodable" instead of failing the request.
    """
    try:
        entries = contract.get_history(store, herb_id)
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not entries:
        raise HTTPException(status_code=404, detail=f"No history found for herb {herb_id}")

    return build_timeline(herb_id, entries)


@app.get("/v2/summary", response_model=SummaryResponse, tags=["Provenance"])
def ledger_summary(store: LedgerStore = Depends(get_store)):
    """Record counts by region and by status (regions compared case-insensitively)."""
    try:
        herbs = contract.get_all_herbs(store)
    except DecodeError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    return SummaryResponse(
        total_herbs=len(herbs),
        by_region=dict(Counter(h.region.casefold() for h in herbs)),
        by_status=dict(Counter(h.status for h in herbs)),
    )
