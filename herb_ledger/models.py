from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

def now_utc() -> str:
    """
    UTC RFC3339 with fixed-width microseconds.

    Fixed width keeps text comparison chronological, and microsecond
    resolution separates a create from an update in the same second.
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

class Herb(BaseModel):
    """
    Botanical and traceability details for one harvested herb lot.

    Every attribute is an opaque string at the storage boundary. Dates,
    coordinates and quantity are not parsed here; see validation.py for
    the seam where a stricter reading can be plugged in.
    """
    herb_id: str = Field(default="", alias="herbID")
    name: str = ""
    scientific_name: str = Field(default="", alias="scientificName")
    farmer: str = ""
    quantity: str = ""
    latitude: str = ""
    longitude: str = ""
    region: str = ""  # State or region name
    place_name: str = Field(default="", alias="placeName")  # City / Village name
    growth_stage: str = Field(default="", alias="growthStage")
    planting_date: str = Field(default="", alias="plantingDate")
    harvest_date: str = Field(default="", alias="harvestDate")
    lab_report_hash: str = Field(default="", alias="labReportHash")
    status: str = ""
    timestamp: str = ""  # set by the ledger on every write

    model_config = {"populate_by_name": True, "strict": True}

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        # JSON null in a stored record reads as an empty field
        return "" if v is None else v

    def to_record(self) -> dict[str, str]:
        """Flat camelCase mapping, the shape stored on the ledger."""
        return self.model_dump(by_alias=True)

class HistoryEntry(BaseModel):
    """
    One historical mutation of a record.

    `value` is None for tombstones and for entries whose stored bytes
    no longer decode as a Herb.
    """
    tx_id: str = Field(alias="txId")
    timestamp: str
    is_delete: bool = Field(default=False, alias="isDelete")
    value: Optional[Herb] = None

    model_config = {"populate_by_name": True}

    def to_record(self) -> dict:
        return {
            "txId": self.tx_id,
            "timestamp": self.timestamp,
            "isDelete": self.is_delete,
            "value": self.value.to_record() if self.value is not None else None,
        }
