"""
Medication Models - Reminder records persisted in the document store.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class MedicationCreate(BaseModel):
    """Form submission for a new reminder. Emptiness is checked by the store."""
    name: str = ""
    dose: str = ""
    time: str = ""  # time of day, e.g. "08:30"


class Medication(BaseModel):
    """A medication reminder as seen in the synced list."""
    id: str
    name: str
    dose: str
    time: str
    is_taken: bool = Field(False, alias="isTaken")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any]) -> "Medication":
        """Build from a raw document, tolerating missing fields."""
        return cls(
            id=doc_id,
            name=data.get("name", ""),
            dose=data.get("dose", ""),
            time=data.get("time", ""),
            isTaken=bool(data.get("isTaken", False)),
            createdAt=data.get("createdAt"),
        )


class MedicationList(BaseModel):
    """Current synced view, newest first."""
    medications: list[Medication]
    count: int
