"""
Domain view of goal entries.

An entry is either a check-in (done / not done) or a numeric observation.
Rows coming from the store are converted here once, so the aggregator and
the renderers never have to guess which of ``is_done`` / ``value`` applies.
"""
from datetime import date, datetime
from typing import Iterable, List, Literal, Optional, Union
import math

from pydantic import ValidationError, field_validator
from sqlmodel import SQLModel

from config import logger
from models import GoalEntry


class BaseEntry(SQLModel):
    id: str
    goal_id: str
    entry_date: date
    created_at: datetime
    reflection: Optional[str] = None


class CheckinEntry(BaseEntry):
    kind: Literal["checkin"] = "checkin"
    is_done: bool


class NumericEntry(BaseEntry):
    kind: Literal["numeric"] = "numeric"
    value: float

    @field_validator("value")
    @classmethod
    def value_must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("value must be a finite number")
        return v


Entry = Union[CheckinEntry, NumericEntry]


def from_row(row: GoalEntry) -> Optional[Entry]:
    """Convert a stored row into a tagged entry, or None if the row is malformed."""
    if row.is_done is not None and row.value is not None:
        logger.warning(f"[entries] skipping entry {row.id}: both is_done and value are set")
        return None

    common = dict(
        id=row.id,
        goal_id=row.goal_id,
        entry_date=row.entry_date,
        created_at=row.created_at,
        reflection=row.reflection,
    )
    try:
        if row.value is not None:
            return NumericEntry(value=row.value, **common)
        if row.is_done is not None:
            return CheckinEntry(is_done=row.is_done, **common)
    except ValidationError as e:
        logger.warning(f"[entries] skipping entry {row.id}: {e}")
        return None

    logger.warning(f"[entries] skipping entry {row.id}: neither is_done nor value is set")
    return None


def ingest(rows: Iterable[Union[GoalEntry, Entry]]) -> List[Entry]:
    """Convert rows to domain entries, dropping the ones that cannot be rendered."""
    entries: List[Entry] = []
    for row in rows:
        if isinstance(row, (CheckinEntry, NumericEntry)):
            entries.append(row)
            continue
        entry = from_row(row)
        if entry is not None:
            entries.append(entry)
    return entries
