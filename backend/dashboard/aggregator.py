from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from models import TrackerType
from dashboard.entries import CheckinEntry, Entry, NumericEntry


def _order_key(entry: Entry):
    # Same-day entries are resolved by insertion time
    return (entry.entry_date, entry.created_at)


def sort_history(entries: Iterable[Entry]) -> List[Entry]:
    """Most recent first: entry_date descending, then created_at descending."""
    return sorted(entries, key=_order_key, reverse=True)


def latest_entry(entries: Iterable[Entry]) -> Optional[Entry]:
    """The first entry of the history order, or None when there are no entries."""
    history = sort_history(entries)
    return history[0] if history else None


def chronological(entries: Iterable[Entry]) -> List[Entry]:
    """Oldest first: entry_date ascending, then created_at ascending. Charts read left to right."""
    return sorted(entries, key=_order_key)


def numeric_series(entries: Iterable[Entry]) -> List[NumericEntry]:
    return [e for e in chronological(entries) if isinstance(e, NumericEntry)]


def group_by_goal(entries: Iterable[Entry]) -> Dict[str, List[Entry]]:
    """Group entries by goal_id, keeping input order inside each group."""
    grouped: Dict[str, List[Entry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.goal_id].append(entry)
    return dict(grouped)


####################
#    Formatting    #
####################

def format_number(value: float) -> str:
    """70.0 -> '70', 70.5 -> '70.5'"""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_value(value: float, unit: Optional[str]) -> str:
    text = format_number(value)
    return f"{text} {unit}" if unit else text


def format_date_label(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def format_latest_summary(tracker_type: Optional[TrackerType], entry: Optional[Entry], unit: Optional[str]) -> str:
    """One-line summary of the latest entry shown on goal cards."""
    if entry is None:
        return "No entries yet"

    date_label = format_date_label(entry.entry_date)

    if tracker_type == TrackerType.CHECKIN:
        if isinstance(entry, CheckinEntry):
            status = "Done" if entry.is_done else "Not done"
            return f"Last check-in: {status} ({date_label})"
        return f"Last check-in: Logged ({date_label})"

    if tracker_type == TrackerType.NUMERIC:
        if isinstance(entry, NumericEntry):
            return f"Last entry: {format_value(entry.value, unit)} ({date_label})"
        return f"Last entry: {date_label}"

    return f"Last update: {date_label}"


def summarize_history(entries: Sequence[Entry]) -> str:
    count = len(entries)
    return f"{count} entr{'y' if count == 1 else 'ies'}"
