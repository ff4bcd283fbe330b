import calendar
from datetime import date
from typing import Iterable, Optional, Set

from dashboard.entries import CheckinEntry, Entry
from dashboard.view_models import CalendarCell, CalendarModel, CellStatus

WEEK_LABELS = ["Su", "Mo", "Tu", "We", "Th", "Fr", "Sa"]


def done_dates(entries: Iterable[Entry]) -> Set[date]:
    return {e.entry_date for e in entries if isinstance(e, CheckinEntry) and e.is_done}


def sunday_first_offset(year: int, month: int) -> int:
    """Number of blank cells before day 1 in a Sunday-first week."""
    monday_first_weekday, _ = calendar.monthrange(year, month)
    return (monday_first_weekday + 1) % 7


def render_calendar(entries: Iterable[Entry], reference_date: date) -> Optional[CalendarModel]:
    """
    Month grid of the reference date's month with done days marked.

    Returns None when the goal has no done check-ins at all. Entries outside the
    reference month simply have no cell to land on.
    """
    done = done_dates(entries)
    if not done:
        return None

    year, month = reference_date.year, reference_date.month
    _, days_in_month = calendar.monthrange(year, month)

    cells = [CalendarCell() for _ in range(sunday_first_offset(year, month))]
    for day in range(1, days_in_month + 1):
        current = date(year, month, day)
        if current in done:
            status = CellStatus.DONE
        elif current == reference_date:
            status = CellStatus.TODAY
        else:
            status = CellStatus.PLAIN
        cells.append(CalendarCell(day=day, date_key=current, status=status))

    return CalendarModel(
        year=year,
        month=month,
        month_label=reference_date.strftime("%b %Y"),
        week_labels=list(WEEK_LABELS),
        cells=cells,
    )
