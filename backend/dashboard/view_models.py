from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from sqlmodel import SQLModel, Field

from models import GoalType, TrackerType
from dashboard.entries import Entry

####################
#     Calendar     #
####################

class CellStatus(str, Enum):
    BLANK = "blank"
    DONE = "done"
    TODAY = "today"
    PLAIN = "plain"

class CalendarCell(SQLModel):
    day: Optional[int] = None
    date_key: Optional[date] = None
    status: CellStatus = CellStatus.BLANK

class CalendarModel(SQLModel):
    year: int
    month: int
    month_label: str  # e.g. "Jun 2024"
    week_labels: List[str]
    cells: List[CalendarCell]

####################
#      Trend       #
####################

class TrendPoint(SQLModel):
    x: float
    y: float
    value: float
    entry_date: date
    entry_id: str

class TrendModel(SQLModel):
    width: float
    height: float
    padding_x: float
    padding_y: float

    points: List[TrendPoint]

    # Labels use the data only, the scale may be stretched by the target
    min_value: float
    max_value: float
    scale_min: float
    scale_max: float

    target_value: Optional[float] = None
    target_y: Optional[float] = None
    unit: Optional[str] = None

####################
#   Goal Cards     #
####################

class GoalCardModel(SQLModel):
    id: str
    title: str
    description: Optional[str] = None

    goal_type: GoalType
    goal_type_label: str
    tracker_type: Optional[TrackerType] = None
    tracker_label: str

    unit: Optional[str] = None
    target_value: Optional[float] = None
    target_date: Optional[date] = None
    is_pinned: bool
    updated_at: Optional[datetime] = None

    latest_summary: str
    latest_entry: Optional[Entry] = None

    # Pinned goals only
    calendar: Optional[CalendarModel] = None
    trend: Optional[TrendModel] = None

class GoalDetailModel(GoalCardModel):
    history: List[Entry] = Field(default_factory=list)
    entry_count: int = 0
    entry_count_label: str = "0 entries"

class DashboardViewModel(SQLModel):
    pinned: List[GoalCardModel] = Field(default_factory=list)
    other: List[GoalCardModel] = Field(default_factory=list)
