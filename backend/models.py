from datetime import date, datetime, timezone
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime, UniqueConstraint
from pydantic import field_validator
from enum import Enum
import logging
import math
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

####################
#    DB Models     #
####################

class GoalType(str, Enum):
    NORTH_STAR = "north_star"
    MID_TERM = "mid_term"
    HABIT = "habit"

class TrackerType(str, Enum):
    CHECKIN = "checkin"
    NUMERIC = "numeric"

class User(SQLModel, table=True):
    id: str = Field(default_factory=lambda: "user_" + str(uuid.uuid4()), primary_key=True)
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=500, unique=True)
    password_hash: str = Field(min_length=1, max_length=255)
    last_login: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

class Goal(SQLModel, table=True):
    __tablename__ = "goals"

    id: str = Field(default_factory=lambda: "goal_" + str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)

    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)

    # North star, mid-term or habit (descriptive only)
    goal_type: GoalType = Field(default=GoalType.MID_TERM)

    # None means "not set yet"
    tracker_type: Optional[TrackerType] = None

    # Numeric trackers only
    unit: Optional[str] = Field(default=None, max_length=50)  # e.g., "kg", "pages", "km"
    target_value: Optional[float] = None
    target_date: Optional[date] = None

    # Dashboard placement
    is_pinned: bool = Field(default=True)
    is_hidden: bool = Field(default=False)
    sort_order: int = Field(default=100)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

class GoalEntry(SQLModel, table=True):
    __tablename__ = "goal_entries"

    id: str = Field(default_factory=lambda: "entry_" + str(uuid.uuid4()), primary_key=True)
    goal_id: str = Field(foreign_key="goals.id", index=True)

    entry_date: date = Field(default_factory=date.today)
    is_done: Optional[bool] = None   # check-in entries
    value: Optional[float] = None    # numeric entries
    reflection: Optional[str] = Field(default=None, max_length=2000)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

class Memo(SQLModel, table=True):
    __tablename__ = "memos"
    __table_args__ = (UniqueConstraint("user_id", "topic"),)

    id: str = Field(default_factory=lambda: "memo_" + str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    topic: str = Field(min_length=1, max_length=100)
    content: str = Field(default="", max_length=10000)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

####################
#   DB Functions   #
####################

def create_db_and_tables(engine):
    logging.info("Creating database and tables...")
    try:
        SQLModel.metadata.create_all(engine)
        logging.info("Database and tables created successfully")
    except Exception as e:
        logging.error(f"Error creating database and tables: {e}")
        raise


####################
#   Auth Models    #
####################

class UserCreate(SQLModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=1, max_length=500)
    password: str = Field(min_length=8, max_length=32)

class UserLogin(SQLModel):
    email: str = Field(min_length=1, max_length=500)
    password: str = Field(min_length=8, max_length=32)

class Token(SQLModel):
    access_token: str
    token_type: str

class UserResponse(SQLModel):
    id: str
    name: str
    email: str
    last_login: datetime
    created_at: datetime

class UserUpdate(SQLModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)

####################
#   Goal Inputs    #
####################

class TrackerChoice(str, Enum):
    UNSET = "unset"
    CHECKIN = "checkin"
    NUMERIC = "numeric"

class GoalInput(SQLModel):
    """Payload for creating or updating a goal, as sent by the goal form."""
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    goal_type: GoalType = GoalType.MID_TERM
    tracker_type: TrackerChoice = TrackerChoice.UNSET
    unit: Optional[str] = Field(default=None, max_length=50)
    target_value: Optional[float] = None
    target_date: Optional[date] = None
    is_pinned: bool = True
    is_hidden: Optional[bool] = None
    sort_order: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required.")
        return v

    @field_validator("target_value")
    @classmethod
    def target_must_be_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("Target value must be a number.")
        return v

    def stored_tracker_type(self) -> Optional[TrackerType]:
        if self.tracker_type == TrackerChoice.UNSET:
            return None
        return TrackerType(self.tracker_type.value)

    def apply_to(self, goal: Goal) -> Goal:
        """Copy normalized fields onto a goal row. Unit and target only survive on numeric goals."""
        tracker_type = self.stored_tracker_type()
        is_numeric = tracker_type == TrackerType.NUMERIC

        goal.title = self.title
        goal.description = (self.description or "").strip() or None
        goal.goal_type = self.goal_type
        goal.tracker_type = tracker_type
        goal.unit = ((self.unit or "").strip() or None) if is_numeric else None
        goal.target_value = self.target_value if is_numeric else None
        goal.target_date = self.target_date
        goal.is_pinned = self.is_pinned
        if self.is_hidden is not None:
            goal.is_hidden = self.is_hidden
        if self.sort_order is not None:
            goal.sort_order = self.sort_order
        return goal

####################
#   Entry Inputs   #
####################

class CheckinEntryCreate(SQLModel):
    reflection: Optional[str] = Field(default=None, max_length=2000)

class NumericEntryCreate(SQLModel):
    value: float
    entry_date: Optional[date] = None
    reflection: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("value")
    @classmethod
    def value_must_be_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("Value must be a number.")
        return v

####################
#   Memo Inputs    #
####################

class MemoUpdate(SQLModel):
    content: str = Field(default="", max_length=10000)
