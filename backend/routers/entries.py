from datetime import date
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Body, Path, Depends
from sqlmodel import Session

from models import User, Goal, GoalEntry, TrackerType, CheckinEntryCreate, NumericEntryCreate
from config import get_current_user_dep, logger
from dashboard import Entry, build_goal_detail, ingest, sort_history
from dashboard.view_models import GoalDetailModel
from routers.goals import get_owned_goal
from services.goal_store import load_goal_entries

router = APIRouter(prefix="/goals/{goal_id}", tags=["Entries"])

def get_database_engine():
    """Get the database engine from the main app context"""
    from fastapi_app import database_engine
    return database_engine


def _require_tracker(goal: Goal, tracker_type: TrackerType):
    if goal.tracker_type != tracker_type:
        raise HTTPException(status_code=400, detail=f"Goal does not use a {tracker_type.value} tracker")


def _save_entry(session: Session, entry: GoalEntry, scope: str) -> GoalEntry:
    try:
        session.add(entry)
        session.commit()
        session.refresh(entry)
    except Exception as e:
        session.rollback()
        logger.error(f"[{scope}] error: {e}")
        raise HTTPException(status_code=500, detail=f"Error saving entry: {str(e)}")
    return entry


@router.get("/entries",
         summary="List entries",
         description="Retrieves the entries of a goal, most recent first (same-day entries by insertion time).",
         response_model=List[Entry])
def list_entries(goal_id: str = Path(..., description="Unique identifier of the goal"),
                 current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        get_owned_goal(session, goal_id, current_user)
        return sort_history(ingest(load_goal_entries(session, goal_id)))


@router.get("/detail",
         summary="Goal detail",
         description="Goal fields, latest summary, full history and a trend chart (numeric goals, no target overlay).",
         response_model=GoalDetailModel)
def get_goal_detail(goal_id: str = Path(..., description="Unique identifier of the goal"),
                    current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        goal = get_owned_goal(session, goal_id, current_user)
        return build_goal_detail(goal, load_goal_entries(session, goal_id))


@router.post("/entries/checkin",
          summary="Check in today",
          description="Marks today as done for a check-in goal, with an optional reflection.")
def add_checkin(goal_id: str = Path(..., description="Unique identifier of the goal"),
                checkin: Optional[CheckinEntryCreate] = Body(None, description="Optional reflection"),
                current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        goal = get_owned_goal(session, goal_id, current_user)
        _require_tracker(goal, TrackerType.CHECKIN)

        entry = GoalEntry(
            goal_id=goal.id,
            entry_date=date.today(),
            is_done=True,
            value=None,
            reflection=((checkin.reflection if checkin else None) or "").strip() or None,
        )
        return _save_entry(session, entry, "add checkin")


@router.post("/entries/numeric",
          summary="Add a numeric entry",
          description="Logs a value for a numeric goal. The date defaults to today and may be in the past.")
def add_numeric(goal_id: str = Path(..., description="Unique identifier of the goal"),
                numeric: NumericEntryCreate = Body(..., description="Value, optional date and reflection"),
                current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        goal = get_owned_goal(session, goal_id, current_user)
        _require_tracker(goal, TrackerType.NUMERIC)

        entry = GoalEntry(
            goal_id=goal.id,
            entry_date=numeric.entry_date or date.today(),
            is_done=None,
            value=numeric.value,
            reflection=(numeric.reflection or "").strip() or None,
        )
        return _save_entry(session, entry, "add numeric")


@router.delete("/entries/{entry_id}",
            summary="Delete entry",
            description="Deletes a single entry of a goal owned by the authenticated user.")
def delete_entry(goal_id: str = Path(..., description="Unique identifier of the goal"),
                 entry_id: str = Path(..., description="Unique identifier of the entry to delete"),
                 current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        goal = get_owned_goal(session, goal_id, current_user)

        entry = session.get(GoalEntry, entry_id)
        if not entry or entry.goal_id != goal.id:
            raise HTTPException(status_code=404, detail="Entry not found")

        session.delete(entry)
        session.commit()
        return {"message": "Entry deleted successfully"}
