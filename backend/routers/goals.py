from fastapi import APIRouter, HTTPException, Body, Path, Query, Depends
from sqlmodel import Session, select

from models import User, Goal, GoalEntry, GoalInput, utcnow
from config import get_current_user_dep, logger
from services.goal_store import fetch_goals

router = APIRouter(prefix="/goals", tags=["Goals"])

def get_database_engine():
    """Get the database engine from the main app context"""
    from fastapi_app import database_engine
    return database_engine


def get_owned_goal(session: Session, goal_id: str, current_user: User) -> Goal:
    """Load a goal and make sure it belongs to the current user."""
    goal = session.get(Goal, goal_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")

    # Verify ownership
    if goal.user_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not authorized to access this goal")
    return goal


@router.get("/",
         summary="List goals",
         description="Retrieves the goals of the authenticated user, pinned first, then by sort order. Hidden goals are left out unless include_hidden is set.")
def list_goals(include_hidden: bool = Query(False, description="Also return hidden goals"),
               current_user: User = Depends(get_current_user_dep)):
    """
    List the goals owned by the authenticated user in dashboard order.
    """
    with Session(get_database_engine()) as session:
        return fetch_goals(session, current_user.id, include_hidden=include_hidden)


@router.post("/",
          summary="Create a goal",
          description="Creates a goal for the authenticated user. Unit and target value are only kept for numeric trackers.")
def create_goal(goal_input: GoalInput = Body(..., description="Goal form data"),
                current_user: User = Depends(get_current_user_dep)):
    """
    Create a new goal. A tracker of "unset" is stored as no tracker.
    """
    with Session(get_database_engine()) as session:
        goal = goal_input.apply_to(Goal(user_id=current_user.id, title=goal_input.title))
        try:
            session.add(goal)
            session.commit()
            session.refresh(goal)
        except Exception as e:
            session.rollback()
            logger.error(f"[create goal] error: {e}")
            raise HTTPException(status_code=500, detail=f"Error creating goal: {str(e)}")
        return goal


@router.get("/{goal_id}",
         summary="Get a goal",
         description="Retrieves a goal by its unique identifier for the authenticated user.")
def get_goal(goal_id: str = Path(..., description="Unique identifier of the goal"),
             current_user: User = Depends(get_current_user_dep)):
    with Session(get_database_engine()) as session:
        return get_owned_goal(session, goal_id, current_user)


@router.put("/{goal_id}",
         summary="Update a goal",
         description="Updates a goal owned by the authenticated user. The hidden flag is left untouched unless provided.")
def update_goal(goal_id: str = Path(..., description="Unique identifier of the goal to update"),
                goal_input: GoalInput = Body(..., description="Goal form data"),
                current_user: User = Depends(get_current_user_dep)):
    """
    Update an existing goal with the same normalization rules as creation.
    """
    with Session(get_database_engine()) as session:
        goal = get_owned_goal(session, goal_id, current_user)
        goal_input.apply_to(goal)
        goal.updated_at = utcnow()

        try:
            session.add(goal)
            session.commit()
            session.refresh(goal)
        except Exception as e:
            session.rollback()
            logger.error(f"[edit goal] update error: {e}")
            raise HTTPException(status_code=500, detail=f"Error updating goal: {str(e)}")
        return goal


@router.delete("/{goal_id}",
            summary="Delete goal",
            description="Deletes a goal owned by the authenticated user together with its entries.")
def delete_goal(goal_id: str = Path(..., description="Unique identifier of the goal to delete"),
                current_user: User = Depends(get_current_user_dep)):
    """
    Delete a goal by ID owned by the authenticated user.
    """
    with Session(get_database_engine()) as session:
        goal = get_owned_goal(session, goal_id, current_user)

        entries = session.exec(select(GoalEntry).where(GoalEntry.goal_id == goal.id)).all()
        for entry in entries:
            session.delete(entry)

        session.delete(goal)
        session.commit()
        return {"message": "Goal deleted successfully"}
