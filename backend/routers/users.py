from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from models import User, Goal, GoalEntry, Memo, UserResponse, UserUpdate
from config import get_current_user_dep, logger
from routers.auth import to_user_response

router = APIRouter(prefix="/users", tags=["Users"])

def get_database_engine():
    """Get the database engine from the main app context"""
    from fastapi_app import database_engine
    return database_engine


@router.get("/me",
         summary="Get current user",
         description="Get information about the currently authenticated user.",
         response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user_dep)):
    return to_user_response(current_user)


@router.put("/me",
         summary="Update current user",
         description="Update information about the currently authenticated user.",
         response_model=UserResponse)
def update_current_user_info(user_update: UserUpdate, current_user: User = Depends(get_current_user_dep)):
    """
    Update information about the currently authenticated user.
    """
    with Session(get_database_engine()) as session:
        # Get fresh user instance from session
        user_to_update = session.get(User, current_user.id)
        if not user_to_update:
            raise HTTPException(status_code=404, detail="User not found")

        if user_update.name is not None:
            user_to_update.name = user_update.name

        session.add(user_to_update)
        session.commit()
        session.refresh(user_to_update)
        return to_user_response(user_to_update)


@router.delete("/me",
            summary="Delete current user",
            description="Deletes the authenticated user with all goals, entries and memos.")
def delete_user(current_user: User = Depends(get_current_user_dep)):
    """
    Delete the authenticated user and everything they own.
    """
    with Session(get_database_engine()) as session:
        user_goals = session.exec(select(Goal).where(Goal.user_id == current_user.id)).all()

        for goal in user_goals:
            entries = session.exec(select(GoalEntry).where(GoalEntry.goal_id == goal.id)).all()
            for entry in entries:
                session.delete(entry)
            session.delete(goal)

        memos = session.exec(select(Memo).where(Memo.user_id == current_user.id)).all()
        for memo in memos:
            session.delete(memo)

        # Need a fresh instance from this session
        user_to_delete = session.get(User, current_user.id)
        session.delete(user_to_delete)
        session.commit()
        logger.info(f"Deleted user {current_user.id} with {len(user_goals)} goals")

        return {"message": "User and associated data deleted successfully"}
