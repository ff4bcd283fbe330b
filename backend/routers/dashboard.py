from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from models import User
from config import get_current_user_dep, logger
from dashboard import build_dashboard_view_model
from dashboard.view_models import DashboardViewModel
from services.goal_store import load_dashboard_inputs

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

def get_database_engine():
    """Get the database engine from the main app context"""
    from fastapi_app import database_engine
    return database_engine


@router.get("/",
         summary="Dashboard",
         description="Pinned goals with calendars or trend charts, and the remaining goals with their latest summary.",
         response_model=DashboardViewModel)
def get_dashboard(today: Optional[date] = Query(None, description="Reference date for the check-in calendars. Defaults to the server's current date."),
                  current_user: User = Depends(get_current_user_dep)):
    """
    Build the dashboard view model for the authenticated user.

    Goals and entries are read once; everything else is computed in memory.
    Failed reads show up as an empty dashboard rather than an error.
    """
    reference_date = today or date.today()

    with Session(get_database_engine()) as session:
        goals, entries = load_dashboard_inputs(session, current_user.id)

    view = build_dashboard_view_model(goals, entries, reference_date)
    logger.debug(f"[dashboard] {len(view.pinned)} pinned, {len(view.other)} other goals for {current_user.id}")
    return view
