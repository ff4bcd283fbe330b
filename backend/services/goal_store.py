from typing import Iterable, List, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, desc

from config import logger
from models import Goal, GoalEntry


def fetch_goals(session: Session, user_id: str, include_hidden: bool = False) -> List[Goal]:
    """Goals of a user: pinned first, then by manual sort order. Hidden goals only on request."""
    query = select(Goal).where(Goal.user_id == user_id)
    if not include_hidden:
        query = query.where(Goal.is_hidden == False)  # noqa: E712
    goals = session.exec(
        query.order_by(desc(Goal.is_pinned), Goal.sort_order, Goal.created_at)
    ).all()
    return list(goals)


def fetch_entries(session: Session, goal_ids: Iterable[str]) -> List[GoalEntry]:
    """All entries of the given goals in one query."""
    ids = list(goal_ids)
    if not ids:
        return []
    entries = session.exec(
        select(GoalEntry)
        .where(GoalEntry.goal_id.in_(ids))  # type:ignore
        .order_by(GoalEntry.entry_date, GoalEntry.created_at)
    ).all()
    return list(entries)


def load_dashboard_inputs(session: Session, user_id: str) -> Tuple[List[Goal], List[GoalEntry]]:
    """
    Read everything the dashboard needs. A failed read is logged and treated
    as empty input so the dashboard still renders its empty state.
    """
    try:
        goals = fetch_goals(session, user_id)
    except SQLAlchemyError as e:
        logger.error(f"[dashboard] goals error: {e}")
        return [], []

    if not goals:
        return [], []

    try:
        entries = fetch_entries(session, [g.id for g in goals])
    except SQLAlchemyError as e:
        logger.error(f"[dashboard] entries error: {e}")
        return goals, []

    return goals, entries


def load_goal_entries(session: Session, goal_id: str) -> List[GoalEntry]:
    try:
        return fetch_entries(session, [goal_id])
    except SQLAlchemyError as e:
        logger.error(f"[goal detail] entries error: {e}")
        return []
