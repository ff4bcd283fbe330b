from datetime import date
from typing import Iterable, List, Optional, Sequence, Union

from models import Goal, GoalEntry, GoalType, TrackerType
from dashboard.aggregator import format_latest_summary, group_by_goal, latest_entry, sort_history, summarize_history
from dashboard.calendar_renderer import render_calendar
from dashboard.entries import Entry, ingest
from dashboard.trend_renderer import render_trend
from dashboard.view_models import DashboardViewModel, GoalCardModel, GoalDetailModel

GOAL_TYPE_LABELS = {
    GoalType.NORTH_STAR: "North Star Goal",
    GoalType.MID_TERM: "Mid-term Goal",
    GoalType.HABIT: "Daily Habit",
}


def format_goal_type(goal_type: GoalType) -> str:
    goal_type = GoalType(goal_type)
    return GOAL_TYPE_LABELS.get(goal_type, goal_type.value)


def format_tracker_type(tracker_type: Optional[TrackerType], unit: Optional[str]) -> str:
    if tracker_type == TrackerType.CHECKIN:
        return "Tracker: Check-in"
    if tracker_type == TrackerType.NUMERIC:
        return f"Tracker: Numeric ({unit})" if unit else "Tracker: Numeric"
    return "Tracker: Not set"


def _card_fields(goal: Goal, entries: List[Entry]) -> dict:
    latest = latest_entry(entries)
    return dict(
        id=goal.id,
        title=goal.title,
        description=goal.description,
        goal_type=goal.goal_type,
        goal_type_label=format_goal_type(goal.goal_type),
        tracker_type=goal.tracker_type,
        tracker_label=format_tracker_type(goal.tracker_type, goal.unit),
        unit=goal.unit,
        target_value=goal.target_value,
        target_date=goal.target_date,
        is_pinned=goal.is_pinned,
        updated_at=goal.updated_at,
        latest_summary=format_latest_summary(goal.tracker_type, latest, goal.unit),
        latest_entry=latest,
    )


def build_goal_card(goal: Goal, entries: List[Entry], today: date, with_visuals: bool) -> GoalCardModel:
    """Card for one goal. Visuals are only computed when asked for."""
    card = GoalCardModel(**_card_fields(goal, entries))
    if not with_visuals:
        return card

    if goal.tracker_type == TrackerType.CHECKIN:
        card.calendar = render_calendar(entries, today)
    elif goal.tracker_type == TrackerType.NUMERIC:
        card.trend = render_trend(entries, target_value=goal.target_value, unit=goal.unit)
    return card


def build_dashboard_view_model(goals: Sequence[Goal], entries: Iterable[Union[GoalEntry, Entry]],
                               today: date) -> DashboardViewModel:
    """
    Assemble the dashboard from one bulk read of goals and entries.

    Goals keep the order they were fetched in. Pinned goals get a calendar or a
    trend chart depending on their tracker; the others only get summary text.
    """
    entries_by_goal = group_by_goal(ingest(entries))

    view = DashboardViewModel()
    for goal in goals:
        goal_entries = entries_by_goal.get(goal.id, [])
        if goal.is_pinned:
            view.pinned.append(build_goal_card(goal, goal_entries, today, with_visuals=True))
        else:
            view.other.append(build_goal_card(goal, goal_entries, today, with_visuals=False))
    return view


def build_goal_detail(goal: Goal, entries: Iterable[Union[GoalEntry, Entry]]) -> GoalDetailModel:
    """Goal page: full history plus a trend chart without the target overlay."""
    goal_entries = [e for e in ingest(entries) if e.goal_id == goal.id]
    history = sort_history(goal_entries)

    detail = GoalDetailModel(
        **_card_fields(goal, goal_entries),
        history=history,
        entry_count=len(history),
        entry_count_label=summarize_history(history),
    )
    if goal.tracker_type == TrackerType.NUMERIC:
        detail.trend = render_trend(goal_entries, unit=goal.unit)
    return detail
