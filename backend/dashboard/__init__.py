from dashboard.aggregator import chronological, latest_entry, numeric_series, sort_history
from dashboard.calendar_renderer import render_calendar
from dashboard.composer import build_dashboard_view_model, build_goal_detail
from dashboard.entries import CheckinEntry, Entry, NumericEntry, ingest
from dashboard.geometry import DEFAULT_GEOMETRY, ChartGeometry, LinearScale
from dashboard.trend_renderer import render_trend
from dashboard.view_models import CalendarModel, DashboardViewModel, GoalCardModel, GoalDetailModel, TrendModel
