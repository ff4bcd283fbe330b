from typing import Iterable, Optional

from dashboard.aggregator import numeric_series
from dashboard.entries import Entry
from dashboard.geometry import DEFAULT_GEOMETRY, ChartGeometry, LinearScale, is_finite_number
from dashboard.view_models import TrendModel, TrendPoint


def render_trend(entries: Iterable[Entry], target_value: Optional[float] = None,
                 unit: Optional[str] = None, geometry: ChartGeometry = DEFAULT_GEOMETRY) -> Optional[TrendModel]:
    """
    Line chart of a goal's numeric entries, oldest on the left.

    The vertical scale covers every value and the target, so the target line
    normally lands inside the plot area. It is still only emitted when it does.
    Returns None when there is nothing numeric to plot.
    """
    series = numeric_series(entries)
    if not series:
        return None

    values = [e.value for e in series]
    target = target_value if is_finite_number(target_value) else None
    scale = LinearScale.fit(values, target, geometry)

    points = [
        TrendPoint(x=x, y=y, value=entry.value, entry_date=entry.entry_date, entry_id=entry.id)
        for entry, (x, y) in zip(series, scale.project(values))
    ]

    target_y = None
    if target is not None:
        candidate = scale.y(target)
        if scale.contains_y(candidate):
            target_y = candidate

    return TrendModel(
        width=geometry.width,
        height=geometry.height,
        padding_x=geometry.padding_x,
        padding_y=geometry.padding_y,
        points=points,
        min_value=min(values),
        max_value=max(values),
        scale_min=scale.scale_min,
        scale_max=scale.scale_max,
        target_value=target,
        target_y=target_y,
        unit=unit,
    )
