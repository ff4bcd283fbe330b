from typing import Optional
import pandas as pd
import plotly.graph_objects as go

LINE_COLOR = '#0B5FCC'
TARGET_COLOR = '#FF9500'
DONE_COLOR = '#34C759'
TODAY_COLOR = '#0B5FCC'


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def create_trend_chart(trend: dict) -> Optional[go.Figure]:
    """
    Plot a trend model as returned by the backend. Points are already in
    canvas coordinates, so the y axis is reversed (0 at the top).
    """
    if not trend or not trend.get("points"):
        return None

    df = pd.DataFrame(trend["points"])
    unit = trend.get("unit") or ""

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df['x'],
        y=df['y'],
        mode='lines+markers',
        name='Value',
        line=dict(color=LINE_COLOR, width=3),
        marker=dict(size=8),
        customdata=df[['value', 'entry_date']],
        hovertemplate='<b>%{customdata[1]}</b><br>%{customdata[0]} ' + unit + '<extra></extra>'
    ))

    if trend.get("target_y") is not None:
        fig.add_shape(
            type="line",
            x0=trend["padding_x"],
            x1=trend["width"] - trend["padding_x"],
            y0=trend["target_y"],
            y1=trend["target_y"],
            line=dict(color=TARGET_COLOR, width=2, dash="dash"),
        )

    fig.update_layout(
        height=220,
        showlegend=False,
        plot_bgcolor='rgba(0,0,0,0)',
        paper_bgcolor='rgba(0,0,0,0)',
        margin=dict(l=10, r=10, t=10, b=10),
        xaxis=dict(range=[0, trend["width"]], visible=False),
        yaxis=dict(range=[trend["height"], 0], visible=False),
    )
    return fig


def trend_caption(trend: dict) -> str:
    unit = f" {trend['unit']}" if trend.get("unit") else ""
    parts = [
        f"Min: {format_number(trend['min_value'])}{unit}",
        f"Max: {format_number(trend['max_value'])}{unit}",
    ]
    if trend.get("target_value") is not None:
        parts.append(f"Target: {format_number(trend['target_value'])}{unit}")
    return " • ".join(parts)


def create_calendar_chart(calendar: dict) -> Optional[go.Figure]:
    """Month grid with done days highlighted and today outlined."""
    if not calendar:
        return None

    cells = calendar["cells"]
    rows = (len(cells) + 6) // 7

    fig = go.Figure()
    for i, cell in enumerate(cells):
        if cell["status"] == "blank":
            continue
        col, row = i % 7, i // 7
        fill = DONE_COLOR if cell["status"] == "done" else 'rgba(200,200,200,0.15)'
        border = TODAY_COLOR if cell["status"] == "today" else 'rgba(0,0,0,0)'
        fig.add_shape(
            type="rect",
            x0=col + 0.05, x1=col + 0.95,
            y0=row + 0.05, y1=row + 0.95,
            fillcolor=fill,
            line=dict(color=border, width=2),
        )
        fig.add_annotation(
            x=col + 0.5, y=row + 0.5,
            text=str(cell["day"]),
            showarrow=False,
            font=dict(size=11, color='white' if cell["status"] == "done" else None),
        )

    fig.update_layout(
        height=40 + 32 * rows,
        plot_bgcolor='rgba(0,0,0,0)',
        paper_bgcolor='rgba(0,0,0,0)',
        margin=dict(l=10, r=10, t=30, b=10),
        xaxis=dict(
            range=[0, 7],
            side='top',
            tickvals=[i + 0.5 for i in range(7)],
            ticktext=calendar["week_labels"],
            showgrid=False,
            zeroline=False,
        ),
        yaxis=dict(range=[rows, 0], visible=False),
    )
    return fig
