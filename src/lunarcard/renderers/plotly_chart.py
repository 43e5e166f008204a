"""Plotly altitude chart renderer.

Draws today's moon altitude at 30-minute steps, the horizon line, and
rise/set markers on the sample slot they fall into.
"""

import plotly.graph_objects as go

from lunarcard.i18n import localize
from lunarcard.models import RiseSetMarker, TodayChartData

_BG = "#050a1a"
_LINE_COLOR = "#7ec8e3"
_HORIZON_COLOR = "#334466"
_RISE_COLOR = "#f0e0b0"
_SET_COLOR = "#c9a96e"


def _marker_trace(
    marker: RiseSetMarker, labels: list[str], name: str, color: str
) -> go.Scatter:
    index = min(marker.index, len(labels) - 1)
    return go.Scatter(
        x=[labels[index]],
        y=[round(marker.altitude, 2)],
        mode="markers+text",
        marker=dict(size=9, color=color, line=dict(width=0)),
        text=[name],
        textposition="top center",
        textfont=dict(color=color),
        hoverinfo="skip",
        name=name,
    )


def render_altitude_chart(chart_data: TodayChartData, lang: str = "en") -> go.Figure:
    """Render TodayChartData as a Plotly line chart.

    Args:
        chart_data: Output of MoonDataAdapter.today_data().
        lang: Language code for the title and horizon label.

    Returns:
        Plotly Figure object.
    """
    profile = chart_data.profile
    labels = profile.time_labels

    altitude_trace = go.Scatter(
        x=labels,
        y=profile.altitudes,
        mode="lines",
        line=dict(color=_LINE_COLOR, width=2, shape="spline"),
        fill="tozeroy",
        fillcolor="rgba(126, 200, 227, 0.12)",
        hovertemplate="%{x}<br>%{y:.2f}°<extra></extra>",
        name="altitude",
    )

    traces = [altitude_trace]
    if chart_data.rise_marker is not None:
        traces.append(
            _marker_trace(chart_data.rise_marker, labels, chart_data.rise_label, _RISE_COLOR)
        )
    if chart_data.set_marker is not None:
        traces.append(
            _marker_trace(chart_data.set_marker, labels, chart_data.set_label, _SET_COLOR)
        )

    fig = go.Figure(data=traces)
    fig.update_layout(
        title=dict(text=localize("card.chart.title", lang), font=dict(color="#e8d5a3")),
        paper_bgcolor=_BG,
        plot_bgcolor=_BG,
        showlegend=False,
        margin=dict(l=30, r=10, t=40, b=30),
        height=260,
        xaxis=dict(
            type="category",
            showgrid=False,
            tickfont=dict(color="#aaaaaa"),
            nticks=8,
        ),
        yaxis=dict(
            range=[profile.suggested_y_min, profile.suggested_y_max],
            showgrid=False,
            zeroline=False,
            tickfont=dict(color="#aaaaaa"),
            ticksuffix="°",
        ),
        # Horizon: altitude 0° across the whole day
        shapes=[
            dict(
                type="line",
                xref="paper",
                yref="y",
                x0=0,
                x1=1,
                y0=0,
                y1=0,
                line=dict(color=_HORIZON_COLOR, width=1, dash="dot"),
            )
        ],
        annotations=[
            dict(
                xref="paper",
                yref="y",
                x=1,
                y=0,
                text=localize("card.chart.horizon", lang),
                showarrow=False,
                xanchor="right",
                yanchor="bottom",
                font=dict(color=_HORIZON_COLOR, size=10),
            )
        ],
    )
    return fig
