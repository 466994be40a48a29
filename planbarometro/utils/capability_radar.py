import numpy as np
import pandas as pd
import plotly.graph_objects as go


def hex_to_rgb(h: str) -> tuple[int, int, int]:
    h = h.lstrip("#")
    return (
        int(h[0:2], 16),
        int(h[2:4], 16),
        int(h[4:6], 16),
    )


def rgb_to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = rgb
    return f"#{r:02X}{g:02X}{b:02X}"


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


# Percentage stops aligned with the score status bands (poor / fair / good / excellent)
DEFAULT_STOPS: list[tuple[float, str]] = [
    (0.0, "#D73027"),
    (25.0, "#FC8D59"),
    (50.0, "#FEE08B"),
    (75.0, "#91CF60"),
    (100.0, "#1A9850"),
]


def gradient_color(value: float, stops: list[tuple[float, str]] = DEFAULT_STOPS) -> str:
    """Piecewise-linear interpolation across hex color stops."""
    v = float(value)
    if v <= stops[0][0]:
        return stops[0][1]
    if v >= stops[-1][0]:
        return stops[-1][1]
    for i in range(len(stops) - 1):
        v0, c0 = stops[i]
        v1, c1 = stops[i + 1]
        if v0 <= v <= v1:
            t = 0.0 if v1 == v0 else (v - v0) / (v1 - v0)
            r0, g0, b0 = hex_to_rgb(c0)
            r1, g1, b1 = hex_to_rgb(c1)
            r = int(round(lerp(r0, r1, t)))
            g = int(round(lerp(g0, g1, t)))
            b = int(round(lerp(b0, b1, t)))
            return rgb_to_hex((r, g, b))
    return stops[-1][1]


def _add_criterion_bar(fig, *, theta_left, theta_right, r0, r1, color, criterion_name, percentage):
    fig.add_trace(
        go.Scatterpolar(
            theta=[theta_left, theta_right, theta_right, theta_left, theta_left],
            r=[r0, r0, r1, r1, r0],
            mode="lines",
            line=dict(width=0.5, color=color),
            fill="toself",
            fillcolor=color,
            name="",
            showlegend=False,
            hoverinfo="skip",
        )
    )
    # transparent marker carries the hover label
    fig.add_trace(
        go.Scatterpolar(
            theta=[(theta_left + theta_right) / 2.0],
            r=[(r0 + r1) / 2.0],
            mode="markers",
            marker=dict(size=28, color="rgba(0,0,0,0)"),
            name="",
            showlegend=False,
            hovertemplate=f"{criterion_name} - {percentage:.0f}%<extra></extra>",
        )
    )


def make_capability_radar(
    dimension_scores: pd.DataFrame,
    criterion_scores: pd.DataFrame | None = None,
    title: str | None = None,
    series_name: str = "Score (%)",
    max_score: float = 100.0,
    bar_base: float = 107.0,
    bar_total_height: float = 16.0,
    bar_width_deg: float = 3.0,
    bar_gap_deg: float = 1.2,
) -> go.Figure:
    """
    Build a radar chart with one spoke per dimension on a 0-100 scale.

    ``dimension_scores`` needs ``Dimension`` and ``Percentage`` columns and is
    drawn in row order. When ``criterion_scores`` (``Dimension``, ``Criterion``,
    ``Percentage``) is given, each criterion gets a mini bar just beyond the
    outer ring of its dimension's spoke.
    """
    required_cols = {"Dimension", "Percentage"}
    missing = required_cols - set(dimension_scores.columns)
    if missing:
        raise ValueError(f"Dimension scores missing required columns: {sorted(missing)}")
    if not np.issubdtype(dimension_scores["Percentage"].dtype, np.number):
        raise TypeError("Column 'Percentage' must be numeric.")

    dim_summary = dimension_scores[["Dimension", "Percentage"]].copy()
    dim_summary["Percentage"] = (
        dim_summary["Percentage"].astype(float).clip(lower=0.0, upper=float(max_score))
    )
    dim_summary["theta"] = np.linspace(0.0, 360.0, len(dim_summary), endpoint=False)
    dim_summary["color"] = dim_summary["Percentage"].apply(gradient_color)

    fig = go.Figure()

    r_vals = dim_summary["Percentage"].tolist()
    theta_vals = dim_summary["theta"].tolist()
    if r_vals:
        fig.add_trace(
            go.Scatterpolar(
                r=r_vals + [r_vals[0]],
                theta=theta_vals + [theta_vals[0]],
                mode="lines",
                line=dict(color="#666666", width=1.5),
                fill="toself",
                fillcolor="rgba(0,0,0,0.08)",
                name=series_name,
                hoverinfo="skip",
            )
        )

    fig.add_trace(
        go.Scatterpolar(
            r=dim_summary["Percentage"],
            theta=dim_summary["theta"],
            mode="markers+text",
            marker=dict(size=10, color=dim_summary["color"]),
            text=[f"{p:.0f}%" for p in dim_summary["Percentage"]],
            textposition="top center",
            name="Dimension",
            hovertemplate="<b>%{customdata[0]}</b><br>%{customdata[1]:.0f}%<extra></extra>",
            customdata=np.stack([dim_summary["Dimension"], dim_summary["Percentage"]], axis=1)
            if len(dim_summary)
            else None,
        )
    )

    if criterion_scores is not None and not criterion_scores.empty:
        crit = criterion_scores.copy()
        crit["Percentage"] = crit["Percentage"].astype(float).clip(lower=0.0, upper=float(max_score))
        for _, drow in dim_summary.iterrows():
            # keep declaration order within the dimension
            rows = crit[crit["Dimension"] == drow["Dimension"]]
            k = int(rows.shape[0])
            if k == 0:
                continue

            total_span = k * bar_width_deg + (k - 1) * bar_gap_deg
            start = float(drow["theta"]) - total_span / 2.0

            for idx, (_, crow) in enumerate(rows.iterrows()):
                theta_left = start + idx * (bar_width_deg + bar_gap_deg)
                percentage = float(crow["Percentage"])
                height = max(0.0, float(bar_total_height) * (percentage / float(max_score)))
                _add_criterion_bar(
                    fig,
                    theta_left=theta_left,
                    theta_right=theta_left + bar_width_deg,
                    r0=float(bar_base),
                    r1=float(bar_base) + height,
                    color=gradient_color(percentage),
                    criterion_name=str(crow["Criterion"]),
                    percentage=percentage,
                )

    if title is None and len(dim_summary):
        lowest = dim_summary.sort_values("Percentage", kind="stable").iloc[0]
        title = f"{lowest['Dimension']}: {lowest['Percentage']:.0f}%"

    tick_step = 25
    fig.update_layout(
        title=dict(
            text=title or "Planbarómetro",
            x=0.5,
            xanchor="center",
            font=dict(family="Helvetica, Arial, sans-serif", size=18),
        ),
        showlegend=True,
        legend=dict(orientation="h", x=1, y=-0.1, xanchor="right", yanchor="top"),
        margin=dict(l=40, r=40, t=80, b=80),
        polar=dict(
            radialaxis=dict(
                range=[0, float(bar_base) + float(bar_total_height) + 2],
                showticklabels=True,
                ticks="outside",
                tickfont=dict(size=10),
                gridcolor="#BFBFBF",
                gridwidth=0.5,
                tickvals=list(range(0, int(max_score) + 1, tick_step)),
                ticktext=[str(i) for i in range(0, int(max_score) + 1, tick_step)],
            ),
            angularaxis=dict(
                rotation=90,
                direction="clockwise",
                tickmode="array",
                tickvals=dim_summary["theta"],
                ticktext=dim_summary["Dimension"],
                tickfont=dict(size=16),
            ),
        ),
        template="plotly_white",
        height=560,
    )
    return fig
