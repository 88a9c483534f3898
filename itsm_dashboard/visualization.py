"""Plotly figures for counts, trend series and SLA compliance."""

from __future__ import annotations

from typing import Mapping

import pandas as pd
import plotly.express as px
from plotly.graph_objs import Figure


def count_bar_figure(counts: Mapping[str, int], title: str, label: str = "group") -> Figure | None:
    if not counts:
        return None
    frame = pd.DataFrame({label: list(counts.keys()), "count": list(counts.values())})
    return px.bar(frame, x=label, y="count", title=title)


def trend_figure(trend: pd.DataFrame, title: str = "Trend") -> Figure | None:
    if trend is None or trend.empty:
        return None
    series_columns = [col for col in trend.columns if col not in {"period", "period_start", "total"}]
    if not series_columns:
        return px.line(trend, x="period", y="total", markers=True, title=title)
    long = trend.melt(id_vars=["period"], value_vars=series_columns, var_name="series", value_name="count")
    return px.line(long, x="period", y="count", color="series", markers=True, title=title)


def sla_figure(sla: pd.DataFrame, title: str = "SLA Compliance") -> Figure | None:
    if sla is None or sla.empty:
        return None
    group_column = sla.columns[0]
    long = sla.melt(
        id_vars=[group_column],
        value_vars=["within_sla", "outside_sla"],
        var_name="sla",
        value_name="count",
    )
    return px.bar(long, x=group_column, y="count", color="sla", barmode="stack", title=title)
