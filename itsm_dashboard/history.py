"""Month-by-month history and period-over-period variation."""

from __future__ import annotations

from typing import Any

import pandas as pd

from .aggregation import count_by, count_by_priority, count_by_status, safe_ratio, sla_summary
from .constants import INCIDENT, REQUEST, UNCATEGORIZED_LABEL
from .filters import DateLike, period_bounds


def _pct_change(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return round(((current - previous) / previous) * 100.0, 2)


def _months(start: DateLike, end: DateLike) -> pd.PeriodIndex:
    start_ts = pd.Timestamp(start)
    end_ts = pd.Timestamp(end)
    if end_ts < start_ts:
        return pd.PeriodIndex([], freq="M")
    return pd.period_range(start=start_ts.to_period("M"), end=end_ts.to_period("M"), freq="M")


def _in_month(df: pd.DataFrame, month: pd.Period) -> pd.DataFrame:
    if df is None:
        return pd.DataFrame()
    if df.empty or "opened_at" not in df:
        return df.iloc[0:0]
    opened = df["opened_at"]
    return df[opened.notna() & (opened >= month.start_time) & (opened <= month.end_time)]


def _in_window(df: pd.DataFrame, start: pd.Timestamp, end: pd.Timestamp) -> pd.DataFrame:
    if df is None:
        return pd.DataFrame()
    if df.empty or "opened_at" not in df:
        return df.iloc[0:0]
    opened = df["opened_at"]
    return df[opened.notna() & (opened >= start) & (opened <= end)]


def _incident_month(df: pd.DataFrame) -> dict[str, Any]:
    sla = sla_summary(df)
    return {
        "total": int(len(df)),
        "by_priority": count_by_priority(df, INCIDENT),
        "by_category": count_by(df, "category_derived", UNCATEGORIZED_LABEL),
        "by_status": count_by_status(df, INCIDENT),
        "sla_compliance": {
            "within_sla": sla["compliant"],
            "outside_sla": sla["non_compliant"],
            "percentage": sla["percentage"],
        },
    }


def _request_month(df: pd.DataFrame) -> dict[str, Any]:
    completed = int(df["is_completed"].sum()) if "is_completed" in df else 0
    return {
        "total": int(len(df)),
        "by_priority": count_by_priority(df, REQUEST),
        "by_status": count_by_status(df, REQUEST),
        "by_category": count_by(df, "category_derived", UNCATEGORIZED_LABEL),
        "completion_rate": round(safe_ratio(completed, len(df)) * 100.0, 2),
    }


def build_monthly_history(
    incidents: pd.DataFrame | None,
    requests: pd.DataFrame | None,
    start: DateLike,
    end: DateLike,
) -> list[dict[str, Any]]:
    history = []
    for month in _months(start, end):
        month_incidents = _in_month(incidents, month)
        month_requests = _in_month(requests, month)
        incident_data = _incident_month(month_incidents)
        request_data = _request_month(month_requests)
        history.append(
            {
                "month": str(month),
                "incidents": incident_data,
                "requests": request_data,
                "total": incident_data["total"] + request_data["total"],
            }
        )
    return history


def monthly_variation(
    incidents: pd.DataFrame | None,
    requests: pd.DataFrame | None,
    start: DateLike,
    end: DateLike,
) -> pd.DataFrame:
    """Per-month totals with the change against the preceding month."""
    columns = [
        "month",
        "incidents_total",
        "requests_total",
        "sla_pct",
        "incidents_change_pct",
        "requests_change_pct",
        "sla_change",
    ]
    rows = []
    previous: dict[str, Any] | None = None
    for entry in build_monthly_history(incidents, requests, start, end):
        current = {
            "month": entry["month"],
            "incidents_total": entry["incidents"]["total"],
            "requests_total": entry["requests"]["total"],
            "sla_pct": entry["incidents"]["sla_compliance"]["percentage"],
        }
        if previous is None:
            current.update({"incidents_change_pct": 0.0, "requests_change_pct": 0.0, "sla_change": 0.0})
        else:
            current.update(
                {
                    "incidents_change_pct": _pct_change(current["incidents_total"], previous["incidents_total"]),
                    "requests_change_pct": _pct_change(current["requests_total"], previous["requests_total"]),
                    "sla_change": round(current["sla_pct"] - previous["sla_pct"], 2),
                }
            )
        rows.append(current)
        previous = current
    return pd.DataFrame(rows, columns=columns)


def previous_window(start: DateLike, end: DateLike) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Window of the same number of days ending the day before ``start``."""
    start_ts, end_ts = period_bounds(start, end)
    span_days = (end_ts.normalize() - start_ts.normalize()).days
    previous_end = start_ts.normalize() - pd.Timedelta(microseconds=1)
    previous_start = previous_end.normalize() - pd.Timedelta(days=span_days)
    return previous_start, previous_end


def location_variation(
    incidents: pd.DataFrame | None,
    requests: pd.DataFrame | None,
    start: DateLike,
    end: DateLike,
) -> pd.DataFrame:
    columns = [
        "location",
        "current_incidents",
        "previous_incidents",
        "incidents_change_pct",
        "current_requests",
        "previous_requests",
        "requests_change_pct",
        "current_sla_pct",
        "previous_sla_pct",
        "sla_change",
        "total_change_pct",
    ]
    current_start, current_end = period_bounds(start, end)
    previous_start, previous_end = previous_window(start, end)

    windows = {
        "current_incidents": _in_window(incidents, current_start, current_end),
        "previous_incidents": _in_window(incidents, previous_start, previous_end),
        "current_requests": _in_window(requests, current_start, current_end),
        "previous_requests": _in_window(requests, previous_start, previous_end),
    }

    locations: list[str] = []
    for frame in windows.values():
        if "location_derived" not in frame:
            continue
        for location in frame["location_derived"]:
            if location not in locations:
                locations.append(location)

    rows = []
    for location in locations:
        subsets = {
            name: frame[frame["location_derived"] == location] if "location_derived" in frame else frame
            for name, frame in windows.items()
        }
        counts = {name: int(len(subset)) for name, subset in subsets.items()}
        current_sla = sla_summary(subsets["current_incidents"])["percentage"]
        previous_sla = sla_summary(subsets["previous_incidents"])["percentage"]
        rows.append(
            {
                "location": location,
                **counts,
                "incidents_change_pct": _pct_change(counts["current_incidents"], counts["previous_incidents"]),
                "requests_change_pct": _pct_change(counts["current_requests"], counts["previous_requests"]),
                "current_sla_pct": current_sla,
                "previous_sla_pct": previous_sla,
                "sla_change": round(current_sla - previous_sla, 2),
                "total_change_pct": _pct_change(
                    counts["current_incidents"] + counts["current_requests"],
                    counts["previous_incidents"] + counts["previous_requests"],
                ),
            }
        )

    result = pd.DataFrame(rows, columns=columns)
    return result.sort_values("current_incidents", ascending=False, kind="stable").reset_index(drop=True)


def analyst_monthly_performance(
    df: pd.DataFrame,
    analyst: str,
    start: DateLike,
    end: DateLike,
) -> pd.DataFrame:
    columns = ["month", "total", "completed", "completion_rate", "avg_resolution_hours"]
    if df.empty or "analyst_derived" not in df:
        own = df.iloc[0:0]
    else:
        own = df[df["analyst_derived"] == analyst]

    rows = []
    for month in _months(start, end):
        month_records = _in_month(own, month)
        if "is_completed" in month_records:
            completed = month_records[month_records["is_completed"].astype(bool)]
        else:
            completed = month_records.iloc[0:0]
        # Completions without a readable close stamp are counted but not averaged.
        if "elapsed_hours" in completed:
            resolution_hours = completed["elapsed_hours"].dropna()
        else:
            resolution_hours = pd.Series(dtype=float)
        avg_hours = float(resolution_hours.mean()) if not resolution_hours.empty else 0.0
        rows.append(
            {
                "month": str(month),
                "total": int(len(month_records)),
                "completed": int(len(completed)),
                "completion_rate": round(safe_ratio(len(completed), len(month_records)) * 100.0, 2),
                "avg_resolution_hours": round(avg_hours, 2),
            }
        )
    return pd.DataFrame(rows, columns=columns)
