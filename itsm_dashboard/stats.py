"""Dashboard card metrics for incident and request exports."""

from __future__ import annotations

import pandas as pd

from .aggregation import count_by, count_by_priority, count_by_status, sla_compliance, sla_summary, top_n
from .constants import INCIDENT, REQUEST, UNCATEGORIZED_LABEL
from .records import validate_kind


def determine_trend_grain(start: pd.Timestamp, end: pd.Timestamp) -> str:
    months_span = (end.year - start.year) * 12 + (end.month - start.month) + 1
    years = months_span / 12.0

    if years > 3:
        return "Y"
    if years >= 1:
        return "Q"
    if months_span >= 2:
        return "M"
    return "W"


def _top_records(df: pd.DataFrame, column: str, label: str, n: int) -> list[dict]:
    frame = top_n(df, column, n=n)
    return [{label: row[column], "count": int(row["count"])} for _, row in frame.iterrows()]


def build_incident_stats(df: pd.DataFrame, top: int = 5) -> dict:
    return {
        "total": int(len(df)),
        "total_by_category": count_by(df, "category_derived", UNCATEGORIZED_LABEL),
        "total_by_subcategory": count_by(df, "subcategory_derived", UNCATEGORIZED_LABEL),
        "total_by_assignment_group": count_by(df, "location_derived"),
        "total_by_priority": count_by_priority(df, INCIDENT),
        "total_by_status": count_by_status(df, INCIDENT),
        "top_callers": _top_records(df, "requester_derived", "caller", top),
        "sla_compliance": sla_summary(df),
    }


def build_completion_metrics(df: pd.DataFrame) -> dict[str, int]:
    """On-time and late completions plus everything still pending."""
    if df.empty:
        return {"on_time": 0, "late": 0, "pending": 0, "cancelled": 0, "total": 0}

    completed = df[df["is_completed"]]
    on_time = int(completed["within_sla"].sum())
    return {
        "on_time": on_time,
        "late": int(len(completed)) - on_time,
        "pending": int(df["is_active"].sum()),
        "cancelled": int(df["is_cancelled"].sum()),
        "total": int(len(df)),
    }


def build_request_stats(df: pd.DataFrame, top: int = 5) -> dict:
    return {
        "total": int(len(df)),
        "total_by_category": count_by(df, "category_derived", UNCATEGORIZED_LABEL),
        "total_by_assignment_group": count_by(df, "location_derived"),
        "total_by_priority": count_by_priority(df, REQUEST),
        "total_by_status": count_by_status(df, REQUEST),
        "top_requesters": _top_records(df, "requester_derived", "requester", top),
        "completion_metrics": build_completion_metrics(df),
        "sla_compliance": sla_summary(df),
    }


def build_dashboard_cards(df: pd.DataFrame, kind: str, top: int = 5) -> dict:
    kind = validate_kind(kind)
    stats = build_incident_stats(df, top=top) if kind == INCIDENT else build_request_stats(df, top=top)
    return {
        "kind": kind,
        "stats": stats,
        "sla_by_priority": sla_compliance(df, kind),
        "top_locations": top_n(df, "location_derived", n=top),
        "top_categories": top_n(df, "category_derived", n=top),
        "top_analysts": top_n(df, "analyst_derived", n=top),
    }
