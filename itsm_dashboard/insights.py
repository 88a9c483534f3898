"""Overview metrics, alerts and record listings for the dashboard."""

from __future__ import annotations

from typing import Any

import pandas as pd

from .aggregation import count_by_priority, count_by_status, safe_ratio, sla_summary
from .normalization import is_high_priority, on_hold_status
from .records import validate_kind

_LISTING_COLUMNS = [
    "number",
    "short_description",
    "priority_derived",
    "status_derived",
    "location_derived",
    "analyst_derived",
    "opened_at",
]


def _listing(df: pd.DataFrame, extra: list[str] | None = None) -> pd.DataFrame:
    columns = [col for col in _LISTING_COLUMNS + (extra or []) if col in df.columns]
    return df[columns].reset_index(drop=True)


def build_overview_metrics(df: pd.DataFrame, kind: str) -> dict[str, Any]:
    kind = validate_kind(kind)
    total = int(len(df))
    active = int(df["is_active"].sum()) if "is_active" in df else total
    high_priority_active = 0
    if total and "priority_derived" in df:
        high_mask = df["priority_derived"].map(is_high_priority).astype(bool)
        active_mask = df["is_active"] if "is_active" in df else True
        high_priority_active = int((high_mask & active_mask).sum())

    sla = sla_summary(df)
    return {
        "total": total,
        "active": active,
        "terminal": total - active,
        "high_priority_active": high_priority_active,
        "by_status": count_by_status(df, kind),
        "by_priority": count_by_priority(df, kind),
        "sla_compliance_pct": sla["percentage"],
        "outside_sla": sla["non_compliant"],
        "unparseable_dates": int(df["opened_parse_failed"].sum()) if "opened_parse_failed" in df else 0,
        "active_share": round(safe_ratio(active, total), 4),
    }


def find_priority_alerts(df: pd.DataFrame) -> pd.DataFrame:
    """Active P1/P2 incidents or HIGH requests, oldest first."""
    if df.empty:
        return _listing(df)
    mask = df["priority_derived"].map(is_high_priority).astype(bool) & df["is_active"]
    alerts = df[mask].sort_values("opened_at", na_position="first", kind="stable")
    return _listing(alerts, extra=["elapsed_hours"])


def pending_records(df: pd.DataFrame, kind: str) -> pd.DataFrame:
    """Active records that are being worked, i.e. not parked on hold."""
    if df.empty:
        return _listing(df)
    mask = df["is_active"] & (df["status_derived"] != on_hold_status(kind))
    return _listing(df[mask].sort_values("opened_at", na_position="first", kind="stable"))


def format_sla_overrun(hours_over: float) -> str:
    if pd.isna(hours_over) or hours_over <= 0:
        return "Within SLA"
    whole_hours = int(hours_over)
    days, remaining = divmod(whole_hours, 24)
    if days:
        text = f"{days} {'day' if days == 1 else 'days'}"
        if remaining:
            text += f" and {remaining} {'hour' if remaining == 1 else 'hours'}"
        return f"{text} over SLA"
    if whole_hours == 0:
        return "Less than 1 hour over SLA"
    return f"{whole_hours} {'hour' if whole_hours == 1 else 'hours'} over SLA"


def out_of_sla_records(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty or "within_sla" not in df:
        return _listing(df)
    outside = df[~df["within_sla"].astype(bool)].copy()
    outside["sla_overrun"] = outside["hours_over_sla"].map(format_sla_overrun)
    # Rows with unreadable dates have no overrun figure but still breach.
    outside.loc[outside["elapsed_hours"].isna(), "sla_overrun"] = "Unknown (unreadable dates)"
    outside = outside.sort_values("hours_over_sla", ascending=False, na_position="last", kind="stable")
    return _listing(outside, extra=["sla_threshold_hours", "elapsed_hours", "sla_overrun"])


def generate_recommendations(df: pd.DataFrame, kind: str) -> list[str]:
    recommendations: list[str] = []
    metrics = build_overview_metrics(df, kind)

    if metrics["total"] and metrics["sla_compliance_pct"] < 80:
        recommendations.append(
            f"SLA compliance is {metrics['sla_compliance_pct']}%. Review the priorities with the most breaches."
        )
    if metrics["high_priority_active"] > 0:
        recommendations.append(
            f"There are {metrics['high_priority_active']} active high-priority {kind}s. Confirm ownership today."
        )
    if metrics["unparseable_dates"] > 0:
        recommendations.append(
            f"{metrics['unparseable_dates']} records have unreadable opened dates and are excluded from trends."
        )
    if not recommendations:
        recommendations.append("Current volume and SLA performance look stable.")
    return recommendations


def build_dashboard_report(df: pd.DataFrame, kind: str) -> dict[str, Any]:
    return {
        "metrics": build_overview_metrics(df, kind),
        "priority_alerts": find_priority_alerts(df),
        "pending": pending_records(df, kind),
        "out_of_sla": out_of_sla_records(df),
        "recommendations": generate_recommendations(df, kind),
    }
