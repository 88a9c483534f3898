"""Grouped counts, top-N, SLA compliance and calendar trend series.

All functions take an enriched records frame and return fresh structures;
empty input yields zero-filled output rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import pandas as pd

from .constants import TREND_FREQUENCIES, UNSPECIFIED_LABEL
from .filters import DateLike
from .normalization import priority_levels, status_levels
from .records import is_missing


@dataclass
class AggregateBucket:
    key: str
    total: int = 0
    counts: dict[str, int] = field(default_factory=dict)


def safe_ratio(num: float, den: float) -> float:
    if den == 0:
        return 0.0
    return float(num) / float(den)


def _grouping_values(df: pd.DataFrame, column: str, unspecified_label: str) -> pd.Series:
    if column not in df:
        return pd.Series(unspecified_label, index=df.index, dtype=object)
    return df[column].map(lambda value: unspecified_label if is_missing(value) else str(value).strip())


def _ranked_counts(values: pd.Series) -> pd.Series:
    # groupby(sort=False) keeps first-seen order; a stable sort keeps it for ties.
    counts = values.groupby(values, sort=False).size()
    return counts.sort_values(ascending=False, kind="stable")


def count_by(df: pd.DataFrame, column: str, unspecified_label: str = UNSPECIFIED_LABEL) -> dict[str, int]:
    if df.empty:
        return {}
    counts = _ranked_counts(_grouping_values(df, column, unspecified_label))
    return {str(key): int(value) for key, value in counts.items()}


def count_by_levels(df: pd.DataFrame, column: str, levels: Sequence[str]) -> dict[str, int]:
    result = {level: 0 for level in levels}
    if df.empty or column not in df:
        return result
    for key, value in df[column].value_counts().items():
        result[str(key)] = result.get(str(key), 0) + int(value)
    return result


def count_by_status(df: pd.DataFrame, kind: str) -> dict[str, int]:
    return count_by_levels(df, "status_derived", status_levels(kind))


def count_by_priority(df: pd.DataFrame, kind: str) -> dict[str, int]:
    return count_by_levels(df, "priority_derived", priority_levels(kind))


def top_n(df: pd.DataFrame, column: str, n: int = 5, unspecified_label: str = UNSPECIFIED_LABEL) -> pd.DataFrame:
    if df.empty or n <= 0:
        return pd.DataFrame(columns=[column, "count"])
    counts = _ranked_counts(_grouping_values(df, column, unspecified_label)).head(n)
    return pd.DataFrame({column: [str(key) for key in counts.index], "count": counts.astype(int).to_list()})


def build_aggregate_buckets(
    df: pd.DataFrame,
    key: str,
    sub_dimension: str,
    unspecified_label: str = UNSPECIFIED_LABEL,
) -> dict[str, AggregateBucket]:
    buckets: dict[str, AggregateBucket] = {}
    if df.empty:
        return buckets

    keys = _grouping_values(df, key, unspecified_label)
    subs = _grouping_values(df, sub_dimension, unspecified_label)
    for bucket_key, sub_key in zip(keys, subs):
        bucket = buckets.get(bucket_key)
        if bucket is None:
            bucket = buckets[bucket_key] = AggregateBucket(key=bucket_key)
        bucket.total += 1
        bucket.counts[sub_key] = bucket.counts.get(sub_key, 0) + 1
    return buckets


def _period_index(start: DateLike, end: DateLike, grain: str) -> pd.PeriodIndex:
    try:
        freq = TREND_FREQUENCIES[grain]
    except KeyError as exc:
        raise ValueError(f"Unsupported trend grain: {grain!r}") from exc
    start_ts = pd.Timestamp(start)
    end_ts = pd.Timestamp(end)
    if end_ts < start_ts:
        return pd.PeriodIndex([], freq=freq)
    return pd.period_range(start=start_ts.to_period(freq), end=end_ts.to_period(freq), freq=freq)


def trend_series(
    df: pd.DataFrame,
    start: DateLike,
    end: DateLike,
    grain: str = "M",
    breakdown: str = "priority_derived",
    levels: Iterable[str] | None = None,
    date_column: str = "opened_at",
) -> pd.DataFrame:
    """Count records per calendar period between ``start`` and ``end``.

    Every period in the inclusive range gets a row, empty ones with zero
    counts. Records with no readable date are left out. When ``levels`` is
    given the breakdown columns are exactly those levels, in order.
    """
    periods = _period_index(start, end, grain)
    level_list = list(levels) if levels is not None else None

    if df.empty or date_column not in df:
        dated = pd.DataFrame(columns=[date_column, breakdown])
    else:
        dated = df.loc[df[date_column].notna()]

    if dated.empty:
        columns = level_list or []
        counts = pd.DataFrame(0, index=periods, columns=columns)
    else:
        record_periods = dated[date_column].dt.to_period(TREND_FREQUENCIES[grain])
        values = _grouping_values(dated, breakdown, UNSPECIFIED_LABEL)
        counts = values.groupby([record_periods, values]).size().unstack(fill_value=0)
        counts = counts.reindex(index=periods, fill_value=0)
        if level_list is not None:
            counts = counts.reindex(columns=level_list, fill_value=0)
        counts = counts.fillna(0).astype(int)

    counts.columns = [str(col) for col in counts.columns]
    result = counts.copy()
    result["total"] = counts.sum(axis=1).astype(int) if len(counts.columns) else 0
    result.insert(0, "period_start", [period.start_time for period in periods])
    result.insert(0, "period", [str(period) for period in periods])
    return result.reset_index(drop=True)


def monthly_trend(
    df: pd.DataFrame,
    start: DateLike,
    end: DateLike,
    kind: str,
    breakdown: str = "priority",
) -> pd.DataFrame:
    column, levels = breakdown_levels(kind, breakdown)
    return trend_series(df, start, end, grain="M", breakdown=column, levels=levels)


def weekly_trend(
    df: pd.DataFrame,
    start: DateLike,
    end: DateLike,
    kind: str,
    breakdown: str = "priority",
) -> pd.DataFrame:
    column, levels = breakdown_levels(kind, breakdown)
    return trend_series(df, start, end, grain="W", breakdown=column, levels=levels)


def breakdown_levels(kind: str, breakdown: str) -> tuple[str, tuple[str, ...]]:
    if breakdown == "priority":
        return "priority_derived", priority_levels(kind)
    if breakdown == "status":
        return "status_derived", status_levels(kind)
    raise ValueError(f"Unsupported trend breakdown: {breakdown!r}")


def sla_compliance(df: pd.DataFrame, kind: str, by: str = "priority_derived") -> pd.DataFrame:
    """Within/outside SLA counts per group; priority groups are zero-filled."""
    columns = [by, "within_sla", "outside_sla", "total", "compliance_pct"]
    levels: list[str] = list(priority_levels(kind)) if by == "priority_derived" else []

    if df.empty or "within_sla" not in df:
        grouped = pd.DataFrame({"within_sla": [], "total": []})
    else:
        keys = _grouping_values(df, by, UNSPECIFIED_LABEL)
        within = df["within_sla"].fillna(False).astype(bool)
        grouped = pd.DataFrame({"key": keys, "within": within}).groupby("key", sort=False).agg(
            within_sla=("within", "sum"), total=("within", "size")
        )

    order = levels + [key for key in grouped.index if key not in levels]
    rows = []
    for key in order:
        within_count = int(grouped.loc[key, "within_sla"]) if key in grouped.index else 0
        total = int(grouped.loc[key, "total"]) if key in grouped.index else 0
        rows.append(
            {
                by: key,
                "within_sla": within_count,
                "outside_sla": total - within_count,
                "total": total,
                "compliance_pct": round(safe_ratio(within_count, total) * 100.0, 2),
            }
        )
    return pd.DataFrame(rows, columns=columns)


def sla_summary(df: pd.DataFrame) -> dict[str, float | int]:
    total = int(len(df))
    compliant = int(df["within_sla"].sum()) if "within_sla" in df and total else 0
    return {
        "total": total,
        "compliant": compliant,
        "non_compliant": total - compliant,
        "percentage": round(safe_ratio(compliant, total) * 100.0, 2),
    }
