"""Record filters: date range, free-text search and dimension selections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from .constants import SEARCH_COLUMNS
from .records import to_naive_utc

DateLike = Union[str, date, datetime, pd.Timestamp]


@dataclass(frozen=True)
class RecordFilter:
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None
    search_text: str = ""
    category: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    location: Optional[str] = None


def _is_date_only(value: DateLike) -> bool:
    if isinstance(value, str):
        return len(value.strip()) <= 10
    if isinstance(value, datetime):
        return False
    return isinstance(value, date)


def period_bounds(start: DateLike | None, end: DateLike | None) -> tuple[pd.Timestamp | None, pd.Timestamp | None]:
    """Inclusive naive-UTC bounds; a date-only end covers that whole day."""
    start_ts = to_naive_utc(pd.Timestamp(start)) if start is not None else None
    end_ts = None
    if end is not None:
        end_ts = to_naive_utc(pd.Timestamp(end))
        if _is_date_only(end) or end_ts == end_ts.normalize():
            end_ts = end_ts.normalize() + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
    return start_ts, end_ts


def _strip_leading_zeros(text: str) -> str:
    return text.lstrip("0") or text


def search_mask(df: pd.DataFrame, text: str) -> pd.Series:
    query = text.strip().lower()
    if not query:
        return pd.Series(True, index=df.index)

    mask = pd.Series(False, index=df.index)
    for column in SEARCH_COLUMNS:
        if column not in df:
            continue
        values = df[column].fillna("").astype(str).str.lower()
        mask |= values.str.contains(query, regex=False)

    if "number" in df:
        numbers = df["number"].fillna("").astype(str).str.lower().map(_strip_leading_zeros)
        mask |= numbers.str.contains(_strip_leading_zeros(query), regex=False)
    return mask


def apply_filters(df: pd.DataFrame, record_filter: RecordFilter | None = None) -> pd.DataFrame:
    if record_filter is None:
        return df.copy()

    filtered = df.copy()
    start, end = period_bounds(record_filter.start_date, record_filter.end_date)
    if (start is not None or end is not None) and "opened_at" in filtered:
        # Records without a readable opened date fall outside any date window.
        in_range = filtered["opened_at"].notna()
        if start is not None:
            in_range &= filtered["opened_at"] >= start
        if end is not None:
            in_range &= filtered["opened_at"] <= end
        filtered = filtered[in_range]

    selections = {
        "category_derived": record_filter.category,
        "status_derived": record_filter.status,
        "priority_derived": record_filter.priority,
        "location_derived": record_filter.location,
    }
    for column, value in selections.items():
        if not value or column not in filtered:
            continue
        filtered = filtered[filtered[column].astype(str) == str(value)]

    if record_filter.search_text:
        filtered = filtered[search_mask(filtered, record_filter.search_text)]

    return filtered


def search_records(df: pd.DataFrame, text: str, limit: int = 10) -> pd.DataFrame:
    if not text.strip():
        return df.iloc[0:0]
    return df[search_mask(df, text)].head(limit)
