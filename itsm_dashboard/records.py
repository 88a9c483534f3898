"""Safe field access over loosely-typed ticket records."""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping

import pandas as pd

from .constants import RECORD_KINDS


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT or value is pd.NA:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def get_field(record: Mapping[str, Any] | pd.Series, name: str, default: Any = None) -> Any:
    """Return ``record[name]`` or ``default`` when the field is absent or blank.

    Works for plain mappings and pandas rows alike; ``None``, NaN, NaT and
    whitespace-only strings all count as absent.
    """
    try:
        value = record[name]
    except (KeyError, IndexError, TypeError):
        return default
    if is_missing(value):
        return default
    return value


def get_text(record: Mapping[str, Any] | pd.Series, name: str, default: str = "") -> str:
    value = get_field(record, name)
    if value is None:
        return default
    return str(value).strip()


def to_naive_utc(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is not None:
        return ts.tz_convert("UTC").tz_localize(None)
    return ts


def validate_kind(kind: str) -> str:
    normalized = str(kind).strip().lower()
    if normalized not in RECORD_KINDS:
        raise ValueError(f"Unsupported record kind: {kind!r}")
    return normalized


def records_to_frame(records: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    rows = [dict(record) for record in records]
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame.from_records(rows)
