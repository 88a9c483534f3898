"""Data ingestion and preprocessing helpers for ITSM ticket exports."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from .constants import COLUMN_ALIASES, INCIDENT, RECORD_COLUMNS, UNCATEGORIZED_LABEL, UNSPECIFIED_LABEL
from .normalization import normalize_location, normalize_priority, normalize_status
from .records import is_missing, to_naive_utc, validate_kind

logger = logging.getLogger(__name__)

_ISO_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}")
_SLASHED_RE = re.compile(r"^\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}")
_SERIAL_RE = re.compile(r"^\d{4,6}(?:\.\d+)?$")
_EXCEL_EPOCH = pd.Timestamp("1899-12-30")


def normalize_column_name(column: str) -> str:
    cleaned = re.sub(r"[^0-9a-zA-Z]+", "_", str(column).strip().lower())
    cleaned = re.sub(r"_+", "_", cleaned).strip("_")
    return cleaned


def _canonical_alias_map() -> dict[str, str]:
    mapping: dict[str, str] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            mapping[normalize_column_name(alias)] = canonical
    return mapping


def normalize_and_alias_columns(df: pd.DataFrame, user_mapping: dict[str, str] | None = None) -> pd.DataFrame:
    result = df.copy()
    result.columns = [normalize_column_name(col) for col in result.columns]

    # User mapping takes priority over aliases.
    if user_mapping:
        normalized_mapping = {
            normalize_column_name(source): normalize_column_name(target) for source, target in user_mapping.items()
        }
        rename_by_user = {col: normalized_mapping[col] for col in result.columns if col in normalized_mapping}
        if rename_by_user:
            result = result.rename(columns=rename_by_user)

    alias_to_canonical = _canonical_alias_map()
    renamed: dict[str, str] = {}
    existing = set(result.columns)
    for col in result.columns:
        canonical = alias_to_canonical.get(col)
        if canonical is None or canonical == col:
            continue
        if canonical in existing or canonical in renamed.values():
            continue
        renamed[col] = canonical

    if renamed:
        result = result.rename(columns=renamed)

    return result


def _from_excel_serial(value: float) -> pd.Timestamp | None:
    if not 1 <= value < 2958466:
        return None
    return _EXCEL_EPOCH + pd.to_timedelta(value, unit="D")


def parse_timestamp(value: Any) -> pd.Timestamp | None:
    """Parse one raw date cell, returning ``None`` when it cannot be read.

    Accepts datetime objects, ISO strings, day-first ``dd/mm/yyyy`` strings
    and Excel serial day numbers. Timezone-aware values come back as naive
    UTC so a column never mixes aware and naive stamps.
    """
    if is_missing(value) or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (pd.Timestamp, datetime, date, np.datetime64)):
            parsed = pd.Timestamp(value)
        elif isinstance(value, (int, float, np.integer, np.floating)):
            parsed = _from_excel_serial(float(value))
        else:
            text = str(value).strip()
            if _ISO_RE.match(text):
                parsed = pd.Timestamp(text)
            elif _SLASHED_RE.match(text):
                parsed = pd.to_datetime(text, dayfirst=True, errors="coerce")
            elif _SERIAL_RE.match(text):
                parsed = _from_excel_serial(float(text))
            else:
                parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    if parsed is None or pd.isna(parsed):
        return None
    return to_naive_utc(parsed)


def parse_datetime_column(series: pd.Series) -> pd.Series:
    parsed = series.map(parse_timestamp)
    return pd.to_datetime(parsed, errors="coerce")


def _ensure_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    result = df.copy()
    for column in columns:
        if column not in result:
            result[column] = np.nan
    return result


def _text_or(series: pd.Series, fallback: str) -> pd.Series:
    return series.map(lambda value: fallback if is_missing(value) else str(value).strip())


def preprocess_records(
    raw_df: pd.DataFrame,
    kind: str,
    user_mapping: dict[str, str] | None = None,
    location_aliases: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    kind = validate_kind(kind)
    df = normalize_and_alias_columns(raw_df, user_mapping=user_mapping)
    df = _ensure_columns(df, RECORD_COLUMNS)

    for source in ("opened", "updated", "closed"):
        df[f"{source}_at"] = parse_datetime_column(df[source])
        present = ~df[source].map(is_missing).astype(bool)
        df[f"{source}_parse_failed"] = present & df[f"{source}_at"].isna()
        failed = int(df[f"{source}_parse_failed"].sum())
        if failed:
            logger.warning("%d %s record(s) have an unparseable %s date", failed, kind, source)

    missing = int(df["opened"].map(is_missing).astype(bool).sum())
    if missing:
        logger.warning("%d %s record(s) have no opened date", missing, kind)

    df["priority_derived"] = df["priority"].map(lambda value: normalize_priority(kind, value))
    df["status_derived"] = df["state"].map(lambda value: normalize_status(kind, value))
    df["location_derived"] = df["assignment_group"].map(lambda value: normalize_location(value, location_aliases))
    df["group_derived"] = _text_or(df["assignment_group"], UNSPECIFIED_LABEL)
    df["analyst_derived"] = _text_or(df["assigned_to"], UNSPECIFIED_LABEL)

    if kind == INCIDENT:
        df["category_derived"] = _text_or(df["category"], UNCATEGORIZED_LABEL)
        df["requester_derived"] = _text_or(df["caller"], UNSPECIFIED_LABEL)
    else:
        category_source = df["request_item"].where(~df["request_item"].map(is_missing).astype(bool), df["category"])
        df["category_derived"] = _text_or(category_source, UNCATEGORIZED_LABEL)
        df["requester_derived"] = _text_or(df["requested_for"], UNSPECIFIED_LABEL)

    df["subcategory_derived"] = _text_or(df["subcategory"], UNCATEGORIZED_LABEL)
    df["number"] = _text_or(df["number"], "")

    logger.debug("Preprocessed %d %s record(s)", len(df), kind)
    return df
