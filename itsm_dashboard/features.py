"""Derived per-record features: lifecycle flags, SLA elapsed time and shifts."""

from __future__ import annotations

from datetime import datetime
from typing import Mapping

import numpy as np
import pandas as pd

from .constants import (
    INCIDENT,
    INCIDENT_SLA_THRESHOLD_HOURS,
    OUTSIDE_SLA_LABEL,
    REQUEST_SLA_THRESHOLD_HOURS,
    WITHIN_SLA_LABEL,
)
from .normalization import cancelled_status, completed_status, is_terminal, undefined_priority
from .records import to_naive_utc, validate_kind
from .shifts import Shift, default_shifts, shift_for_timestamp


def sla_thresholds(kind: str, overrides: Mapping[str, float] | None = None) -> dict[str, float]:
    kind = validate_kind(kind)
    base = INCIDENT_SLA_THRESHOLD_HOURS if kind == INCIDENT else REQUEST_SLA_THRESHOLD_HOURS
    sla_map = {key: float(value) for key, value in base.items()}
    if overrides:
        for key, value in overrides.items():
            if value is None:
                continue
            sla_map[str(key)] = float(value)
    return sla_map


def derive_features(
    df: pd.DataFrame,
    kind: str,
    reference_time: datetime | None = None,
    sla_threshold_hours: Mapping[str, float] | None = None,
    shifts: Mapping[str, Shift] | None = None,
) -> pd.DataFrame:
    kind = validate_kind(kind)
    if reference_time is None:
        reference_time = datetime.now()
    reference = to_naive_utc(pd.Timestamp(reference_time))
    sla_map = sla_thresholds(kind, sla_threshold_hours)
    shift_map = dict(shifts) if shifts else default_shifts()

    enriched = df.copy()
    for column in ("opened_at", "updated_at", "closed_at"):
        if column not in enriched:
            enriched[column] = pd.NaT

    enriched["is_terminal"] = enriched["status_derived"].map(lambda status: is_terminal(kind, status)).astype(bool)
    enriched["is_completed"] = enriched["status_derived"] == completed_status(kind)
    enriched["is_cancelled"] = enriched["status_derived"] == cancelled_status(kind)
    enriched["is_active"] = ~enriched["is_terminal"]

    # Terminal records stop the clock at their close (or last update) stamp.
    terminal_end = enriched["closed_at"].fillna(enriched["updated_at"])
    enriched["sla_end_at"] = terminal_end.where(enriched["is_terminal"], reference)

    elapsed = (enriched["sla_end_at"] - enriched["opened_at"]).dt.total_seconds() / 3600
    enriched["elapsed_hours"] = elapsed.clip(lower=0)

    fallback = sla_map.get(undefined_priority(kind), max(sla_map.values()))
    enriched["sla_threshold_hours"] = enriched["priority_derived"].map(sla_map).fillna(fallback).astype(float)

    # Unreadable dates count against the SLA.
    enriched["within_sla"] = (
        enriched["elapsed_hours"].notna() & (enriched["elapsed_hours"] <= enriched["sla_threshold_hours"])
    )
    enriched["sla_status"] = np.where(enriched["within_sla"], WITHIN_SLA_LABEL, OUTSIDE_SLA_LABEL)
    enriched["hours_over_sla"] = (enriched["elapsed_hours"] - enriched["sla_threshold_hours"]).clip(lower=0)

    enriched["shift"] = enriched["opened_at"].map(lambda ts: shift_for_timestamp(ts, shift_map))
    enriched["opened_month"] = enriched["opened_at"].dt.to_period("M").astype(str).replace({"NaT": None})

    return enriched
