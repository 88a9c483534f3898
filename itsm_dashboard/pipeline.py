"""Pipeline orchestration for the ITSM dashboard."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping

import pandas as pd

from .aggregation import breakdown_levels, sla_compliance, top_n, trend_series
from .constants import INCIDENT, REQUEST
from .features import derive_features
from .filters import DateLike, RecordFilter, apply_filters
from .insights import build_dashboard_report
from .loaders import read_records_file
from .preprocessing import preprocess_records
from .records import records_to_frame, validate_kind
from .shifts import Shift
from .stats import build_dashboard_cards, determine_trend_grain

logger = logging.getLogger(__name__)


def run_record_pipeline(
    raw_df: pd.DataFrame,
    kind: str,
    reference_time: datetime | None = None,
    user_mapping: dict[str, str] | None = None,
    sla_threshold_hours: Mapping[str, float] | None = None,
    location_aliases: Mapping[str, str] | None = None,
    shifts: Mapping[str, Shift] | None = None,
) -> pd.DataFrame:
    preprocessed = preprocess_records(raw_df, kind, user_mapping=user_mapping, location_aliases=location_aliases)
    enriched = derive_features(
        preprocessed,
        kind,
        reference_time=reference_time,
        sla_threshold_hours=sla_threshold_hours,
        shifts=shifts,
    )
    logger.debug("Enriched %d %s record(s)", len(enriched), kind)
    return enriched


def run_incident_pipeline(raw_df: pd.DataFrame, **kwargs: Any) -> pd.DataFrame:
    return run_record_pipeline(raw_df, INCIDENT, **kwargs)


def run_request_pipeline(raw_df: pd.DataFrame, **kwargs: Any) -> pd.DataFrame:
    return run_record_pipeline(raw_df, REQUEST, **kwargs)


@dataclass
class DashboardSession:
    kind: str
    enriched_df: pd.DataFrame

    @classmethod
    def from_dataframe(cls, raw_df: pd.DataFrame, kind: str, **kwargs: Any) -> "DashboardSession":
        kind = validate_kind(kind)
        return cls(kind=kind, enriched_df=run_record_pipeline(raw_df, kind, **kwargs))

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]], kind: str, **kwargs: Any) -> "DashboardSession":
        return cls.from_dataframe(records_to_frame(records), kind, **kwargs)

    @classmethod
    def from_file(cls, path: str, kind: str, **kwargs: Any) -> "DashboardSession":
        return cls.from_dataframe(read_records_file(path), kind, **kwargs)

    def filtered(self, record_filter: RecordFilter | None = None) -> pd.DataFrame:
        return apply_filters(self.enriched_df, record_filter)

    def report(self, record_filter: RecordFilter | None = None) -> dict:
        df = self.filtered(record_filter)
        return {
            "cards": build_dashboard_cards(df, self.kind),
            "report": build_dashboard_report(df, self.kind),
        }

    def trend(
        self,
        start: DateLike,
        end: DateLike,
        grain: str | None = None,
        breakdown: str = "priority",
        record_filter: RecordFilter | None = None,
    ) -> pd.DataFrame:
        if grain is None:
            grain = determine_trend_grain(pd.Timestamp(start), pd.Timestamp(end))
        column, levels = breakdown_levels(self.kind, breakdown)
        return trend_series(self.filtered(record_filter), start, end, grain=grain, breakdown=column, levels=levels)

    def sla(self, record_filter: RecordFilter | None = None, by: str = "priority_derived") -> pd.DataFrame:
        return sla_compliance(self.filtered(record_filter), self.kind, by=by)

    def top(self, column: str, n: int = 5, record_filter: RecordFilter | None = None) -> pd.DataFrame:
        return top_n(self.filtered(record_filter), column, n=n)
