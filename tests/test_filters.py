from __future__ import annotations

from datetime import date

import pandas as pd

from itsm_dashboard.filters import RecordFilter, apply_filters, period_bounds, search_records


def test_period_bounds_cover_whole_end_day() -> None:
    start, end = period_bounds("2026-01-01", date(2026, 1, 31))
    assert start == pd.Timestamp(2026, 1, 1)
    assert end == pd.Timestamp(2026, 1, 31, 23, 59, 59, 999999)

    _, exact = period_bounds(None, "2026-01-31 18:00")
    assert exact == pd.Timestamp(2026, 1, 31, 18)


def test_date_range_excludes_unreadable_dates(enriched_incidents) -> None:
    filtered = apply_filters(enriched_incidents, RecordFilter(start_date="2026-01-01", end_date="2026-01-10"))
    assert filtered["number"].tolist() == ["INC0001", "INC0002", "INC0003"]


def test_no_filter_keeps_everything(enriched_incidents) -> None:
    assert len(apply_filters(enriched_incidents)) == len(enriched_incidents)
    assert len(apply_filters(enriched_incidents, RecordFilter())) == len(enriched_incidents)


def test_dimension_selections(enriched_incidents) -> None:
    filtered = apply_filters(
        enriched_incidents,
        RecordFilter(category="Software", location="SA-Local Sup", status="In Progress"),
    )
    assert filtered["number"].tolist() == ["INC0003"]

    by_priority = apply_filters(enriched_incidents, RecordFilter(priority="P2"))
    assert set(by_priority["number"]) == {"INC0002", "INC0004"}


def test_search_text_matches_fields_and_numbers(enriched_incidents, enriched_requests) -> None:
    assert apply_filters(enriched_incidents, RecordFilter(search_text="vpn"))["number"].tolist() == ["INC0001"]
    assert apply_filters(enriched_incidents, RecordFilter(search_text="maria"))["number"].tolist() == [
        "INC0002",
        "INC0005",
    ]
    assert search_records(enriched_requests, "0003")["number"].tolist() == ["RITM0003"]
    assert search_records(enriched_requests, "   ").empty
    assert len(search_records(enriched_requests, "ritm", limit=2)) == 2


def test_period_bounds_convert_aware_bounds_to_naive_utc() -> None:
    start, end = period_bounds(
        pd.Timestamp("2026-01-01 03:00", tz="America/Sao_Paulo"),
        pd.Timestamp("2026-01-10 23:59", tz="UTC"),
    )
    assert start == pd.Timestamp(2026, 1, 1, 6)
    assert start.tzinfo is None
    assert end == pd.Timestamp(2026, 1, 10, 23, 59)


def test_aware_date_range_filters_naive_records(enriched_incidents) -> None:
    record_filter = RecordFilter(
        start_date=pd.Timestamp("2026-01-01", tz="UTC"),
        end_date=pd.Timestamp("2026-01-10 23:59", tz="UTC"),
    )
    filtered = apply_filters(enriched_incidents, record_filter)
    assert filtered["number"].tolist() == ["INC0001", "INC0002", "INC0003"]
