from __future__ import annotations

import pandas as pd

from itsm_dashboard.history import (
    analyst_monthly_performance,
    build_monthly_history,
    location_variation,
    monthly_variation,
    previous_window,
)
from itsm_dashboard.pipeline import run_request_pipeline


def test_monthly_history(enriched_incidents, enriched_requests) -> None:
    history = build_monthly_history(enriched_incidents, enriched_requests, "2025-11-01", "2026-01-31")

    assert [entry["month"] for entry in history] == ["2025-11", "2025-12", "2026-01"]
    assert [entry["total"] for entry in history] == [1, 1, 8]

    january = history[-1]
    assert january["incidents"]["total"] == 4
    assert january["incidents"]["by_priority"]["P2"] == 2
    assert january["incidents"]["sla_compliance"] == {"within_sla": 1, "outside_sla": 3, "percentage": 25.0}
    assert january["requests"]["completion_rate"] == 25.0
    assert history[0]["requests"]["completion_rate"] == 100.0


def test_monthly_history_accepts_missing_kind(enriched_incidents) -> None:
    history = build_monthly_history(enriched_incidents, None, "2026-01-01", "2026-01-31")
    assert history[0]["requests"]["total"] == 0
    assert history[0]["requests"]["by_status"]["NEW"] == 0


def test_monthly_variation(enriched_incidents, enriched_requests) -> None:
    variation = monthly_variation(enriched_incidents, enriched_requests, "2025-11-01", "2026-01-31")

    assert variation["incidents_total"].tolist() == [0, 1, 4]
    assert variation["incidents_change_pct"].tolist() == [0.0, 0.0, 300.0]
    assert variation["requests_change_pct"].tolist() == [0.0, -100.0, 0.0]
    assert variation["sla_change"].tolist() == [0.0, 100.0, -75.0]


def test_previous_window_same_length() -> None:
    start, end = previous_window("2026-01-01", "2026-01-31")
    assert start == pd.Timestamp(2025, 12, 1)
    assert end == pd.Timestamp(2025, 12, 31, 23, 59, 59, 999999)


def test_location_variation(enriched_incidents, enriched_requests) -> None:
    variation = location_variation(enriched_incidents, enriched_requests, "2026-01-01", "2026-01-31")

    assert variation["location"].tolist() == ["SA-Local Sup", "BA-Local Sup", "BR-Net/Tel", "BR-TM"]
    sa = variation.set_index("location").loc["SA-Local Sup"]
    assert sa["current_incidents"] == 2
    assert sa["previous_incidents"] == 1
    assert sa["incidents_change_pct"] == 100.0
    assert sa["current_sla_pct"] == 50.0
    assert sa["sla_change"] == -50.0

    ba = variation.set_index("location").loc["BA-Local Sup"]
    assert ba["current_requests"] == 2
    assert ba["requests_change_pct"] == 0.0


def test_analyst_monthly_performance(enriched_incidents) -> None:
    perf = analyst_monthly_performance(enriched_incidents, "Ana Lima", "2025-12-01", "2026-01-31")

    assert perf["month"].tolist() == ["2025-12", "2026-01"]
    assert perf["total"].tolist() == [1, 2]
    assert perf["completed"].tolist() == [0, 1]
    assert perf["completion_rate"].tolist() == [0.0, 50.0]
    assert perf["avg_resolution_hours"].tolist() == [0.0, 0.5]


def test_unknown_analyst_has_empty_months(enriched_incidents) -> None:
    perf = analyst_monthly_performance(enriched_incidents, "Nobody", "2026-01-01", "2026-02-28")
    assert perf["total"].tolist() == [0, 0]


def test_completion_without_close_stamp_still_counts(reference_time) -> None:
    raw = pd.DataFrame(
        {
            "Number": ["RITM9001"],
            "Opened": ["2026-01-05 09:00:00"],
            "State": ["Closed Complete"],
            "Assigned To": ["Eva Rocha"],
        }
    )
    requests = run_request_pipeline(raw, reference_time=reference_time)

    perf = analyst_monthly_performance(requests, "Eva Rocha", "2026-01-01", "2026-01-31")

    assert perf["completed"].tolist() == [1]
    assert perf["completion_rate"].tolist() == [100.0]
    assert perf["avg_resolution_hours"].tolist() == [0.0]
