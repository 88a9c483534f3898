from __future__ import annotations

import pandas as pd

from itsm_dashboard.insights import (
    build_dashboard_report,
    build_overview_metrics,
    find_priority_alerts,
    format_sla_overrun,
    generate_recommendations,
    out_of_sla_records,
    pending_records,
)


def test_overview_metrics(enriched_incidents) -> None:
    metrics = build_overview_metrics(enriched_incidents, "incident")

    assert metrics["total"] == 6
    assert metrics["active"] == 3
    assert metrics["terminal"] == 3
    assert metrics["high_priority_active"] == 1
    assert metrics["unparseable_dates"] == 1
    assert metrics["outside_sla"] == 4
    assert metrics["active_share"] == 0.5


def test_priority_alerts_and_pending(enriched_incidents, enriched_requests) -> None:
    alerts = find_priority_alerts(enriched_incidents)
    assert alerts["number"].tolist() == ["INC0004"]
    assert "elapsed_hours" in alerts.columns

    request_alerts = find_priority_alerts(enriched_requests)
    assert request_alerts["number"].tolist() == ["RITM0003"]

    pending = pending_records(enriched_incidents, "incident")
    assert pending["number"].tolist() == ["INC0003", "INC0004"]
    assert pending_records(enriched_requests, "request")["number"].tolist() == ["RITM0003"]


def test_format_sla_overrun() -> None:
    assert format_sla_overrun(0) == "Within SLA"
    assert format_sla_overrun(float("nan")) == "Within SLA"
    assert format_sla_overrun(0.4) == "Less than 1 hour over SLA"
    assert format_sla_overrun(1.2) == "1 hour over SLA"
    assert format_sla_overrun(5) == "5 hours over SLA"
    assert format_sla_overrun(24) == "1 day over SLA"
    assert format_sla_overrun(73) == "3 days and 1 hour over SLA"


def test_out_of_sla_records(enriched_incidents) -> None:
    outside = out_of_sla_records(enriched_incidents)

    assert outside["number"].tolist() == ["INC0003", "INC0004", "INC0002", "INC0005"]
    assert outside.loc[0, "sla_overrun"] == "3 days and 1 hour over SLA"
    assert outside.loc[3, "sla_overrun"] == "Unknown (unreadable dates)"


def test_recommendations(enriched_incidents) -> None:
    recommendations = generate_recommendations(enriched_incidents, "incident")
    assert any("SLA compliance" in item for item in recommendations)
    assert any("high-priority incidents" in item for item in recommendations)
    assert any("unreadable opened dates" in item for item in recommendations)


def test_report_on_empty_frame() -> None:
    report = build_dashboard_report(pd.DataFrame(), "request")
    assert report["metrics"]["total"] == 0
    assert report["metrics"]["by_status"]["NEW"] == 0
    assert report["priority_alerts"].empty
    assert report["out_of_sla"].empty
    assert report["recommendations"] == ["Current volume and SLA performance look stable."]
