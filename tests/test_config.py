from __future__ import annotations

import json
import logging

from itsm_dashboard.config import DashboardConfig, configure_logging


def test_defaults_from_empty_environment() -> None:
    config = DashboardConfig.from_env({})

    assert config.top_n == 5
    assert config.log_level == "INFO"
    assert set(config.shifts) == {"MORNING", "AFTERNOON", "NIGHT"}
    assert config.sla_overrides("incident") == {}


def test_values_from_environment() -> None:
    env = {
        "ITSM_DASHBOARD_INCIDENT_SLA_HOURS": json.dumps({"P3": 24}),
        "ITSM_DASHBOARD_REQUEST_SLA_HOURS": json.dumps({"LOW": 240}),
        "ITSM_DASHBOARD_LOCATION_ALIASES": json.dumps({"Plant 7": "P7"}),
        "ITSM_DASHBOARD_SHIFTS": json.dumps({"DAY": {"name": "Day", "start_time": "07:00", "end_time": "19:00"}}),
        "ITSM_DASHBOARD_TOP_N": "10",
        "ITSM_DASHBOARD_LOG_LEVEL": "debug",
    }
    config = DashboardConfig.from_env(env)

    assert config.sla_overrides("incident") == {"P3": 24}
    assert config.sla_overrides("request") == {"LOW": 240}
    assert config.location_aliases == {"Plant 7": "P7"}
    assert list(config.shifts) == ["DAY"]
    assert config.top_n == 10
    assert config.log_level == "DEBUG"


def test_bad_values_fall_back_with_warning(caplog) -> None:
    env = {
        "ITSM_DASHBOARD_INCIDENT_SLA_HOURS": "{not json",
        "ITSM_DASHBOARD_SHIFTS": json.dumps({"DAY": {"start_time": "07:00"}}),
        "ITSM_DASHBOARD_TOP_N": "lots",
        "ITSM_DASHBOARD_LOCATION_ALIASES": "[1, 2]",
    }
    with caplog.at_level(logging.WARNING):
        config = DashboardConfig.from_env(env)

    assert config.incident_sla_hours == {}
    assert config.location_aliases == {}
    assert set(config.shifts) == {"MORNING", "AFTERNOON", "NIGHT"}
    assert config.top_n == 5
    assert "Ignoring invalid shift configuration" in caplog.text


def test_top_n_has_a_floor() -> None:
    assert DashboardConfig.from_env({"ITSM_DASHBOARD_TOP_N": "0"}).top_n == 1


def test_configure_logging_accepts_unknown_level() -> None:
    configure_logging("not-a-level")
    configure_logging("DEBUG")
