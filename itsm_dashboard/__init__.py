"""ITSM incident and request dashboard analytics package."""

from .filters import RecordFilter
from .pipeline import DashboardSession, run_incident_pipeline, run_record_pipeline, run_request_pipeline
from .stats import build_dashboard_cards

__all__ = [
    "DashboardSession",
    "RecordFilter",
    "build_dashboard_cards",
    "run_incident_pipeline",
    "run_record_pipeline",
    "run_request_pipeline",
]
