from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytest

from itsm_dashboard.pipeline import run_incident_pipeline, run_request_pipeline


@pytest.fixture
def reference_time() -> datetime:
    return datetime(2026, 1, 15, 12, 0, 0)


@pytest.fixture
def raw_incident_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Number": ["INC0001", "INC0002", "INC0003", "INC0004", "INC0005", "INC0006"],
            "Opened": [
                "2026-01-02 08:00:00",
                "2026-01-05 15:00:00",
                "10/01/2026 23:00",
                "2026-01-14 10:00:00",
                "not a date",
                "2025-12-20 09:00:00",
            ],
            "Updated": [
                "2026-01-02 08:30:00",
                "2026-01-05 21:00:00",
                None,
                None,
                None,
                "2025-12-21 09:00:00",
            ],
            "Closed": [
                "2026-01-02 08:30:00",
                "2026-01-05 21:00:00",
                None,
                None,
                None,
                "2025-12-21 09:00:00",
            ],
            "Priority": ["1 - Critical", "2 - High", "3 - Moderate", "High", "", "4 - Low"],
            "State": ["Closed", "Resolved", "In Progress", "New", "On Hold", "Canceled"],
            "Assignment Group": [
                "Brazil-Santo Andre-Local Support",
                "Brazil-Bahia-Local Support",
                "Brazil-Santo Andre-Local Support",
                "Brazil-Telephony",
                None,
                "Brazil-Santo Andre-Local Support",
            ],
            "Assigned To": ["Ana Lima", "Bruno Reis", "Ana Lima", None, "Bruno Reis", "Ana Lima"],
            "Category": ["Network", "Hardware", "Software", "Network", None, "Software"],
            "Subcategory": ["VPN", "Laptop", "ERP", "Wi-Fi", None, "Email"],
            "Caller": ["Joao Silva", "Maria Souza", "Joao Silva", "Carla Dias", "Maria Souza", "Joao Silva"],
            "Short Description": [
                "VPN down for plant office",
                "Laptop does not boot",
                "ERP client crashes on login",
                "Wi-Fi unstable in meeting room",
                "Printer queue stuck",
                "Duplicate mailbox request",
            ],
        }
    )


@pytest.fixture
def raw_request_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Number": ["RITM0001", "RITM0002", "RITM0003", "RITM0004", "RITM0005"],
            "Opened": [
                "2026-01-03 09:00:00",
                "2026-01-04 10:00:00",
                "2026-01-14 08:00:00",
                "2026-01-08 14:30:00",
                "2025-11-20 08:00:00",
            ],
            "Updated": [
                "2026-01-05 09:00:00",
                "2026-01-12 10:00:00",
                None,
                None,
                "2025-11-22 08:00:00",
            ],
            "Closed": ["2026-01-05 09:00:00", None, None, None, "2025-11-22 08:00:00"],
            "Priority": ["2 - High", "Medium", "p1", "unknown", "4 - Low"],
            "State": ["Closed Complete", "Closed Incomplete", "Work in Progress", "Pending Approval", "Fulfilled"],
            "Assignment Group": [
                "Brazil-Bahia-Local Support",
                "Brazil-Bahia-Local Support",
                "Brazil-Ticket Manager",
                "Brazil-Telephony",
                "Brazil-Santo Andre-Local Support",
            ],
            "Assigned To": ["Carlos Melo", "Carlos Melo", "Dora Alves", "Dora Alves", "Carlos Melo"],
            "Request Item": ["Laptop", "Software Install", "", "Laptop", "Monitor"],
            "Category": [None, None, "Access", None, None],
            "Requested for Name": ["Paula Costa", "Rui Gomes", "Paula Costa", "Sofia Nunes", "Rui Gomes"],
            "Short Description": [
                "New laptop for analyst",
                "Install CAD viewer",
                "Grant SAP role",
                "Replacement laptop",
                "Second monitor",
            ],
        }
    )


@pytest.fixture
def enriched_incidents(raw_incident_df, reference_time) -> pd.DataFrame:
    return run_incident_pipeline(raw_incident_df, reference_time=reference_time)


@pytest.fixture
def enriched_requests(raw_request_df, reference_time) -> pd.DataFrame:
    return run_request_pipeline(raw_request_df, reference_time=reference_time)
