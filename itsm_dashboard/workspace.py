"""Session context, upload history and filter-option helpers."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

import pandas as pd

from .constants import FILTER_CANDIDATES, UNSPECIFIED_LABEL
from .records import validate_kind


@dataclass(frozen=True)
class UploadHistoryEntry:
    file_name: str
    kind: str
    rows: int
    uploaded_at: str


def build_upload_history_entry(file_name: str, kind: str, row_count: int) -> UploadHistoryEntry:
    return UploadHistoryEntry(
        file_name=file_name,
        kind=validate_kind(kind),
        rows=row_count,
        uploaded_at=datetime.now().isoformat(),
    )


@dataclass(frozen=True)
class SessionContext:
    """State of one dashboard session, passed explicitly to whatever needs it.

    Authentication is a plain flag; there is no credential check. Records are
    held per kind for the life of the session and dropped on logout.
    """

    user: str | None = None
    authenticated: bool = False
    records: dict[str, pd.DataFrame] = field(default_factory=dict)
    upload_history: tuple[UploadHistoryEntry, ...] = ()

    def login(self, user: str) -> "SessionContext":
        name = str(user).strip()
        if not name:
            raise ValueError("A user name is required to open a session")
        return replace(self, user=name, authenticated=True)

    def logout(self) -> "SessionContext":
        return SessionContext()

    def with_records(self, kind: str, df: pd.DataFrame, file_name: str) -> "SessionContext":
        kind = validate_kind(kind)
        records = dict(self.records)
        records[kind] = df
        entry = build_upload_history_entry(file_name, kind, len(df))
        return replace(self, records=records, upload_history=self.upload_history + (entry,))

    def records_for(self, kind: str) -> pd.DataFrame | None:
        return self.records.get(validate_kind(kind))


def suggest_filter_values(df: pd.DataFrame, limit: int = 200) -> dict[str, list[str]]:
    if df.empty:
        return {}

    values: dict[str, list[str]] = {}
    for col in FILTER_CANDIDATES:
        if col not in df.columns:
            continue
        options = sorted({str(value) for value in df[col].dropna() if str(value) != UNSPECIFIED_LABEL})
        if options:
            values[col] = options[:limit]
    return values


def session_summary(context: SessionContext) -> dict[str, Any]:
    return {
        "user": context.user,
        "authenticated": context.authenticated,
        "loaded": {kind: int(len(df)) for kind, df in context.records.items()},
        "uploads": [entry.__dict__ for entry in context.upload_history],
    }
