"""Map free-text priority, state and group values onto fixed vocabularies.

Every normalizer here is total: ``None``, NaN, numbers and arbitrary strings
are accepted and unmatched input lands in a designated default bucket.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from .constants import (
    HIGH_PRIORITIES,
    INCIDENT,
    INCIDENT_PRIORITIES,
    INCIDENT_PRIORITY_CODES,
    INCIDENT_PRIORITY_KEYWORDS,
    INCIDENT_STATUS_FALLBACK,
    INCIDENT_STATUS_KEYWORDS,
    INCIDENT_STATUSES,
    INCIDENT_TERMINAL_STATUSES,
    LOCATION_ALIASES,
    REQUEST_PRIORITIES,
    REQUEST_PRIORITY_CODES,
    REQUEST_PRIORITY_KEYWORDS,
    REQUEST_STATUS_FALLBACK,
    REQUEST_STATUS_KEYWORDS,
    REQUEST_STATUSES,
    REQUEST_TERMINAL_STATUSES,
    UNSPECIFIED_LABEL,
)
from .records import is_missing, validate_kind

_PRIORITY_CODE_RE = re.compile(r"^(?:p|priority|prioridade|sev|severity)?\s*([1-5])(?![0-9])")


def _clean(value: Any) -> str:
    if is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return re.sub(r"\s+", " ", str(value)).strip().lower()


def _match_keywords(text: str, table: list[tuple[str, list[str]]]) -> str | None:
    # Keywords anchor at a word start so "active" never hits "inactive".
    for label, keywords in table:
        for keyword in keywords:
            if re.search(r"(?<![^\W_])" + re.escape(keyword), text):
                return label
    return None


def _normalize_priority(
    value: Any,
    codes: dict[str, str],
    keywords: list[tuple[str, list[str]]],
    default: str,
) -> str:
    text = _clean(value)
    if not text:
        return default
    code = _PRIORITY_CODE_RE.match(text)
    if code is not None:
        return codes[code.group(1)]
    return _match_keywords(text, keywords) or default


def normalize_incident_priority(value: Any) -> str:
    return _normalize_priority(value, INCIDENT_PRIORITY_CODES, INCIDENT_PRIORITY_KEYWORDS, INCIDENT_PRIORITIES[-1])


def normalize_request_priority(value: Any) -> str:
    return _normalize_priority(value, REQUEST_PRIORITY_CODES, REQUEST_PRIORITY_KEYWORDS, REQUEST_PRIORITIES[-1])


def normalize_incident_status(value: Any) -> str:
    text = _clean(value)
    if not text:
        return INCIDENT_STATUS_FALLBACK
    return _match_keywords(text, INCIDENT_STATUS_KEYWORDS) or INCIDENT_STATUS_FALLBACK


def normalize_request_status(value: Any) -> str:
    text = _clean(value)
    if not text:
        return REQUEST_STATUS_FALLBACK
    return _match_keywords(text, REQUEST_STATUS_KEYWORDS) or REQUEST_STATUS_FALLBACK


def normalize_priority(kind: str, value: Any) -> str:
    if validate_kind(kind) == INCIDENT:
        return normalize_incident_priority(value)
    return normalize_request_priority(value)


def normalize_status(kind: str, value: Any) -> str:
    if validate_kind(kind) == INCIDENT:
        return normalize_incident_status(value)
    return normalize_request_status(value)


def priority_levels(kind: str) -> tuple[str, ...]:
    return INCIDENT_PRIORITIES if validate_kind(kind) == INCIDENT else REQUEST_PRIORITIES


def status_levels(kind: str) -> tuple[str, ...]:
    return INCIDENT_STATUSES if validate_kind(kind) == INCIDENT else REQUEST_STATUSES


def undefined_priority(kind: str) -> str:
    return priority_levels(kind)[-1]


def completed_status(kind: str) -> str:
    return "Closed" if validate_kind(kind) == INCIDENT else "COMPLETED"


def cancelled_status(kind: str) -> str:
    return "Cancelled" if validate_kind(kind) == INCIDENT else "CANCELLED"


def on_hold_status(kind: str) -> str:
    return "On Hold" if validate_kind(kind) == INCIDENT else "ON_HOLD"


def is_high_priority(normalized_priority: str) -> bool:
    return normalized_priority in HIGH_PRIORITIES


def is_cancelled(value: Any) -> bool:
    text = _clean(value)
    return any(token in text for token in ("cancelled", "canceled", "cancelado", "cancelada"))


def is_terminal(kind: str, normalized_status: str) -> bool:
    terminal = INCIDENT_TERMINAL_STATUSES if validate_kind(kind) == INCIDENT else REQUEST_TERMINAL_STATUSES
    return normalized_status in terminal


def is_active(kind: str, normalized_status: str) -> bool:
    return not is_terminal(kind, normalized_status)


def _alias_key(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip().lower()


def normalize_location(value: Any, aliases: Mapping[str, str] | None = None) -> str:
    if is_missing(value):
        return UNSPECIFIED_LABEL
    raw = re.sub(r"\s+", " ", str(value)).strip()
    table = dict(LOCATION_ALIASES)
    if aliases:
        table.update(aliases)
    lookup = {_alias_key(source): target for source, target in table.items()}
    return lookup.get(_alias_key(raw), raw)


def original_location_name(label: str, aliases: Mapping[str, str] | None = None) -> str:
    table = dict(LOCATION_ALIASES)
    if aliases:
        table.update(aliases)
    # First alias wins when several raw names collapse onto one label.
    reverse: dict[str, str] = {}
    for source, target in table.items():
        reverse.setdefault(target, source)
    return reverse.get(label, label)
