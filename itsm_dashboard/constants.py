"""Constants and keyword maps for ITSM dashboard analytics."""

from __future__ import annotations

from typing import Dict, List, Tuple

INCIDENT = "incident"
REQUEST = "request"
RECORD_KINDS = (INCIDENT, REQUEST)

UNSPECIFIED_LABEL = "Unspecified"
UNCATEGORIZED_LABEL = "Uncategorized"

COLUMN_ALIASES: Dict[str, List[str]] = {
    "number": ["number", "ticket_number", "incident_number", "request_number", "ticket_id", "incident_id", "id"],
    "opened": ["opened", "opened_at", "opened_on", "created", "created_at", "created_on", "open_time"],
    "updated": ["updated", "updated_at", "updated_on", "last_updated", "modified_at"],
    "closed": ["closed", "closed_at", "closed_on", "resolved", "resolved_at", "resolved_on"],
    "priority": ["priority", "prioridade", "severity", "impact_priority"],
    "state": ["state", "status", "ticket_status", "incident_state", "request_state", "estado"],
    "assignment_group": ["assignment_group", "assignmentgroup", "support_group", "resolver_group", "group"],
    "assigned_to": ["assigned_to", "assignedto", "assignee", "analyst", "owner"],
    "category": ["category", "categoria", "incident_category"],
    "subcategory": ["subcategory", "sub_category", "subcategoria"],
    "request_item": ["request_item", "requestitem", "item", "catalog_item"],
    "caller": ["caller", "caller_id", "opened_by", "reported_by"],
    "requested_for": ["requested_for_name", "requestedforname", "requested_for", "requester"],
    "short_description": ["short_description", "shortdescription", "summary", "title"],
    "description": ["description", "details"],
    "location": ["location", "site", "caller_location"],
}

RECORD_COLUMNS = list(COLUMN_ALIASES.keys())

INCIDENT_PRIORITIES = ("P1", "P2", "P3", "P4", "Undefined")
REQUEST_PRIORITIES = ("HIGH", "MEDIUM", "LOW", "UNDEFINED")

INCIDENT_STATUSES = ("Open", "In Progress", "On Hold", "Closed", "Cancelled")
REQUEST_STATUSES = ("NEW", "IN_PROGRESS", "ON_HOLD", "COMPLETED", "CANCELLED")

# Leading codes such as "1", "P1", "Priority 1", "Sev 2 - High".
INCIDENT_PRIORITY_CODES = {"1": "P1", "2": "P2", "3": "P3", "4": "P4", "5": "P4"}
REQUEST_PRIORITY_CODES = {"1": "HIGH", "2": "HIGH", "3": "MEDIUM", "4": "LOW", "5": "LOW"}

# Keyword tables are ordered: first matching bucket wins.
INCIDENT_PRIORITY_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("P1", ["critical", "crítico", "critico", "crítica", "critica", "urgent", "urgente", "immediate", "imediato"]),
    ("P2", ["high", "alto", "alta"]),
    ("P3", ["medium", "moderate", "médio", "medio", "média", "media", "moderado"]),
    ("P4", ["low", "baixo", "baixa", "minor", "planning"]),
]

REQUEST_PRIORITY_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("HIGH", ["critical", "crítico", "critico", "urgent", "urgente", "immediate", "imediato", "high", "alta", "alto"]),
    ("MEDIUM", ["medium", "moderate", "média", "media", "médio", "medio", "moderado", "normal"]),
    ("LOW", ["low", "baixa", "baixo", "minor", "planning"]),
]

INCIDENT_STATUS_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("Cancelled", ["cancelled", "canceled", "cancelado", "cancelada"]),
    ("Closed", ["closed", "resolved", "fechado", "resolvido", "encerrado", "complete", "concluído", "concluido"]),
    ("On Hold", ["on hold", "hold", "pending", "aguardando", "espera", "awaiting"]),
    ("In Progress", ["progress", "andamento", "assigned", "atribuído", "atribuido", "active"]),
    ("Open", ["new", "open", "aberto", "novo"]),
]

# "closed incomplete" contains "complete", so cancellation is tested first.
REQUEST_STATUS_KEYWORDS: List[Tuple[str, List[str]]] = [
    ("CANCELLED", ["cancelled", "canceled", "cancelado", "cancelada", "closed incomplete", "closed skipped"]),
    ("COMPLETED", ["complete", "concluído", "concluido", "done", "fulfilled", "closed", "resolved", "fechado"]),
    ("ON_HOLD", ["on hold", "hold", "pending", "aguardando", "espera", "awaiting"]),
    ("IN_PROGRESS", ["progress", "andamento", "assigned", "atribuído", "atribuido", "active"]),
    ("NEW", ["new", "open", "aberto", "novo", "draft"]),
]

INCIDENT_STATUS_FALLBACK = "Open"
REQUEST_STATUS_FALLBACK = "NEW"

INCIDENT_TERMINAL_STATUSES = {"Closed", "Cancelled"}
REQUEST_TERMINAL_STATUSES = {"COMPLETED", "CANCELLED"}

HIGH_PRIORITIES = {"P1", "P2", "HIGH"}

LOCATION_ALIASES: Dict[str, str] = {
    "Brazil-Santo Andre-Manufacturing-Local Support": "SA-MNF-local Sup",
    "Brazil-Santo Andre-Network/Telecom": "SA-Net/Tel",
    "Brazil-Bahia-Manufacturing-Local Support": "BA-MNF-local Sup",
    "Brazil-Santo Andre-Local Support": "SA-Local Sup",
    "Brazil-Bahia-Local Support": "BA-Local Sup",
    "Brazil-Bahia-Network/Telecom": "BA-Net/Tel",
    "Brazil-Bandag-Local Support": "Berrini-Local Sup",
    "Brazil-Bandag-Manufacturing-Local Support": "Campinas-MNF-local Sup",
    "Brazil-Bandag-Network/Telecom": "Berrini-Net/Tel",
    "Brazil-Local Support": "BR-Local Sup",
    "Brazil-Mafra-Local Support": "SC-Local Sup",
    "Brazil-Telephony": "BR-Net/Tel",
    "Brazil-Ticket Manager": "BR-TM",
}

INCIDENT_SLA_THRESHOLD_HOURS = {
    "P1": 1,
    "P2": 4,
    "P3": 36,
    "P4": 72,
    "Undefined": 36,
}

REQUEST_SLA_THRESHOLD_HOURS = {
    "HIGH": 72,
    "MEDIUM": 120,
    "LOW": 168,
    "UNDEFINED": 120,
}

WITHIN_SLA_LABEL = "Within SLA"
OUTSIDE_SLA_LABEL = "Outside SLA"

DEFAULT_SHIFTS = {
    "MORNING": {"name": "Morning", "start_time": "06:00", "end_time": "14:00"},
    "AFTERNOON": {"name": "Afternoon", "start_time": "14:00", "end_time": "22:00"},
    "NIGHT": {"name": "Night", "start_time": "22:00", "end_time": "06:00"},
}

SEARCH_COLUMNS = [
    "number",
    "short_description",
    "requester_derived",
    "category_derived",
    "assignment_group",
    "analyst_derived",
]

FILTER_CANDIDATES = [
    "category_derived",
    "status_derived",
    "priority_derived",
    "location_derived",
    "analyst_derived",
]

TREND_FREQUENCIES = {
    "W": "W-SUN",
    "M": "M",
    "Q": "Q",
    "Y": "Y",
}
