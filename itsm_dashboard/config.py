"""Runtime configuration and logging setup."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .constants import INCIDENT
from .shifts import Shift, default_shifts, parse_shift_config

ENV_PREFIX = "ITSM_DASHBOARD_"

logger = logging.getLogger(__name__)


def _parse_json(text: str | None, default: dict[str, Any]) -> dict[str, Any]:
    if not text:
        return default
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed JSON setting: %r", text)
        return default
    if isinstance(parsed, dict):
        return parsed
    logger.warning("Ignoring non-object JSON setting: %r", text)
    return default


def _parse_int(text: str | None, default: int) -> int:
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        logger.warning("Ignoring non-integer setting: %r", text)
        return default


@dataclass
class DashboardConfig:
    incident_sla_hours: dict[str, float] = field(default_factory=dict)
    request_sla_hours: dict[str, float] = field(default_factory=dict)
    location_aliases: dict[str, str] = field(default_factory=dict)
    shifts: dict[str, Shift] = field(default_factory=default_shifts)
    top_n: int = 5
    log_level: str = "INFO"

    def sla_overrides(self, kind: str) -> dict[str, float]:
        return self.incident_sla_hours if kind == INCIDENT else self.request_sla_hours

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DashboardConfig":
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            return env.get(f"{ENV_PREFIX}{name}")

        shift_config = _parse_json(_get("SHIFTS"), {})
        try:
            shifts = parse_shift_config(shift_config) if shift_config else default_shifts()
        except ValueError as exc:
            logger.warning("Ignoring invalid shift configuration: %s", exc)
            shifts = default_shifts()

        return cls(
            incident_sla_hours=_parse_json(_get("INCIDENT_SLA_HOURS"), {}),
            request_sla_hours=_parse_json(_get("REQUEST_SLA_HOURS"), {}),
            location_aliases=_parse_json(_get("LOCATION_ALIASES"), {}),
            shifts=shifts,
            top_n=max(1, _parse_int(_get("TOP_N"), 5)),
            log_level=(_get("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
