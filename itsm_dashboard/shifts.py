"""Work-shift classification and per-shift volume history."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

import pandas as pd

from .constants import DEFAULT_SHIFTS, UNSPECIFIED_LABEL
from .normalization import priority_levels
from .records import is_missing

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _to_minutes(text: str) -> int:
    match = _TIME_RE.match(str(text).strip())
    if match is None:
        raise ValueError(f"Invalid shift time {text!r}; expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


@dataclass(frozen=True)
class Shift:
    name: str
    start_time: str
    end_time: str

    def __post_init__(self) -> None:
        if _to_minutes(self.start_time) == _to_minutes(self.end_time):
            raise ValueError(f"Shift {self.name!r} starts and ends at {self.start_time}")

    def contains(self, minute_of_day: int) -> bool:
        start = _to_minutes(self.start_time)
        end = _to_minutes(self.end_time)
        if start < end:
            return start <= minute_of_day < end
        # Window wraps midnight, e.g. 22:00-06:00.
        return minute_of_day >= start or minute_of_day < end


def parse_shift_config(config: Mapping[str, Mapping[str, Any]]) -> dict[str, Shift]:
    shifts: dict[str, Shift] = {}
    for key, values in config.items():
        try:
            shifts[str(key)] = Shift(
                name=str(values.get("name", key)),
                start_time=str(values["start_time"]),
                end_time=str(values["end_time"]),
            )
        except KeyError as exc:
            raise ValueError(f"Shift {key!r} is missing {exc.args[0]!r}") from exc
    if not shifts:
        raise ValueError("At least one shift must be configured")
    return shifts


def default_shifts() -> dict[str, Shift]:
    return parse_shift_config(DEFAULT_SHIFTS)


def shift_for_timestamp(value: Any, shifts: Mapping[str, Shift] | None = None) -> str:
    if is_missing(value):
        return UNSPECIFIED_LABEL
    shift_map = shifts or default_shifts()
    ts = pd.Timestamp(value)
    minute_of_day = ts.hour * 60 + ts.minute
    for key, shift in shift_map.items():
        if shift.contains(minute_of_day):
            return key
    return UNSPECIFIED_LABEL


def shift_history(
    df: pd.DataFrame,
    kind: str,
    shifts: Mapping[str, Shift] | None = None,
) -> pd.DataFrame:
    """Volume per shift with a per-priority breakdown and the analysts seen."""
    levels = priority_levels(kind)
    shift_map = dict(shifts) if shifts else default_shifts()
    columns = ["shift", "name", "start_time", "end_time", "analysts", "total", *levels]

    rows = []
    for key, shift in shift_map.items():
        subset = df[df["shift"] == key] if "shift" in df else df.iloc[0:0]
        counts = subset["priority_derived"].value_counts() if not subset.empty else pd.Series(dtype=int)
        analysts = sorted(
            {name for name in subset.get("analyst_derived", pd.Series(dtype=str)) if name != UNSPECIFIED_LABEL}
        )
        row = {
            "shift": key,
            "name": shift.name,
            "start_time": shift.start_time,
            "end_time": shift.end_time,
            "analysts": analysts,
            "total": int(len(subset)),
        }
        for level in levels:
            row[level] = int(counts.get(level, 0))
        rows.append(row)

    return pd.DataFrame(rows, columns=columns)
