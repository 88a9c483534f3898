"""Readers for uploaded CSV and Excel exports."""

from __future__ import annotations

import csv
import zipfile
from io import BytesIO
from pathlib import Path

import pandas as pd


def read_csv_bytes(payload: bytes) -> pd.DataFrame:
    attempts: list[str] = []
    encodings = ["utf-8", "utf-8-sig", "utf-16", "latin-1"]
    separators: list[str | None] = [None, ",", ";", "\t", "|"]

    for encoding in encodings:
        for separator in separators:
            try:
                frame = pd.read_csv(
                    BytesIO(payload),
                    sep=separator,
                    engine="python",
                    encoding=encoding,
                    dtype=str,
                    keep_default_na=False,
                )
            except (UnicodeError, csv.Error, pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as exc:
                attempts.append(f"encoding={encoding}, sep={separator!r}: {exc}")
                continue
            if frame.empty and len(frame.columns) == 0:
                continue
            return frame

    sample = "; ".join(attempts[:3])
    raise ValueError(f"Unable to parse CSV payload. Attempts failed: {sample}")


def read_records_bytes(file_name: str, payload: bytes) -> pd.DataFrame:
    if not payload:
        return pd.DataFrame()

    name = (file_name or "").lower()
    if name.endswith((".csv", ".txt")):
        return read_csv_bytes(payload)

    try:
        if name.endswith((".xlsx", ".xlsm", ".xltx", ".xltm")):
            return pd.read_excel(BytesIO(payload), engine="openpyxl")
        if name.endswith(".xls"):
            return pd.read_excel(BytesIO(payload), engine="xlrd")
        if name.endswith(".xlsb"):
            return pd.read_excel(BytesIO(payload), engine="pyxlsb")
        # Generic fallback for unknown extensions.
        return pd.read_excel(BytesIO(payload))
    except (ValueError, ImportError, OSError, zipfile.BadZipFile) as exc:
        raise ValueError(f"Failed to parse '{file_name}': {exc}") from exc


def read_records_file(path: str | Path) -> pd.DataFrame:
    file_path = Path(path)
    return read_records_bytes(file_path.name, file_path.read_bytes())
