# src/carrier_tracking/io/workbook.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.models import TrackingInfo

TRACKING_NUMBER_COLUMN = "Tracking Number"

OUTPUT_COLUMNS = [
    TRACKING_NUMBER_COLUMN,
    "Carrier",
    "Status",
    "Location",
    "LatestEventTimestampUtc",
    "Description",
    "EventsCount",
    "Source",
]


def read_input(path: Path) -> pd.DataFrame:
    """Read an .xlsx (openpyxl) or .csv input with every cell as text."""
    p = Path(path)
    if p.suffix.lower() == ".csv":
        return pd.read_csv(p, dtype=str)
    return pd.read_excel(p, engine="openpyxl", dtype=str)


def read_tracking_numbers(path: Path) -> List[str]:
    """
    Unique, normalized tracking numbers from the `Tracking Number` column,
    in first-seen order. Blank cells are skipped.
    """
    df = read_input(path)
    if TRACKING_NUMBER_COLUMN not in df.columns:
        raise ValueError(f"Input has no '{TRACKING_NUMBER_COLUMN}' column: {path}")

    seen: set[str] = set()
    out: List[str] = []
    for raw in df[TRACKING_NUMBER_COLUMN].dropna().astype(str):
        tn = normalize_tracking_number(raw)
        if tn and tn not in seen:
            seen.add(tn)
            out.append(tn)
    return out


def result_row(info: TrackingInfo) -> dict:
    return {
        TRACKING_NUMBER_COLUMN: info.tracking_number,
        "Carrier": info.carrier,
        "Status": info.status.value,
        "Location": info.location or "",
        "LatestEventTimestampUtc": info.timestamp.isoformat(),
        "Description": info.description or "",
        "EventsCount": len(info.events),
        "Source": info.source,
    }


def unsupported_row(tracking_number: str, message: Optional[str] = None) -> dict:
    return {
        TRACKING_NUMBER_COLUMN: tracking_number,
        "Carrier": "",
        "Status": "Unsupported",
        "Location": "",
        "LatestEventTimestampUtc": "",
        "Description": message or "Tracking number format not recognized",
        "EventsCount": 0,
        "Source": "",
    }


def build_results_frame(rows: Iterable[dict]) -> pd.DataFrame:
    df = pd.DataFrame(list(rows))
    for col in OUTPUT_COLUMNS:
        if col not in df.columns:
            df[col] = pd.Series(dtype="object")
    return df[OUTPUT_COLUMNS]


def write_results(rows: Iterable[dict], output_path: Path) -> Path:
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    build_results_frame(rows).to_excel(out, index=False, engine="openpyxl")
    return out
