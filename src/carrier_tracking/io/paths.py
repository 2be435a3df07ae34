from __future__ import annotations

from pathlib import Path
from typing import Tuple

TRACKED_SUFFIX = "_tracked.xlsx"


def derive_output_paths(input_file: Path) -> Tuple[Path, Path]:
    """
    Given an input workbook/CSV path, return (tracked_xlsx_path, log_path) in the same directory.

    Raises FileNotFoundError if input_file doesn't exist (explicit early signal for CLI).
    """
    p = Path(input_file)
    if not p.exists():
        raise FileNotFoundError(p)

    tracked = p.with_name(f"{p.stem}{TRACKED_SUFFIX}")
    log = p.with_suffix(".log")
    return tracked, log
