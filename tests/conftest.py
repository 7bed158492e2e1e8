from __future__ import annotations

import csv
import sys
from pathlib import Path

import pytest


# Ensure the src/ layout is importable without an editable install.
_SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))


@pytest.fixture
def write_csv():
    """Return a helper that writes a header + rows CSV and returns its path."""

    def _write(path: Path, *, header: list[str], rows: list[list[str]]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(header)
            w.writerows(rows)
        return path

    return _write
