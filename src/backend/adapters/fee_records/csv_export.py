from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

from .normalizer import NormalizationResult, normalize_rows


class FeeExportError(ValueError):
    pass


def load_fee_export(csv_path: str | Path, *, delimiter: str | None = None) -> NormalizationResult:
    """
    Read a competition fee export (CSV with a header row) and normalize it into fee records.

    The delimiter is sniffed from the header line (`,` or `;`) unless given.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FeeExportError(f"Fee export CSV not found: {path}")
    return normalize_rows(_load_rows(path, delimiter))


def _load_rows(path: Path, delimiter: str | None) -> list[dict[str, Any]]:
    # utf-8-sig strips the BOM that spreadsheet exports prepend.
    with path.open(newline="", encoding="utf-8-sig") as handle:
        sample = handle.readline()
        if not sample.strip():
            raise FeeExportError(f"Fee export CSV has no header row: {path}")
        handle.seek(0)
        reader = csv.DictReader(handle, delimiter=delimiter or _sniff_delimiter(sample))
        return [row for row in reader if any((value or "").strip() for value in row.values() if isinstance(value, str))]


def _sniff_delimiter(header_line: str) -> str:
    return ";" if header_line.count(";") > header_line.count(",") else ","
