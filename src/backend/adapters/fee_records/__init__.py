"""Adapters turning competition fee exports into normalized fee records."""

from .csv_export import FeeExportError, load_fee_export
from .normalizer import (
    NormalizationResult,
    SkippedRow,
    derive_age,
    is_championship_competition,
    normalize_rows,
)

__all__ = [
    "FeeExportError",
    "NormalizationResult",
    "SkippedRow",
    "derive_age",
    "is_championship_competition",
    "load_fee_export",
    "normalize_rows",
]
