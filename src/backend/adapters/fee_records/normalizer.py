from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from common.fee_rules.models import FeeRecord, FeeType

logger = logging.getLogger(__name__)

# Header variants seen in Eventor exports (Swedish and English), matched case-insensitively.
COLUMN_MAPPINGS: dict[str, tuple[str, ...]] = {
    "person_id": ("Person-id", "PersonId", "Personnummer", "Medlemsnr"),
    "first_name": ("Förnamn", "First Name"),
    "last_name": ("Efternamn", "Last Name", "Surname"),
    "competition": ("Tävling", "Competition", "Tävlingsnamn"),
    "date": ("Datum", "Date", "Tävlingsdatum"),
    "birth_year": ("Födelseår", "Birth Year", "Född"),
    "class": ("Klass", "Class", "Tävlingsklass"),
    "started": ("Startat", "Started", "Har startat"),
    "time": ("Tid", "Time", "Resultat"),
    "ordinary_fee": ("Ordinarie avgift", "Avgift", "Ord.Avgift", "Anmälningsavgift"),
    "late_fee": ("Efteranmälningsavgift", "Efteranm.avgift", "Late Fee"),
    "service_fee": ("Tjänsteavgifter", "Serviceavgifter", "Serviceavgift", "Brickhyra", "Hyrbricka"),
}

CHAMPIONSHIP_MARKERS: tuple[str, ...] = ("SM",)

_DID_NOT_START = {"ej start", "dns"}
_STARTED_TRUE = {"1", "true", "yes", "ja"}
_NAME_SEPARATORS = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class SkippedRow:
    row_number: int
    reason: str
    # Set when only one fee cell was unreadable and the row's other fee lines were kept.
    column: str | None = None


@dataclass
class NormalizationResult:
    records: list[FeeRecord] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)


def is_championship_competition(name: str | None, markers: Sequence[str] = CHAMPIONSHIP_MARKERS) -> bool:
    """True if any token of `name` (split on non-alphanumerics) equals a marker, case-sensitively.

    "Sprint-SM" and "SM-veckan" qualify; "Smålandskavlen" does not.
    """
    if not name:
        return False
    tokens = set(_NAME_SEPARATORS.split(name))
    return any(marker in tokens for marker in markers)


def derive_age(competition_date: str | None, birth_year: int | None) -> int | None:
    if not competition_date or birth_year is None:
        return None
    start = competition_date.split(" - ")[0].strip()
    year = start[:4]
    if len(year) != 4 or not year.isdigit():
        return None
    return int(year) - birth_year


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    championship_markers: Sequence[str] = CHAMPIONSHIP_MARKERS,
) -> NormalizationResult:
    """
    Turn raw export rows into fee records.

    Each row yields up to three fee lines: the ordinary fee (`StandardFee`, or `DNS`
    when the time column says the runner did not start), the late entry fee and the
    service/chip rental fee. Blank or zero amounts produce no line. An unreadable,
    negative or non-finite fee cell drops only its own line and is reported in
    `skipped` with its column; the row's other lines are kept.
    """
    result = NormalizationResult()
    for row_number, row in enumerate(rows, start=1):
        try:
            records, unreadable = _normalize_row(row, championship_markers)
        except (ValidationError, ValueError) as exc:
            logger.warning("Skipping fee row %d: %s", row_number, exc)
            result.skipped.append(SkippedRow(row_number=row_number, reason=str(exc)))
            continue
        result.records.extend(records)
        for column, reason in unreadable:
            logger.warning("Fee row %d: ignoring %s: %s", row_number, column, reason)
            result.skipped.append(SkippedRow(row_number=row_number, reason=reason, column=column))
    logger.info("Normalized %d fee records (%d rows or cells skipped)", len(result.records), len(result.skipped))
    return result


_FEE_LINES: tuple[tuple[str, FeeType, str], ...] = (
    ("ordinary_fee", FeeType.STANDARD, "Startavgift"),
    ("late_fee", FeeType.LATE, "Efteranmälningsavgift"),
    ("service_fee", FeeType.CHIP_RENTAL, "Hyrbricka/Tjänsteavgift"),
)


def _normalize_row(
    row: Mapping[str, Any], markers: Sequence[str]
) -> tuple[list[FeeRecord], list[tuple[str, str]]]:
    competition_name = _text(_get(row, "competition"))
    competition_date = _text(_get(row, "date"))
    birth_year = _parse_int(_get(row, "birth_year"))
    time_raw = _text(_get(row, "time"))
    member_name = f"{_text(_get(row, 'first_name'))} {_text(_get(row, 'last_name'))}".strip()
    did_not_start = time_raw.lower() in _DID_NOT_START

    base = {
        "person_id": _text(_get(row, "person_id")) or None,
        "member_name": member_name,
        "competition_name": competition_name,
        "competition_date": competition_date,
        "class_name": _text(_get(row, "class")),
        "birth_year": birth_year,
        "started": _has_started(_get(row, "started"), time_raw),
        "is_championship": is_championship_competition(competition_name, markers),
        "age": derive_age(competition_date, birth_year),
    }

    records: list[FeeRecord] = []
    unreadable: list[tuple[str, str]] = []
    for column, fee_type, description in _FEE_LINES:
        # An unreadable cell drops only its own fee line.
        try:
            amount = _parse_fee(_get(row, column))
        except ValueError as exc:
            unreadable.append((column, str(exc)))
            continue
        if amount <= 0:
            continue
        if fee_type == FeeType.STANDARD and did_not_start:
            fee_type, description = FeeType.DNS, "Ej start"
        records.append(FeeRecord(**base, fee_type=fee_type, fee_amount=amount, description=description))
    return records, unreadable


def _get(row: Mapping[str, Any], column: str) -> Any:
    lowered = {str(key).strip().lower(): value for key, value in row.items()}
    for candidate in COLUMN_MAPPINGS[column]:
        value = lowered.get(candidate.lower())
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_int(value: Any) -> int | None:
    text = _text(value)
    if not text:
        return None
    try:
        return int(Decimal(text))
    except (InvalidOperation, ValueError, OverflowError):
        return None


def _parse_fee(value: Any) -> Decimal:
    text = "".join(_text(value).split()).replace(",", ".")
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Unreadable fee amount {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Unreadable fee amount {value!r}")
    if amount < 0:
        raise ValueError(f"Negative fee amount {value!r}")
    return amount


def _has_started(started_raw: Any, time_raw: str) -> bool:
    if started_raw is not None and _text(started_raw).lower() in _STARTED_TRUE:
        return True
    return bool(time_raw) and time_raw.lower() not in _DID_NOT_START
