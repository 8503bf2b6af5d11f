from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel

_NEXT_LABEL = r"(?:Tävlingsdatum|Bankgiro|Summa|Förfallodatum|Fakturanummer)"

# "Tävling" must be followed by a separator so "Tävlingsdatum" is not taken for it.
COMPETITION_RE = re.compile(rf"Tävling[\s·:]+(.+?)(?=\s*·?\s*{_NEXT_LABEL}|\n|$)", re.IGNORECASE)
DATE_RE = re.compile(r"Tävlingsdatum[\s·:]+([0-9]{4}-\s?[0-9]{2}-\s?[0-9]{2})", re.IGNORECASE)
AMOUNT_RE = re.compile(r"Summa(?:\s*att\s*betala)?[\s·:]*([0-9][0-9\s]*(?:[.,][0-9]{1,2})?)\s*SEK", re.IGNORECASE)
INVOICE_NUMBER_RE = re.compile(r"Fakturanummer[\s·:]*([0-9A-Za-z]+)", re.IGNORECASE)


class InvoiceFields(BaseModel):
    competition_name: Optional[str] = None
    date: Optional[str] = None
    total_amount: Optional[str] = None
    invoice_number: Optional[str] = None


def extract_invoice_fields(text: str) -> InvoiceFields:
    """
    Pull the competition, competition date, amount due and invoice number out of
    the text of an organizer's invoice.

    Whitespace inside the date ("2024- 07- 02") and the amount ("4 320") is removed.
    Fields that cannot be found are left as None.
    """
    fields = InvoiceFields()
    if not text:
        return fields

    match = COMPETITION_RE.search(text)
    if match and match.group(1).strip():
        fields.competition_name = match.group(1).strip()

    match = DATE_RE.search(text)
    if match:
        fields.date = _strip_spaces(match.group(1))

    match = AMOUNT_RE.search(text)
    if match and _strip_spaces(match.group(1)):
        fields.total_amount = _strip_spaces(match.group(1))

    match = INVOICE_NUMBER_RE.search(text)
    if match:
        fields.invoice_number = match.group(1).strip()

    return fields


def _strip_spaces(value: str) -> str:
    return "".join(value.split())
