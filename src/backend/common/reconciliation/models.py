from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ParsedInvoice(BaseModel):
    """Fields extracted from one invoice document; any of them may be missing."""

    source_file: str
    # Set when the invoice was read from inside an archive.
    entry_name: Optional[str] = None
    competition_name: Optional[str] = None
    date: Optional[str] = None
    total_amount: Optional[str] = None
    invoice_number: Optional[str] = None

    @property
    def origin(self) -> str:
        return self.entry_name or self.source_file


class CompetitionAggregate(BaseModel):
    competition_name: str
    # Raw display string as it appears on the fee records.
    competition_date: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    total_fee_amount: Decimal = Decimal("0")
    total_runner_amount: Decimal = Decimal("0")
    total_club_amount: Decimal = Decimal("0")
    record_count: int = 0

    @property
    def key(self) -> tuple[str, str]:
        return (self.competition_name, self.competition_date)

    @property
    def has_date_range(self) -> bool:
        return self.start is not None and self.end is not None


class UnmatchedReason(str, Enum):
    MISSING_FIELDS = "MISSING_FIELDS"
    UNPARSEABLE_DATE = "UNPARSEABLE_DATE"
    NO_COMPETITION_ON_DATE = "NO_COMPETITION_ON_DATE"
    BELOW_THRESHOLD = "BELOW_THRESHOLD"
    COMPETITION_ALREADY_MATCHED = "COMPETITION_ALREADY_MATCHED"


class ReconciliationRow(BaseModel):
    competition_name: str
    competition_date: str
    competition_total: Decimal

    source_file: str
    entry_name: Optional[str] = None
    invoice_competition_name: Optional[str] = None
    invoice_date: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_amount: Decimal
    # True when the invoice total could not be read and 0 was used instead.
    amount_unparseable: bool = False

    similarity: float
    difference: Decimal


class UnmatchedInvoice(BaseModel):
    invoice: ParsedInvoice
    reason: UnmatchedReason
    best_similarity: Optional[float] = None


class ReconciliationReport(BaseModel):
    rows: List[ReconciliationRow] = Field(default_factory=list)
    unmatched_invoices: List[UnmatchedInvoice] = Field(default_factory=list)
    unmatched_competitions: List[CompetitionAggregate] = Field(default_factory=list)
    # Competitions whose date could not be parsed and so never took part in matching.
    undated_competitions: List[CompetitionAggregate] = Field(default_factory=list)
