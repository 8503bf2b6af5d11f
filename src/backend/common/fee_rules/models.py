from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

CENT = Decimal("0.01")

DEFAULT_RULE_NAME = "Default: runner pays full amount"


def round_amount(value: Decimal) -> Decimal:
    # Half away from zero for the non-negative amounts the engine produces.
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class FeeType(str, Enum):
    STANDARD = "StandardFee"
    LATE = "LateFee"
    DNS = "DNS"
    CHIP_RENTAL = "ChipRental"


class FeeRecord(BaseModel):
    """One billable line for one participant at one competition."""

    person_id: Optional[str] = None
    member_name: str = ""
    competition_name: str = ""
    # `YYYY-MM-DD` or `YYYY-MM-DD - YYYY-MM-DD`
    competition_date: str = ""
    class_name: str = ""
    birth_year: Optional[int] = None
    started: bool = False
    fee_type: FeeType
    fee_amount: Decimal = Field(ge=0)
    description: str = ""

    is_championship: bool = False
    age: Optional[int] = None

    @field_validator("fee_amount")
    @classmethod
    def _two_decimals(cls, value: Decimal) -> Decimal:
        return round_amount(value)

    @property
    def competition_start_day(self) -> Optional[date]:
        """First day of the competition, or None unless it is a valid `YYYY-MM-DD`."""
        start = self.competition_date.split(" - ")[0].strip()
        if len(start) != 10:
            return None
        try:
            return date.fromisoformat(start)
        except ValueError:
            return None


class RuleErrorNote(BaseModel):
    rule_id: str
    stage: str
    message: str


class BilledRecord(FeeRecord):
    runner_pays_amount: Decimal
    club_pays_amount: Decimal
    applied_rule_id: Optional[str] = None
    applied_rule_name: str = DEFAULT_RULE_NAME
    rule_errors: List[RuleErrorNote] = Field(default_factory=list)


class RuleSplit(BaseModel):
    runner_pays: Decimal
    club_pays: Decimal


class AppliedRuleTotals(BaseModel):
    rule_name: str
    records: int = 0
    fee_amount: Decimal = Decimal("0")
    runner_pays_amount: Decimal = Decimal("0")
    club_pays_amount: Decimal = Decimal("0")


class ActiveRuleSummary(BaseModel):
    rule_id: str
    rule_name: str
    priority: int
    parameters: Dict[str, Any] = Field(default_factory=dict)


class BillingRunReport(BaseModel):
    run_id: str
    generated_at: datetime

    records: List[BilledRecord] = Field(default_factory=list)
    rules: List[ActiveRuleSummary] = Field(default_factory=list)
    totals: Dict[str, AppliedRuleTotals] = Field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(len(r.rule_errors) for r in self.records)
