from __future__ import annotations

from decimal import Decimal
from typing import Optional

from .models import FeeRecord, RuleSplit, round_amount


def runner_pays_all(record: FeeRecord) -> RuleSplit:
    return RuleSplit(runner_pays=record.fee_amount, club_pays=Decimal("0"))


def club_pays_all(record: FeeRecord) -> RuleSplit:
    return RuleSplit(runner_pays=Decimal("0"), club_pays=record.fee_amount)


def capped_share(record: FeeRecord, *, percentage: Decimal, cap_amount: Optional[Decimal]) -> RuleSplit:
    """Runner pays `percentage` of the fee, never more than `cap_amount`; the club pays the rest."""
    runner = record.fee_amount * percentage
    if cap_amount is not None and runner > cap_amount:
        runner = cap_amount
    runner = round_amount(runner)
    return RuleSplit(runner_pays=runner, club_pays=record.fee_amount - runner)


def clamp_split(fee_amount: Decimal, runner_pays: Decimal) -> RuleSplit:
    runner = round_amount(min(max(runner_pays, Decimal("0")), fee_amount))
    return RuleSplit(runner_pays=runner, club_pays=round_amount(fee_amount - runner))


def format_percentage(value: Decimal) -> str:
    return f"{(value * 100).quantize(Decimal('1'))}%"
