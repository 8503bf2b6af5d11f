from decimal import Decimal

import pytest
from pydantic import ValidationError

from common.fee_rules.config import FeeShareRuleConfig
from common.fee_rules.models import FeeType
from common.fee_rules.rules.fee_default_share import FEE_DEFAULT_SHARE


def test_runner_pays_sixty_percent(bill_one, make_fee_record):
    billed = bill_one(make_fee_record(age=35, fee_amount="100"))
    assert billed.applied_rule_id == "FEE-DEFAULT-SHARE"
    assert billed.applied_rule_name == "Default percentage share (60%, max 120)"
    assert billed.runner_pays_amount == Decimal("60.00")
    assert billed.club_pays_amount == Decimal("40.00")


def test_runner_share_is_capped(bill_one, make_fee_record):
    billed = bill_one(make_fee_record(age=35, fee_amount="1000"))
    assert billed.runner_pays_amount == Decimal("120.00")
    assert billed.club_pays_amount == Decimal("880.00")


def test_share_rounds_half_up_to_cents(make_fee_record):
    rule = FEE_DEFAULT_SHARE()
    split = rule.action(make_fee_record(fee_amount="0.25"), FeeShareRuleConfig(percentage=Decimal("0.5")))
    assert split.runner_pays == Decimal("0.13")
    assert split.club_pays == Decimal("0.12")


def test_cap_can_be_removed(bill_one, make_fee_record):
    billed = bill_one(
        make_fee_record(fee_amount="1000"),
        rules={"FEE-DEFAULT-SHARE": {"percentage": "0.6", "cap_amount": None}},
    )
    assert billed.runner_pays_amount == Decimal("600.00")
    assert billed.applied_rule_name == "Default percentage share (60%)"


def test_only_standard_fees(make_fee_record):
    rule = FEE_DEFAULT_SHARE()
    assert rule.condition(make_fee_record(fee_type=FeeType.LATE), FeeShareRuleConfig()) is False


def test_percentage_must_be_a_fraction():
    with pytest.raises(ValidationError):
        FeeShareRuleConfig(percentage=Decimal("1.5"))
