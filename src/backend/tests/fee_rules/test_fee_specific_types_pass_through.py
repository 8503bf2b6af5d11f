from decimal import Decimal

from common.fee_rules.config import SpecificFeeTypesRuleConfig
from common.fee_rules.models import FeeType
from common.fee_rules.rules.fee_specific_types_pass_through import FEE_SPECIFIC_TYPES_PASS_THROUGH


def test_runner_pays_all_of_a_dns_fee(make_fee_record):
    rule = FEE_SPECIFIC_TYPES_PASS_THROUGH()
    cfg = SpecificFeeTypesRuleConfig()
    rec = make_fee_record(fee_type=FeeType.DNS, fee_amount="300")
    assert rule.condition(rec, cfg) is True
    split = rule.action(rec, cfg)
    assert split.runner_pays == Decimal("300.00")
    assert split.club_pays == Decimal("0")


def test_matches_late_and_chip_rental_but_not_standard(make_fee_record):
    rule = FEE_SPECIFIC_TYPES_PASS_THROUGH()
    cfg = SpecificFeeTypesRuleConfig()
    assert rule.condition(make_fee_record(fee_type=FeeType.LATE), cfg) is True
    assert rule.condition(make_fee_record(fee_type=FeeType.CHIP_RENTAL), cfg) is True
    assert rule.condition(make_fee_record(fee_type=FeeType.STANDARD), cfg) is False


def test_fee_types_are_configurable(make_fee_record):
    rule = FEE_SPECIFIC_TYPES_PASS_THROUGH()
    cfg = SpecificFeeTypesRuleConfig(fee_types=["LateFee"])
    assert rule.condition(make_fee_record(fee_type=FeeType.LATE), cfg) is True
    assert rule.condition(make_fee_record(fee_type=FeeType.DNS), cfg) is False


def test_dns_wins_over_championship_and_youth(bill_one, make_fee_record):
    rec = make_fee_record(fee_type=FeeType.DNS, fee_amount="300", is_championship=True, age=12)
    billed = bill_one(rec)
    assert billed.applied_rule_id == "FEE-SPECIFIC-TYPES-PASS-THROUGH"
    assert billed.runner_pays_amount == Decimal("300.00")
    assert billed.club_pays_amount == Decimal("0.00")
