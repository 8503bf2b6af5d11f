from decimal import Decimal

import pytest

from common.fee_rules.config import RuleConfigBase
from common.fee_rules.errors import RuleSetLoadError
from common.fee_rules.models import DEFAULT_RULE_NAME, FeeType, RuleSplit
from common.fee_rules.rule import Rule
from common.fee_rules.rules import FEE_DEFAULT_SHARE, FEE_SPECIFIC_TYPES_PASS_THROUGH
from common.fee_rules.runner import FeeRulesRunner


class _ExplodingCondition(Rule):
    rule_id = "TEST-EXPLODING-CONDITION"
    rule_title = "Exploding condition"
    description = ""
    priority = 1
    config_model = RuleConfigBase

    def condition(self, record, cfg):
        raise KeyError("age")

    def action(self, record, cfg):
        return RuleSplit(runner_pays=Decimal("0"), club_pays=record.fee_amount)


class _ExplodingAction(_ExplodingCondition):
    rule_id = "TEST-EXPLODING-ACTION"
    rule_title = "Exploding action"
    priority = 2

    def condition(self, record, cfg):
        return True

    def action(self, record, cfg):
        raise ZeroDivisionError("division by zero")


class _Overcharge(_ExplodingCondition):
    rule_id = "TEST-OVERCHARGE"
    rule_title = "Overcharge"
    priority = 5

    def condition(self, record, cfg):
        return True

    def action(self, record, cfg):
        return RuleSplit(runner_pays=record.fee_amount * 2, club_pays=-record.fee_amount)


def test_resolve_orders_by_priority(runner, make_config):
    active = runner.resolve(make_config())
    priorities = [a.priority for a in active]
    assert priorities == sorted(priorities)
    assert [a.rule_id for a in active] == [
        "FEE-SPECIFIC-TYPES-PASS-THROUGH",
        "FEE-CHAMPIONSHIP-FULL-COVERAGE",
        "FEE-SEASONAL-PERIOD-PASS-THROUGH",
        "FEE-YOUTH-FULL-COVERAGE",
        "FEE-DEFAULT-SHARE",
    ]


def test_resolve_skips_disabled_rules(runner, make_config):
    active = runner.resolve(make_config(rules={"FEE-YOUTH-FULL-COVERAGE": {"enabled": False}}))
    assert "FEE-YOUTH-FULL-COVERAGE" not in [a.rule_id for a in active]


def test_priority_override_changes_evaluation_order(runner, make_config, make_fee_record):
    # Default share ahead of youth coverage: a 15 year old now pays the default share.
    active = runner.resolve(make_config(rules={"FEE-DEFAULT-SHARE": {"priority": 20}}))
    billed = runner.bill(make_fee_record(age=15, fee_amount="500"), active)
    assert billed.applied_rule_id == "FEE-DEFAULT-SHARE"
    assert billed.runner_pays_amount == Decimal("120.00")


def test_resolve_raises_on_invalid_parameters(runner, make_config):
    with pytest.raises(RuleSetLoadError):
        runner.resolve(make_config(rules={"FEE-DEFAULT-SHARE": {"percentage": "lots"}}))


def test_resolve_raises_without_rules(make_config):
    with pytest.raises(RuleSetLoadError):
        FeeRulesRunner(rules=[]).resolve(make_config())


def test_no_match_falls_back_to_runner_pays_all(make_config, make_fee_record):
    runner = FeeRulesRunner(rules=[FEE_SPECIFIC_TYPES_PASS_THROUGH()])
    billed = runner.bill(make_fee_record(fee_amount="99.5"), runner.resolve(make_config()))
    assert billed.applied_rule_id is None
    assert billed.applied_rule_name == DEFAULT_RULE_NAME
    assert billed.runner_pays_amount == Decimal("99.50")
    assert billed.club_pays_amount == Decimal("0.00")


def test_first_matching_rule_wins(runner, make_config, make_fee_record):
    # Late fee for a youth at a championship: only the pass-through applies.
    rec = make_fee_record(fee_type=FeeType.LATE, fee_amount="50", age=12, is_championship=True)
    billed = runner.bill(rec, runner.resolve(make_config()))
    assert billed.applied_rule_id == "FEE-SPECIFIC-TYPES-PASS-THROUGH"
    assert billed.runner_pays_amount == Decimal("50.00")


def test_condition_error_is_recorded_and_evaluation_continues(make_config, make_fee_record):
    runner = FeeRulesRunner(rules=[_ExplodingCondition(), FEE_DEFAULT_SHARE()])
    billed = runner.bill(make_fee_record(fee_amount="100"), runner.resolve(make_config()))
    assert billed.applied_rule_id == "FEE-DEFAULT-SHARE"
    assert billed.runner_pays_amount == Decimal("60.00")
    assert len(billed.rule_errors) == 1
    assert billed.rule_errors[0].rule_id == "TEST-EXPLODING-CONDITION"
    assert billed.rule_errors[0].stage == "condition"


def test_action_error_is_recorded_and_evaluation_continues(make_config, make_fee_record):
    runner = FeeRulesRunner(rules=[_ExplodingAction()])
    billed = runner.bill(make_fee_record(fee_amount="80"), runner.resolve(make_config()))
    assert billed.applied_rule_id is None
    assert billed.runner_pays_amount == Decimal("80.00")
    assert [(e.rule_id, e.stage) for e in billed.rule_errors] == [("TEST-EXPLODING-ACTION", "action")]


def test_out_of_range_split_is_clamped(make_config, make_fee_record):
    runner = FeeRulesRunner(rules=[_Overcharge()])
    billed = runner.bill(make_fee_record(fee_amount="100"), runner.resolve(make_config()))
    assert billed.runner_pays_amount == Decimal("100.00")
    assert billed.club_pays_amount == Decimal("0.00")


def test_scenarios_split_completely(runner, make_config, make_fee_record):
    records = [
        make_fee_record(fee_type=FeeType.DNS, fee_amount="300"),
        make_fee_record(is_championship=True, fee_amount="250"),
        make_fee_record(age=15, fee_amount="500"),
        make_fee_record(age=40, fee_amount="1000"),
        make_fee_record(age=40, fee_amount="133.33"),
        make_fee_record(fee_type=FeeType.CHIP_RENTAL, fee_amount="0"),
    ]
    report = runner.run(records, make_config())
    assert [(r.runner_pays_amount, r.club_pays_amount) for r in report.records] == [
        (Decimal("300.00"), Decimal("0.00")),
        (Decimal("0.00"), Decimal("250.00")),
        (Decimal("0.00"), Decimal("500.00")),
        (Decimal("120.00"), Decimal("880.00")),
        (Decimal("80.00"), Decimal("53.33")),
        (Decimal("0.00"), Decimal("0.00")),
    ]
    for rec in report.records:
        assert rec.runner_pays_amount + rec.club_pays_amount == rec.fee_amount
        assert rec.runner_pays_amount >= 0
        assert rec.club_pays_amount >= 0


def test_billing_is_deterministic(runner, make_config, make_fee_record):
    records = [make_fee_record(age=age, fee_amount="210") for age in (10, 30, None)]
    first = runner.run(records, make_config())
    second = runner.run(records, make_config())
    assert [r.model_dump() for r in first.records] == [r.model_dump() for r in second.records]


def test_report_totals_by_rule(runner, make_config, make_fee_record):
    records = [
        make_fee_record(fee_amount="100"),
        make_fee_record(fee_amount="200"),
        make_fee_record(fee_type=FeeType.LATE, fee_amount="40"),
    ]
    report = runner.run(records, make_config())
    default = report.totals["FEE-DEFAULT-SHARE"]
    assert default.records == 2
    assert default.fee_amount == Decimal("300.00")
    assert default.runner_pays_amount == Decimal("180.00")
    assert report.totals["FEE-SPECIFIC-TYPES-PASS-THROUGH"].runner_pays_amount == Decimal("40.00")
    assert report.error_count == 0
    assert {r.rule_id for r in report.rules} >= {"FEE-DEFAULT-SHARE"}
    default_summary = next(r for r in report.rules if r.rule_id == "FEE-DEFAULT-SHARE")
    assert default_summary.parameters == {"percentage": "0.6", "cap_amount": "120"}


def test_records_keep_their_input_fields(runner, make_config, make_fee_record):
    rec = make_fee_record(member_name="Erik Lind", competition_name="Jukola", age=33, class_name="H21")
    billed = runner.run([rec], make_config()).records[0]
    assert billed.member_name == "Erik Lind"
    assert billed.competition_name == "Jukola"
    assert billed.class_name == "H21"
    assert billed.fee_amount == rec.fee_amount
