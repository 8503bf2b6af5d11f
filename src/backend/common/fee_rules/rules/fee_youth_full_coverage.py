from __future__ import annotations

from ..config import YouthRuleConfig
from ..models import FeeRecord, FeeType, RuleSplit
from ..registry import register_rule
from ..rule import Rule
from ..splits import club_pays_all


@register_rule
class FEE_YOUTH_FULL_COVERAGE(Rule):
    rule_id = "FEE-YOUTH-FULL-COVERAGE"
    rule_title = "Youth full coverage"
    description = "Club pays the full start fee for youth members up to the configured age."
    priority = 40
    config_model = YouthRuleConfig

    def condition(self, record: FeeRecord, cfg: YouthRuleConfig) -> bool:
        if record.age is None:
            return False
        return record.age <= cfg.max_age and record.fee_type == FeeType.STANDARD

    def action(self, record: FeeRecord, cfg: YouthRuleConfig) -> RuleSplit:
        return club_pays_all(record)
