from __future__ import annotations

from ..config import SpecificFeeTypesRuleConfig
from ..models import FeeRecord, RuleSplit
from ..registry import register_rule
from ..rule import Rule
from ..splits import runner_pays_all


@register_rule
class FEE_SPECIFIC_TYPES_PASS_THROUGH(Rule):
    rule_id = "FEE-SPECIFIC-TYPES-PASS-THROUGH"
    rule_title = "Specific fee types full pass-through"
    description = "Runner pays 100% of late entry, did-not-start (DNS) and chip rental fees."
    priority = 10
    config_model = SpecificFeeTypesRuleConfig

    def condition(self, record: FeeRecord, cfg: SpecificFeeTypesRuleConfig) -> bool:
        return record.fee_type in cfg.fee_types

    def action(self, record: FeeRecord, cfg: SpecificFeeTypesRuleConfig) -> RuleSplit:
        return runner_pays_all(record)
