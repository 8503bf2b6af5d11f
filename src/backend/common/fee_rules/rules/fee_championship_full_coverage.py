from __future__ import annotations

from ..config import ChampionshipRuleConfig
from ..models import FeeRecord, FeeType, RuleSplit
from ..registry import register_rule
from ..rule import Rule
from ..splits import club_pays_all


@register_rule
class FEE_CHAMPIONSHIP_FULL_COVERAGE(Rule):
    rule_id = "FEE-CHAMPIONSHIP-FULL-COVERAGE"
    rule_title = "Championship full coverage"
    description = "Club pays the full start fee for every member entered in a championship competition."
    priority = 30
    config_model = ChampionshipRuleConfig

    def condition(self, record: FeeRecord, cfg: ChampionshipRuleConfig) -> bool:
        return record.is_championship and record.fee_type == FeeType.STANDARD

    def action(self, record: FeeRecord, cfg: ChampionshipRuleConfig) -> RuleSplit:
        return club_pays_all(record)
