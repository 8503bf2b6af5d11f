from __future__ import annotations

from ..config import JuniorShareRuleConfig
from ..models import FeeRecord, FeeType, RuleSplit
from ..registry import register_rule
from ..rule import Rule
from ..splits import capped_share, format_percentage


@register_rule
class FEE_JUNIOR_SHARE(Rule):
    rule_id = "FEE-JUNIOR-SHARE"
    rule_title = "Junior fee share"
    description = (
        "Juniors within the configured age range pay a percentage of the start fee up to a cap; "
        "the club pays the rest."
    )
    priority = 50
    config_model = JuniorShareRuleConfig

    def display_name(self, cfg: JuniorShareRuleConfig) -> str:
        cap = f", max {cfg.cap_amount}" if cfg.cap_amount is not None else ""
        return f"{self.rule_title} ({format_percentage(cfg.percentage)}{cap})"

    def condition(self, record: FeeRecord, cfg: JuniorShareRuleConfig) -> bool:
        if record.age is None or record.fee_type != FeeType.STANDARD:
            return False
        return cfg.min_age <= record.age <= cfg.max_age

    def action(self, record: FeeRecord, cfg: JuniorShareRuleConfig) -> RuleSplit:
        return capped_share(record, percentage=cfg.percentage, cap_amount=cfg.cap_amount)
