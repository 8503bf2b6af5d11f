from __future__ import annotations

from ..config import FeeShareRuleConfig
from ..models import FeeRecord, FeeType, RuleSplit
from ..registry import register_rule
from ..rule import Rule
from ..splits import capped_share, format_percentage


@register_rule
class FEE_DEFAULT_SHARE(Rule):
    rule_id = "FEE-DEFAULT-SHARE"
    rule_title = "Default percentage share"
    description = (
        "For standard start fees not handled by a more specific rule, the runner pays a percentage "
        "of the fee up to a cap; the club pays the rest."
    )
    priority = 100
    config_model = FeeShareRuleConfig

    def display_name(self, cfg: FeeShareRuleConfig) -> str:
        cap = f", max {cfg.cap_amount}" if cfg.cap_amount is not None else ""
        return f"{self.rule_title} ({format_percentage(cfg.percentage)}{cap})"

    def condition(self, record: FeeRecord, cfg: FeeShareRuleConfig) -> bool:
        return record.fee_type == FeeType.STANDARD

    def action(self, record: FeeRecord, cfg: FeeShareRuleConfig) -> RuleSplit:
        return capped_share(record, percentage=cfg.percentage, cap_amount=cfg.cap_amount)
