from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from .config import FeeRulesConfig, RuleConfigBase
from .errors import RuleSetLoadError
from .models import (
    DEFAULT_RULE_NAME,
    ActiveRuleSummary,
    AppliedRuleTotals,
    BilledRecord,
    BillingRunReport,
    FeeRecord,
    RuleErrorNote,
)
from .registry import registry
from .rule import Rule
from .splits import clamp_split

logger = logging.getLogger(__name__)

_FEE_RECORD_FIELDS = set(FeeRecord.model_fields)


@dataclass(frozen=True)
class ActiveRule:
    """A rule bound to the parameters it evaluates with for one batch."""

    rule: Rule
    config: RuleConfigBase
    priority: int
    name: str

    @property
    def rule_id(self) -> str:
        return self.rule.rule_id


class FeeRulesRunner:
    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self._rules = list(rules) if rules is not None else registry.create_all()

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def resolve(self, config: FeeRulesConfig) -> list[ActiveRule]:
        """Bind every enabled rule to its parameters and order by ascending priority.

        Ties keep registration order. Raises `RuleSetLoadError` when no rules exist or a
        rule's parameters fail validation.
        """
        if not self._rules:
            raise RuleSetLoadError("No fee rules are registered.")

        active: list[ActiveRule] = []
        for rule in self._rules:
            try:
                cfg = config.get_rule_config(rule.rule_id, rule.config_model)
            except ValueError as exc:
                raise RuleSetLoadError(f"Invalid parameters for rule {rule.rule_id}: {exc}") from exc
            if not cfg.enabled:
                logger.debug("Rule %s disabled by configuration", rule.rule_id)
                continue
            priority = cfg.priority if cfg.priority is not None else rule.priority
            active.append(ActiveRule(rule=rule, config=cfg, priority=priority, name=rule.display_name(cfg)))

        active.sort(key=lambda a: a.priority)
        return active

    def bill(self, record: FeeRecord, active_rules: Sequence[ActiveRule]) -> BilledRecord:
        errors: list[RuleErrorNote] = []
        for active in active_rules:
            try:
                matched = active.rule.condition(record, active.config)
            except Exception as exc:
                logger.exception(
                    "Condition of rule %s failed for %s at %s",
                    active.rule_id,
                    record.member_name,
                    record.competition_name,
                )
                errors.append(RuleErrorNote(rule_id=active.rule_id, stage="condition", message=str(exc)))
                continue
            if not matched:
                continue

            try:
                proposed = active.rule.action(record, active.config)
                split = clamp_split(record.fee_amount, proposed.runner_pays)
            except Exception as exc:
                logger.exception(
                    "Action of rule %s failed for %s at %s",
                    active.rule_id,
                    record.member_name,
                    record.competition_name,
                )
                errors.append(RuleErrorNote(rule_id=active.rule_id, stage="action", message=str(exc)))
                continue

            logger.debug(
                "Applied %s to %s at %s: runner %s, club %s",
                active.name,
                record.member_name,
                record.competition_name,
                split.runner_pays,
                split.club_pays,
            )
            return BilledRecord(
                **record.model_dump(include=_FEE_RECORD_FIELDS),
                runner_pays_amount=split.runner_pays,
                club_pays_amount=split.club_pays,
                applied_rule_id=active.rule_id,
                applied_rule_name=active.name,
                rule_errors=errors,
            )

        logger.debug("No rule matched %s at %s; runner pays full amount", record.member_name, record.competition_name)
        return BilledRecord(
            **record.model_dump(include=_FEE_RECORD_FIELDS),
            runner_pays_amount=record.fee_amount,
            club_pays_amount=Decimal("0.00"),
            applied_rule_id=None,
            applied_rule_name=DEFAULT_RULE_NAME,
            rule_errors=errors,
        )

    def run(self, records: Iterable[FeeRecord], config: Optional[FeeRulesConfig] = None) -> BillingRunReport:
        # Parameters are bound once so every record in the batch sees the same rule set.
        active_rules = self.resolve(config or FeeRulesConfig())
        logger.info("Billing batch with rules: %s", [a.name for a in active_rules])

        billed = [self.bill(record, active_rules) for record in records]

        totals: dict[str, AppliedRuleTotals] = {}
        for rec in billed:
            key = rec.applied_rule_id or "DEFAULT"
            entry = totals.get(key)
            if entry is None:
                entry = totals[key] = AppliedRuleTotals(rule_name=rec.applied_rule_name)
            entry.records += 1
            entry.fee_amount += rec.fee_amount
            entry.runner_pays_amount += rec.runner_pays_amount
            entry.club_pays_amount += rec.club_pays_amount

        report = BillingRunReport(
            run_id=str(uuid.uuid4()),
            generated_at=datetime.now(timezone.utc),
            records=billed,
            rules=[
                ActiveRuleSummary(
                    rule_id=a.rule_id,
                    rule_name=a.name,
                    priority=a.priority,
                    parameters=a.config.model_dump(mode="json", exclude={"enabled", "priority"}),
                )
                for a in active_rules
            ],
            totals=totals,
        )
        if report.error_count:
            logger.warning("Billing batch finished with %d rule evaluation errors", report.error_count)
        logger.info("Billed %d fee records", len(billed))
        return report
