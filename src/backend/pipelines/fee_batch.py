from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from adapters.invoices.documents import InvoiceExtractionResult, parsed_invoices
from common.fee_rules.config import FeeRulesConfig
from common.fee_rules.models import BillingRunReport, FeeRecord
from common.fee_rules.runner import FeeRulesRunner
from common.reconciliation.aggregation import aggregate_competitions
from common.reconciliation.matcher import reconcile_invoices
from common.reconciliation.models import CompetitionAggregate, ParsedInvoice, ReconciliationReport

from .rule_config_store import JsonFileRuleConfigStore, RuleConfigStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeBatchResult:
    config: FeeRulesConfig
    billing: BillingRunReport
    competitions: tuple[CompetitionAggregate, ...]
    reconciliation: Optional[ReconciliationReport] = None
    extraction: tuple[InvoiceExtractionResult, ...] = ()


def run_fee_batch(
    records: Iterable[FeeRecord],
    *,
    config_store: Optional[RuleConfigStore] = None,
    invoices: Optional[Iterable[ParsedInvoice]] = None,
    extraction: Iterable[InvoiceExtractionResult] = (),
    runner: Optional[FeeRulesRunner] = None,
) -> FeeBatchResult:
    """
    Bill one batch of fee records and, when invoices are supplied, reconcile them.

    Rule parameters are loaded exactly once, before any record is evaluated. A
    `RuleSetLoadError` from the store aborts the batch. Invoices are taken from
    `invoices` plus the successful entries of `extraction`; reconciliation runs if
    either was given.
    """
    store = config_store or JsonFileRuleConfigStore()
    config = store.load()
    runner = runner or FeeRulesRunner()

    billing = runner.run(records, config)
    competitions = aggregate_competitions(billing.records)

    extraction = tuple(extraction)
    reconciliation = None
    if invoices is not None or extraction:
        all_invoices = list(invoices or []) + parsed_invoices(extraction)
        reconciliation = reconcile_invoices(competitions, all_invoices, config.reconciliation)

    logger.info(
        "Fee batch %s: %d records, %d competitions%s",
        billing.run_id,
        len(billing.records),
        len(competitions),
        f", {len(reconciliation.rows)} invoices matched" if reconciliation else "",
    )
    return FeeBatchResult(
        config=config,
        billing=billing,
        competitions=tuple(competitions),
        reconciliation=reconciliation,
        extraction=extraction,
    )
