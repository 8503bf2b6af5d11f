from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Sequence

from common.fee_rules.config import ReconciliationConfig
from common.fee_rules.models import round_amount

from .dates import parse_day, range_contains
from .models import (
    CompetitionAggregate,
    ParsedInvoice,
    ReconciliationReport,
    ReconciliationRow,
    UnmatchedInvoice,
    UnmatchedReason,
)
from .similarity import jaccard_similarity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    score: float
    invoice_idx: int
    competition_idx: int


def parse_invoice_amount(value: Optional[str]) -> tuple[Decimal, bool]:
    """Return `(amount, unparseable)`; unreadable totals come back as 0 with the flag set.

    Whichever of `,` and `.` comes last is the decimal separator when both appear
    ("1.234,50" and "1,234.50" both read as 1234.50). A separator that repeats is a
    thousands separator.
    """
    if value is None:
        return Decimal("0"), True
    text = "".join(str(value).split())
    if not text:
        return Decimal("0"), True
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif text.count(",") > 1:
        text = text.replace(",", "")
    elif text.count(".") > 1:
        text = text.replace(".", "")
    else:
        text = text.replace(",", ".")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0"), True
    if not amount.is_finite():
        return Decimal("0"), True
    return amount, False


def reconcile_invoices(
    competitions: Sequence[CompetitionAggregate],
    invoices: Iterable[ParsedInvoice],
    config: Optional[ReconciliationConfig] = None,
) -> ReconciliationReport:
    """
    Pair parsed invoices with competition totals.

    An invoice is a candidate for every dated competition whose range contains the
    invoice date and whose name scores at least `similarity_threshold` (Jaccard over
    name tokens). Candidates are assigned best score first (ties: earlier invoice,
    then earlier competition). Each invoice is used at most once, each competition
    receives at most one invoice unless `allow_multiple_invoices_per_competition`,
    and an invoice number that already backs a match is not matched again.

    Rows come back in invoice input order.
    """
    config = config or ReconciliationConfig()
    invoices = list(invoices)
    threshold = config.similarity_threshold

    dated = [(idx, comp) for idx, comp in enumerate(competitions) if comp.has_date_range]
    undated = [comp for comp in competitions if not comp.has_date_range]

    reasons: dict[int, UnmatchedReason] = {}
    best_scores: dict[int, float] = {}
    candidates: list[_Candidate] = []

    for inv_idx, invoice in enumerate(invoices):
        if not invoice.competition_name or not invoice.date:
            reasons[inv_idx] = UnmatchedReason.MISSING_FIELDS
            continue
        day = parse_day(invoice.date)
        if day is None:
            logger.warning("Unparseable date %r on invoice %s", invoice.date, invoice.origin)
            reasons[inv_idx] = UnmatchedReason.UNPARSEABLE_DATE
            continue

        on_date = [(idx, comp) for idx, comp in dated if range_contains(comp.start, comp.end, day)]
        if not on_date:
            reasons[inv_idx] = UnmatchedReason.NO_COMPETITION_ON_DATE
            continue

        qualified = False
        for comp_idx, comp in on_date:
            score = jaccard_similarity(comp.competition_name, invoice.competition_name)
            best_scores[inv_idx] = max(score, best_scores.get(inv_idx, 0.0))
            if score >= threshold:
                candidates.append(_Candidate(score=score, invoice_idx=inv_idx, competition_idx=comp_idx))
                qualified = True
        if not qualified:
            reasons[inv_idx] = UnmatchedReason.BELOW_THRESHOLD

    candidates.sort(key=lambda c: (-c.score, c.invoice_idx, c.competition_idx))

    assigned: dict[int, _Candidate] = {}
    claimed_competitions: set[int] = set()
    claimed_numbers: set[str] = set()
    for cand in candidates:
        if cand.invoice_idx in assigned:
            continue
        if cand.competition_idx in claimed_competitions and not config.allow_multiple_invoices_per_competition:
            continue
        number = invoices[cand.invoice_idx].invoice_number
        if number and number in claimed_numbers:
            continue
        assigned[cand.invoice_idx] = cand
        claimed_competitions.add(cand.competition_idx)
        if number:
            claimed_numbers.add(number)

    rows: list[ReconciliationRow] = []
    for inv_idx in sorted(assigned):
        cand = assigned[inv_idx]
        invoice = invoices[inv_idx]
        comp = competitions[cand.competition_idx]
        amount, unparseable = parse_invoice_amount(invoice.total_amount)
        if unparseable:
            logger.warning("Invoice %s has unreadable total %r; using 0", invoice.origin, invoice.total_amount)
        rows.append(
            ReconciliationRow(
                competition_name=comp.competition_name,
                competition_date=comp.competition_date,
                competition_total=comp.total_fee_amount,
                source_file=invoice.source_file,
                entry_name=invoice.entry_name,
                invoice_competition_name=invoice.competition_name,
                invoice_date=invoice.date,
                invoice_number=invoice.invoice_number,
                invoice_amount=amount,
                amount_unparseable=unparseable,
                similarity=cand.score,
                difference=round_amount(comp.total_fee_amount - amount),
            )
        )

    unmatched: list[UnmatchedInvoice] = []
    for inv_idx, invoice in enumerate(invoices):
        if inv_idx in assigned:
            continue
        reason = reasons.get(inv_idx, UnmatchedReason.COMPETITION_ALREADY_MATCHED)
        # A second copy of an already matched invoice is not reported; incomplete invoices always are.
        if (
            reason != UnmatchedReason.MISSING_FIELDS
            and invoice.invoice_number
            and invoice.invoice_number in claimed_numbers
        ):
            continue
        unmatched.append(
            UnmatchedInvoice(invoice=invoice, reason=reason, best_similarity=best_scores.get(inv_idx))
        )

    unmatched_competitions = [comp for idx, comp in dated if idx not in claimed_competitions]

    logger.info(
        "Reconciled %d invoices against %d competitions: %d matched, %d unmatched",
        len(invoices),
        len(competitions),
        len(rows),
        len(unmatched),
    )
    return ReconciliationReport(
        rows=rows,
        unmatched_invoices=unmatched,
        unmatched_competitions=unmatched_competitions,
        undated_competitions=undated,
    )
