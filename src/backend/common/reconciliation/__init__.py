"""Matching of parsed invoices against per-competition fee totals (no I/O)."""

from .aggregation import aggregate_competitions
from .dates import parse_date_range, parse_day
from .matcher import parse_invoice_amount, reconcile_invoices
from .models import (
    CompetitionAggregate,
    ParsedInvoice,
    ReconciliationReport,
    ReconciliationRow,
    UnmatchedInvoice,
    UnmatchedReason,
)
from .similarity import jaccard_similarity, name_tokens
