import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.reconciliation.aggregation import aggregate_competitions
from common.reconciliation.models import ParsedInvoice


@pytest.fixture
def make_invoice():
    def _make(
        *,
        competition_name="Stockholm City Cup",
        date="2024-05-12",
        total_amount="1000.00",
        invoice_number=None,
        source_file="invoices.zip",
        entry_name=None,
    ) -> ParsedInvoice:
        return ParsedInvoice(
            source_file=source_file,
            entry_name=entry_name,
            competition_name=competition_name,
            date=date,
            total_amount=total_amount,
            invoice_number=invoice_number,
        )

    return _make


@pytest.fixture
def make_competitions(make_fee_record):
    def _make(*entries):
        """Each entry is `(competition_name, competition_date, fee_amount)`."""
        records = [
            make_fee_record(competition_name=name, competition_date=day, fee_amount=amount)
            for name, day, amount in entries
        ]
        return aggregate_competitions(records)

    return _make
