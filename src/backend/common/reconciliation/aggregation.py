from __future__ import annotations

import logging
from typing import Iterable

from common.fee_rules.models import BilledRecord, FeeRecord

from .dates import parse_date_range
from .models import CompetitionAggregate

logger = logging.getLogger(__name__)


def aggregate_competitions(records: Iterable[FeeRecord]) -> list[CompetitionAggregate]:
    """
    Sum fee records per competition occurrence.

    Records are grouped by the `(competition_name, competition_date)` key. Aggregates
    are returned in order of each key's first appearance in `records`. Competitions
    with an unparseable date are still aggregated, with `start`/`end` left unset.
    """
    grouped: dict[tuple[str, str], CompetitionAggregate] = {}
    for record in records:
        key = (record.competition_name, record.competition_date)
        agg = grouped.get(key)
        if agg is None:
            date_range = parse_date_range(record.competition_date)
            if date_range is None:
                logger.warning(
                    "Unparseable date %r for competition %r; it will not be matched to invoices",
                    record.competition_date,
                    record.competition_name,
                )
            agg = grouped[key] = CompetitionAggregate(
                competition_name=record.competition_name,
                competition_date=record.competition_date,
                start=date_range[0] if date_range else None,
                end=date_range[1] if date_range else None,
            )
        agg.total_fee_amount += record.fee_amount
        if isinstance(record, BilledRecord):
            agg.total_runner_amount += record.runner_pays_amount
            agg.total_club_amount += record.club_pays_amount
        agg.record_count += 1
    return list(grouped.values())
