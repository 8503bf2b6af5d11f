import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work,
# even when pytest's rootdir is the repository root.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from decimal import Decimal

import pytest

from common.fee_rules.config import FeeRulesConfig
from common.fee_rules.models import FeeRecord, FeeType


@pytest.fixture
def make_fee_record():
    def _make(
        *,
        fee_type: FeeType = FeeType.STANDARD,
        fee_amount="100",
        competition_name: str = "Stockholm City Cup",
        competition_date: str = "2024-05-12",
        member_name: str = "Anna Berg",
        age=None,
        is_championship: bool = False,
        **extra,
    ) -> FeeRecord:
        return FeeRecord(
            member_name=member_name,
            competition_name=competition_name,
            competition_date=competition_date,
            fee_type=fee_type,
            fee_amount=Decimal(str(fee_amount)),
            age=age,
            is_championship=is_championship,
            **extra,
        )

    return _make


@pytest.fixture
def make_config():
    def _make(*, rules: dict | None = None, reconciliation: dict | None = None) -> FeeRulesConfig:
        payload: dict = {"rules": rules or {}}
        if reconciliation is not None:
            payload["reconciliation"] = reconciliation
        return FeeRulesConfig.model_validate(payload)

    return _make
