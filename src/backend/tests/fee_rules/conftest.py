import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.fee_rules.runner import FeeRulesRunner


@pytest.fixture
def runner() -> FeeRulesRunner:
    return FeeRulesRunner()


@pytest.fixture
def bill_one(runner, make_config):
    def _bill(record, *, rules: dict | None = None):
        active = runner.resolve(make_config(rules=rules))
        return runner.bill(record, active)

    return _bill
