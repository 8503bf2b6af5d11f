"""Rule-based runner/club fee splitting.

This package intentionally contains only domain logic:
- Rule inputs are normalized fee records + the batch's rule parameters.
- No file parsing, PDF handling, or persistence lives here.
"""

from .config import FeeRulesConfig, ReconciliationConfig
from .errors import RuleSetLoadError
from .models import (
    BilledRecord,
    BillingRunReport,
    FeeRecord,
    FeeType,
    RuleSplit,
)
from .runner import ActiveRule, FeeRulesRunner

# Import built-in rules so they self-register with the global registry.
from . import rules as _builtin_rules  # noqa: F401
