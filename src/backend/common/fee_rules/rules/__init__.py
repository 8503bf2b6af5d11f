from .fee_specific_types_pass_through import FEE_SPECIFIC_TYPES_PASS_THROUGH
from .fee_championship_full_coverage import FEE_CHAMPIONSHIP_FULL_COVERAGE
from .fee_seasonal_period_pass_through import FEE_SEASONAL_PERIOD_PASS_THROUGH
from .fee_youth_full_coverage import FEE_YOUTH_FULL_COVERAGE
from .fee_junior_share import FEE_JUNIOR_SHARE
from .fee_default_share import FEE_DEFAULT_SHARE

__all__ = [
    "FEE_SPECIFIC_TYPES_PASS_THROUGH",
    "FEE_CHAMPIONSHIP_FULL_COVERAGE",
    "FEE_SEASONAL_PERIOD_PASS_THROUGH",
    "FEE_YOUTH_FULL_COVERAGE",
    "FEE_JUNIOR_SHARE",
    "FEE_DEFAULT_SHARE",
]
