"""Fee splitting for the reserve engine.

Usage:
    from reserve_engine.fees import DefaultFeeCalculator

    split = DefaultFeeCalculator().split(1_000_000_000)
    assert split.to_collector == 500_000
"""

from reserve_engine.fees.calculator import (
    DEFAULT_FEE_CALCULATOR,
    DefaultFeeCalculator,
    FeeCalculator,
)
from reserve_engine.fees.result import FeeSplit

__all__ = [
    "FeeCalculator",
    "DefaultFeeCalculator",
    "DEFAULT_FEE_CALCULATOR",
    "FeeSplit",
]
