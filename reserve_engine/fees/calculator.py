"""Fee calculator for mint deposits and burn payouts.

Both legs use floor division, so the total fee is at most
``2 * (amount // fee_divisor)``.
"""

from __future__ import annotations

from typing import Protocol

from reserve_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from reserve_engine.fees.result import FeeSplit
from reserve_engine.safe_int import S


class FeeCalculator(Protocol):
    """Protocol for fee splitting.

    The engine only depends on this interface, so tests can swap in a
    calculator with different legs.
    """

    def split(self, amount: int) -> FeeSplit:
        """Split a gross amount into collector, backing and net legs.

        Args:
            amount: Gross base-asset amount

        Returns:
            FeeSplit whose legs sum to ``amount``
        """
        ...


class DefaultFeeCalculator:
    """Two equal fee legs of ``amount // fee_divisor`` each.

    With the default divisor of 2000 each leg is 0.05% and the total fee
    is at most 0.1%. Amounts below ``fee_divisor`` pay no fee at all,
    which is why the engine enforces a minimum trade size.

    Attributes:
        config: Engine configuration supplying ``fee_divisor``
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or DEFAULT_ENGINE_CONFIG

    def split(self, amount: int) -> FeeSplit:
        gross = S(amount)
        to_collector = gross // self.config.fee_divisor
        to_backing = gross // self.config.fee_divisor
        net = gross - to_collector - to_backing
        return FeeSplit(
            gross=gross.to_u64(),
            to_collector=to_collector.value,
            to_backing=to_backing.value,
            net=net.value,
        )


# Default calculator instance
DEFAULT_FEE_CALCULATOR = DefaultFeeCalculator()
