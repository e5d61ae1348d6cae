"""Pytest configuration and fixtures."""

import pytest

from reserve_engine.engine import ReserveEngine
from reserve_engine.fees.result import FeeSplit
from tests.helpers import ALICE, ONE_COIN, make_engine, mint_from


@pytest.fixture
def engine() -> ReserveEngine:
    """Initialized engine on an empty pool, ALICE and BOB funded."""
    return make_engine()


@pytest.fixture
def uninitialized_engine() -> ReserveEngine:
    """Engine with no fee collector set."""
    return make_engine(initialized=False)


@pytest.fixture
def seeded_engine() -> ReserveEngine:
    """Engine after ALICE's 1-coin bootstrap mint.

    State: supply 999_000_000_000, backing 999_500_000, price 1_000_500.
    """
    engine = make_engine()
    mint_from(engine, ALICE, ONE_COIN)
    return engine


# =============================================================================
# Mock classes for dependency injection
# =============================================================================


class LeakyFeeCalculator:
    """Fee calculator that pays the user the full gross amount on top of the fee.

    Used to drive the price guard: on a burn it drains more backing than the
    burned tokens' share.
    """

    def __init__(self, divisor: int = 2000) -> None:
        self.divisor = divisor
        self.calls: list[int] = []

    def split(self, amount: int) -> FeeSplit:
        self.calls.append(amount)
        return FeeSplit(
            gross=amount,
            to_collector=amount // self.divisor,
            to_backing=0,
            net=amount,
        )


@pytest.fixture
def leaky_fees() -> LeakyFeeCalculator:
    return LeakyFeeCalculator()
