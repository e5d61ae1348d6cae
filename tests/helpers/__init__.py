"""Test helpers module for shared test utilities.

- constants: Actor addresses and common amounts
- factories: Engine deployment and trade helpers
"""

from tests.helpers.constants import (
    ALICE,
    AUTHORITY,
    BOB,
    COLLECTOR,
    MALLORY,
    ONE_COIN,
    WALLET_FUNDING,
)
from tests.helpers.factories import (
    base_balance,
    burn_from,
    make_engine,
    mint_from,
    token_balance,
)

__all__ = [
    # Constants
    "ALICE",
    "AUTHORITY",
    "BOB",
    "COLLECTOR",
    "MALLORY",
    "ONE_COIN",
    "WALLET_FUNDING",
    # Factories
    "make_engine",
    "mint_from",
    "burn_from",
    "token_balance",
    "base_balance",
]
