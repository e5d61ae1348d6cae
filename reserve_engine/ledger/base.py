"""Ledger capability set required by the reserve engine.

The ledger stands for the hosting runtime: it custodies the base-asset
reserve, owns token accounting through the treasury capability, and
makes every transfer atomic.
"""

from __future__ import annotations

import itertools
from contextlib import AbstractContextManager
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, runtime_checkable


class LedgerError(Exception):
    """Custody fault: spent coin, forged capability, wrong asset, short balance."""

    pass


class Asset(str, Enum):
    """Assets held by the ledger."""

    BASE = "base"
    TOKEN = "token"


@dataclass(eq=False)
class Coin:
    """Handle to a quantity of one asset, owned by one address.

    A coin is consumed when deposited or burned; the ledger rejects it
    afterwards.
    """

    id: int
    asset: Asset
    value: int
    owner: str


_cap_ids = itertools.count(1)


class TreasuryCap:
    """Mint/burn authority for the derivative token.

    Exactly one cap exists per ledger. The issuing ledger hands it a
    reader for the outstanding supply, so the cap always reports the
    ledger's own count. It cannot be duplicated: copy, deepcopy and
    pickling all raise.
    """

    __slots__ = ("_id", "_supply_of")

    def __init__(self, supply_of: Callable[[], int]) -> None:
        self._id = next(_cap_ids)
        self._supply_of = supply_of

    @property
    def id(self) -> int:
        return self._id

    @property
    def total_supply(self) -> int:
        return self._supply_of()

    def __repr__(self) -> str:
        return f"TreasuryCap(id={self._id}, supply={self.total_supply})"

    def __copy__(self) -> TreasuryCap:
        raise TypeError("TreasuryCap cannot be copied")

    def __deepcopy__(self, memo: dict) -> TreasuryCap:
        raise TypeError("TreasuryCap cannot be copied")

    def __reduce__(self) -> tuple:
        raise TypeError("TreasuryCap cannot be serialized")


@runtime_checkable
class Ledger(Protocol):
    """Capabilities the engine needs from its hosting runtime."""

    def create_currency(self) -> TreasuryCap:
        """Register the derivative token and hand out its only capability.

        Raises:
            LedgerError: If the currency was already created
        """
        ...

    def mint_token(self, cap: TreasuryCap, amount: int, recipient: str) -> Coin:
        """Create ``amount`` new tokens owned by ``recipient``."""
        ...

    def burn_token(self, cap: TreasuryCap, coin: Coin) -> int:
        """Destroy a token coin and return its value."""
        ...

    def deposit_base_asset(self, coin: Coin) -> int:
        """Move a base-asset coin into the reserve vault and return its value."""
        ...

    def transfer_base_asset(self, amount: int, recipient: str) -> None:
        """Pay ``amount`` base-asset units out of the reserve vault."""
        ...

    def current_total_supply(self, cap: TreasuryCap) -> int:
        """Authoritative outstanding token count."""
        ...

    def reserve_balance(self) -> int:
        """Base-asset units held in the reserve vault."""
        ...

    def ensure_spendable(self, coin: Coin, asset: Asset) -> None:
        """Raise LedgerError unless ``coin`` is live and holds ``asset``."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Scope in which ledger effects are rolled back on error."""
        ...
