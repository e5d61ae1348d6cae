"""Mutable protocol state owned by one reserve engine."""

from __future__ import annotations

from dataclasses import dataclass

from reserve_engine.ledger.base import TreasuryCap
from reserve_engine.models.types import NULL_ADDRESS, normalize_address


@dataclass(frozen=True)
class TxContext:
    """Identifies the caller of an engine operation."""

    sender: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", normalize_address(self.sender))


@dataclass
class ReserveState:
    """The single shared reserve record.

    Token supply is not stored here: the treasury capability (and through
    it the ledger) is the source of truth for outstanding tokens.

    Attributes:
        treasury: Mint/burn capability, held only by this state
        authority: Address allowed to run admin operations
        last_price: Price after the most recent successful mint/burn; starts
            at the engine config's initial_price
        backing_balance: Base-asset units held as reserve
        fee_collector: Fee recipient; NULL_ADDRESS until initialized
        total_fees_collected: Cumulative fees paid to collectors
    """

    treasury: TreasuryCap
    authority: str
    last_price: int
    backing_balance: int = 0
    fee_collector: str = NULL_ADDRESS
    total_fees_collected: int = 0

    def __post_init__(self) -> None:
        self.authority = normalize_address(self.authority)
        self.fee_collector = normalize_address(self.fee_collector)

    @property
    def total_supply(self) -> int:
        return self.treasury.total_supply

    @property
    def is_initialized(self) -> bool:
        return self.fee_collector != NULL_ADDRESS
