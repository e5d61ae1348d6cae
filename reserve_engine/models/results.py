"""Result records reported by engine operations.

These are what the hosting runtime would emit as events. They are
plain frozen dataclasses; the HTTP layer converts them to pydantic
response models.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MintPlan:
    """Fully validated deltas for one mint, computed before any commit."""

    amount: int
    tokens_minted: int
    fee_to_collector: int
    fee_to_backing: int
    net_for_tokens: int
    new_backing: int
    new_supply: int
    new_price: int
    new_fees_total: int
    bootstrap: bool

    @property
    def backing_added(self) -> int:
        return self.net_for_tokens + self.fee_to_backing


@dataclass(frozen=True)
class BurnPlan:
    """Fully validated deltas for one burn, computed before any commit."""

    token_amount: int
    gross_payout: int
    user_amount: int
    fee_to_collector: int
    fee_stays_in_backing: int
    new_backing: int
    new_supply: int
    new_price: int
    new_fees_total: int

    @property
    def empties_pool(self) -> bool:
        return self.new_supply == 0


@dataclass(frozen=True)
class MintResult:
    """Report of a successful mint."""

    sui_amount: int
    tokens_minted: int
    backing_added: int
    fee_collected: int
    new_price: int


@dataclass(frozen=True)
class BurnResult:
    """Report of a successful burn."""

    tokens_burned: int
    sui_returned: int
    fee_collected: int
    new_price: int


@dataclass(frozen=True)
class FeeCollectorUpdated:
    """Audit record for initialize / set_fee_collector."""

    previous: str
    new: str


@dataclass(frozen=True)
class AuthorityTransferred:
    """Audit record for transfer_authority."""

    previous: str
    new: str


@dataclass(frozen=True)
class SystemInfo:
    """Point-in-time snapshot of all queryable state.

    No freshness guarantee holds between two snapshots.
    """

    total_supply: int
    total_backing: int
    current_price: int
    last_price: int
    fee_collector: str
    total_fees_collected: int
    authority: str
