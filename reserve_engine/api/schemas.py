"""Pydantic request/response models for the reserve HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from reserve_engine.models.results import (
    AuthorityTransferred,
    BurnPlan,
    BurnResult,
    FeeCollectorUpdated,
    MintPlan,
    MintResult,
    SystemInfo,
)
from reserve_engine.models.types import U64, Address


class InitializeRequest(BaseModel):
    fee_collector: Address


class MintRequest(BaseModel):
    """Deposit ``amount`` base-asset units from the caller's wallet."""

    amount: U64


class BurnRequest(BaseModel):
    """Burn ``token_amount`` tokens from the caller's wallet."""

    token_amount: U64


class AdminRequest(BaseModel):
    new_address: Address = Field(description="New fee collector or authority.")


class FundRequest(BaseModel):
    amount: U64 = Field(gt=0)


class MintResponse(BaseModel):
    sui_amount: int
    tokens_minted: int
    backing_added: int
    fee_collected: int
    new_price: int

    @classmethod
    def from_result(cls, result: MintResult) -> MintResponse:
        return cls(
            sui_amount=result.sui_amount,
            tokens_minted=result.tokens_minted,
            backing_added=result.backing_added,
            fee_collected=result.fee_collected,
            new_price=result.new_price,
        )


class BurnResponse(BaseModel):
    tokens_burned: int
    sui_returned: int
    fee_collected: int
    new_price: int

    @classmethod
    def from_result(cls, result: BurnResult) -> BurnResponse:
        return cls(
            tokens_burned=result.tokens_burned,
            sui_returned=result.sui_returned,
            fee_collected=result.fee_collected,
            new_price=result.new_price,
        )


class MintQuoteResponse(BaseModel):
    """Preview of a mint against the state at quote time."""

    amount: int
    tokens_out: int
    fee_to_collector: int
    fee_to_backing: int
    new_price: int
    bootstrap: bool

    @classmethod
    def from_plan(cls, plan: MintPlan) -> MintQuoteResponse:
        return cls(
            amount=plan.amount,
            tokens_out=plan.tokens_minted,
            fee_to_collector=plan.fee_to_collector,
            fee_to_backing=plan.fee_to_backing,
            new_price=plan.new_price,
            bootstrap=plan.bootstrap,
        )


class BurnQuoteResponse(BaseModel):
    """Preview of a burn against the state at quote time."""

    token_amount: int
    gross_payout: int
    user_amount: int
    fee_to_collector: int
    fee_stays_in_backing: int
    new_price: int

    @classmethod
    def from_plan(cls, plan: BurnPlan) -> BurnQuoteResponse:
        return cls(
            token_amount=plan.token_amount,
            gross_payout=plan.gross_payout,
            user_amount=plan.user_amount,
            fee_to_collector=plan.fee_to_collector,
            fee_stays_in_backing=plan.fee_stays_in_backing,
            new_price=plan.new_price,
        )


class AddressChangeResponse(BaseModel):
    previous: str
    new: str

    @classmethod
    def from_event(cls, event: FeeCollectorUpdated | AuthorityTransferred) -> AddressChangeResponse:
        return cls(previous=event.previous, new=event.new)


class SystemInfoResponse(BaseModel):
    total_supply: int
    total_backing: int
    current_price: int
    last_price: int
    fee_collector: str
    total_fees_collected: int
    authority: str

    @classmethod
    def from_info(cls, info: SystemInfo) -> SystemInfoResponse:
        return cls(
            total_supply=info.total_supply,
            total_backing=info.total_backing,
            current_price=info.current_price,
            last_price=info.last_price,
            fee_collector=info.fee_collector,
            total_fees_collected=info.total_fees_collected,
            authority=info.authority,
        )


class PriceResponse(BaseModel):
    current_price: int
    last_price: int
    price_scale: int


class WalletResponse(BaseModel):
    address: str
    base: int
    token: int


class ErrorResponse(BaseModel):
    error: str
    code: int | None = None
    detail: str
