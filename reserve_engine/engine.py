"""Reserve engine: bonding-curve mint and burn against a base-asset reserve.

Price is backing per token, fixed-point scaled:

    price = backing_balance * price_scale // total_supply

Every operation runs in three stages: build a plan from a snapshot of the
pre-state, validate it (the price check last, against the planned
post-state), then commit the ledger effects inside one ledger
transaction and write the engine state. Nothing is mutated until the
plan has passed validation.
"""

from __future__ import annotations

import structlog

from reserve_engine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from reserve_engine.errors import (
    AlreadyInitialized,
    InsufficientAmount,
    InsufficientBacking,
    InsufficientOutput,
    InvalidAddress,
    InvalidAmount,
    NotAuthorized,
    NotInitialized,
    PriceViolation,
    ReserveError,
)
from reserve_engine.fees import DefaultFeeCalculator, FeeCalculator
from reserve_engine.ledger.base import Asset, Coin, Ledger, LedgerError
from reserve_engine.models.results import (
    AuthorityTransferred,
    BurnPlan,
    BurnResult,
    FeeCollectorUpdated,
    MintPlan,
    MintResult,
    SystemInfo,
)
from reserve_engine.models.state import ReserveState, TxContext
from reserve_engine.models.types import NULL_ADDRESS, normalize_address
from reserve_engine.safe_int import S, mul_div_u64

logger = structlog.get_logger()


class ReserveEngine:
    """Owns one ReserveState and funnels every mutation through its operations.

    Args:
        ledger: Hosting runtime providing custody and token accounting
        state: The reserve record; its treasury cap must come from ``ledger``
        config: Curve parameters. Uses DEFAULT_ENGINE_CONFIG if not provided.
        fee_calculator: Fee splitter. Uses DefaultFeeCalculator(config) if not provided.
    """

    def __init__(
        self,
        ledger: Ledger,
        state: ReserveState,
        config: EngineConfig | None = None,
        fee_calculator: FeeCalculator | None = None,
    ) -> None:
        self.ledger = ledger
        self.config = config or DEFAULT_ENGINE_CONFIG
        self.fees = fee_calculator or DefaultFeeCalculator(self.config)
        self._state = state

    @property
    def state(self) -> ReserveState:
        """The reserve record. Mutate only through engine operations."""
        return self._state

    @classmethod
    def deploy(
        cls,
        ledger: Ledger,
        authority: str,
        config: EngineConfig | None = None,
        fee_calculator: FeeCalculator | None = None,
    ) -> ReserveEngine:
        """Create the token currency and a fresh, uninitialized reserve.

        Raises:
            InvalidAddress: If authority is malformed or the null sentinel
            LedgerError: If the ledger already issued its treasury cap
        """
        config = config or DEFAULT_ENGINE_CONFIG
        authority = normalize_address(authority)
        if authority == NULL_ADDRESS:
            raise InvalidAddress("Authority cannot be the null address")

        state = ReserveState(
            treasury=ledger.create_currency(),
            authority=authority,
            last_price=config.initial_price,
        )
        logger.info(
            "reserve_deployed",
            authority=authority[-8:],
            initial_price=config.initial_price,
            initial_mint_rate=config.initial_mint_rate,
        )
        return cls(ledger, state, config=config, fee_calculator=fee_calculator)

    # --- Configuration ---

    def initialize(self, ctx: TxContext, fee_collector: str) -> FeeCollectorUpdated:
        """One-time assignment of the fee collector.

        Raises:
            AlreadyInitialized: If a collector is already set
            InvalidAddress: If fee_collector is the null sentinel
        """
        if self._state.is_initialized:
            raise self._reject(
                "initialize",
                AlreadyInitialized(f"Fee collector already set to {self._state.fee_collector}"),
            )
        new_collector = self._require_address("initialize", fee_collector)

        self._state.fee_collector = new_collector
        logger.info(
            "reserve_initialized",
            sender=ctx.sender[-8:],
            fee_collector=new_collector[-8:],
        )
        return FeeCollectorUpdated(previous=NULL_ADDRESS, new=new_collector)

    # --- Mint ---

    def quote_mint(self, amount: int) -> MintPlan:
        """Run every mint check against the current state without committing."""
        return self._plan_mint(amount)

    def mint(self, ctx: TxContext, payment: Coin) -> MintResult:
        """Deposit a base-asset coin and receive tokens at the curve price.

        The whole payment enters the reserve vault; the collector fee is
        paid back out of it, and the tokens go to ``ctx.sender``.

        Raises:
            NotInitialized: If no fee collector is configured
            InsufficientAmount: If payment is below min_trade
            InsufficientBacking: If supply is nonzero but backing is zero
            InsufficientOutput: If the deposit buys zero tokens
            PriceViolation: If the post-mint price would drop
            Overflow: If any u64 quantity would overflow
            LedgerError: If the coin is spent, foreign, or not base asset
        """
        self._require_initialized("mint")
        self._check_coin(ctx, payment, Asset.BASE)
        plan = self._plan_mint(payment.value)

        with self.ledger.transaction():
            self.ledger.deposit_base_asset(payment)
            self.ledger.mint_token(self._state.treasury, plan.tokens_minted, ctx.sender)
            if plan.fee_to_collector:
                self.ledger.transfer_base_asset(plan.fee_to_collector, self._state.fee_collector)

        self._state.backing_balance = plan.new_backing
        self._state.total_fees_collected = plan.new_fees_total
        self._state.last_price = plan.new_price

        result = MintResult(
            sui_amount=plan.amount,
            tokens_minted=plan.tokens_minted,
            backing_added=plan.backing_added,
            fee_collected=plan.fee_to_collector,
            new_price=plan.new_price,
        )
        logger.info(
            "mint_completed",
            sender=ctx.sender[-8:],
            sui_amount=result.sui_amount,
            tokens_minted=result.tokens_minted,
            backing_added=result.backing_added,
            fee_collected=result.fee_collected,
            new_price=result.new_price,
            bootstrap=plan.bootstrap,
        )
        return result

    def _plan_mint(self, amount: int) -> MintPlan:
        if amount < self.config.min_trade:
            raise self._reject(
                "mint",
                InsufficientAmount(f"Deposit {amount} below minimum {self.config.min_trade}"),
            )

        current_supply = self.ledger.current_total_supply(self._state.treasury)
        current_backing = self._state.backing_balance
        split = self.fees.split(amount)

        if current_supply == 0:
            # Bootstrap: fixed rate, no ratio
            tokens = S(split.net).mul_wide(self.config.initial_mint_rate).to_u64()
        else:
            if current_backing == 0:
                raise self._reject(
                    "mint", InsufficientBacking(f"Supply {current_supply} has zero backing")
                )
            tokens = mul_div_u64(split.net, current_supply, current_backing)

        if tokens == 0:
            raise self._reject(
                "mint",
                InsufficientOutput(f"Deposit {amount} buys zero tokens at current price"),
            )

        backing_added = S(split.net) + split.to_backing
        new_backing = (S(current_backing) + backing_added).to_u64()
        new_supply = (S(current_supply) + tokens).to_u64()
        new_fees_total = (S(self._state.total_fees_collected) + split.to_collector).to_u64()
        new_price = self._price_of(new_backing, new_supply)

        bootstrap = current_supply == 0
        if not bootstrap:
            self._check_price("mint", new_price)

        return MintPlan(
            amount=amount,
            tokens_minted=tokens,
            fee_to_collector=split.to_collector,
            fee_to_backing=split.to_backing,
            net_for_tokens=split.net,
            new_backing=new_backing,
            new_supply=new_supply,
            new_price=new_price,
            new_fees_total=new_fees_total,
            bootstrap=bootstrap,
        )

    # --- Burn ---

    def quote_burn(self, token_amount: int) -> BurnPlan:
        """Run every burn check against the current state without committing."""
        return self._plan_burn(token_amount)

    def burn(self, ctx: TxContext, tokens: Coin) -> BurnResult:
        """Burn a token coin and receive a proportional share of the reserve.

        The backing-side fee leg is never paid out, so it stays in the
        reserve and raises the price for remaining holders.

        Raises:
            NotInitialized: If no fee collector is configured
            InvalidAmount: If the coin is worth zero or exceeds supply
            InsufficientBacking: If supply or backing is zero
            InsufficientAmount: If the gross payout is below min_trade
            PriceViolation: If the post-burn price would drop (nonzero supply only)
            LedgerError: If the coin is spent, foreign, or not the token
        """
        self._require_initialized("burn")
        self._check_coin(ctx, tokens, Asset.TOKEN)
        plan = self._plan_burn(tokens.value)

        with self.ledger.transaction():
            self.ledger.burn_token(self._state.treasury, tokens)
            self.ledger.transfer_base_asset(plan.user_amount, ctx.sender)
            if plan.fee_to_collector:
                self.ledger.transfer_base_asset(plan.fee_to_collector, self._state.fee_collector)

        self._state.backing_balance = plan.new_backing
        self._state.total_fees_collected = plan.new_fees_total
        self._state.last_price = plan.new_price

        result = BurnResult(
            tokens_burned=plan.token_amount,
            sui_returned=plan.user_amount,
            fee_collected=plan.fee_to_collector,
            new_price=plan.new_price,
        )
        logger.info(
            "burn_completed",
            sender=ctx.sender[-8:],
            tokens_burned=result.tokens_burned,
            sui_returned=result.sui_returned,
            fee_collected=result.fee_collected,
            new_price=result.new_price,
            emptied_pool=plan.empties_pool,
        )
        return result

    def _plan_burn(self, token_amount: int) -> BurnPlan:
        if token_amount == 0:
            raise self._reject("burn", InvalidAmount("Cannot burn zero tokens"))

        current_supply = self.ledger.current_total_supply(self._state.treasury)
        current_backing = self._state.backing_balance
        if current_supply == 0 or current_backing == 0:
            raise self._reject(
                "burn",
                InsufficientBacking(
                    f"Cannot burn against supply {current_supply}, backing {current_backing}"
                ),
            )
        if token_amount > current_supply:
            raise self._reject(
                "burn",
                InvalidAmount(f"Burn of {token_amount} exceeds supply {current_supply}"),
            )

        gross = mul_div_u64(token_amount, current_backing, current_supply)
        if gross < self.config.min_trade:
            raise self._reject(
                "burn",
                InsufficientAmount(f"Payout {gross} below minimum {self.config.min_trade}"),
            )

        split = self.fees.split(gross)
        # Only the user and collector legs leave the reserve
        new_backing = (S(current_backing) - split.net - split.to_collector).value
        new_supply = (S(current_supply) - token_amount).value
        new_fees_total = (S(self._state.total_fees_collected) + split.to_collector).to_u64()
        new_price = self._price_of(new_backing, new_supply)

        if new_supply > 0:
            self._check_price("burn", new_price)

        return BurnPlan(
            token_amount=token_amount,
            gross_payout=gross,
            user_amount=split.net,
            fee_to_collector=split.to_collector,
            fee_stays_in_backing=split.to_backing,
            new_backing=new_backing,
            new_supply=new_supply,
            new_price=new_price,
            new_fees_total=new_fees_total,
        )

    # --- Admin ---

    def set_fee_collector(self, ctx: TxContext, new_collector: str) -> FeeCollectorUpdated:
        """Replace the fee collector. Authority only.

        Raises:
            NotAuthorized: If ctx.sender is not the authority
            InvalidAddress: If new_collector is the null sentinel
        """
        self._require_authority(ctx, "set_fee_collector")
        new_collector = self._require_address("set_fee_collector", new_collector)

        event = FeeCollectorUpdated(previous=self._state.fee_collector, new=new_collector)
        self._state.fee_collector = new_collector
        logger.info(
            "fee_collector_updated",
            sender=ctx.sender[-8:],
            previous=event.previous[-8:],
            new=event.new[-8:],
        )
        return event

    def transfer_authority(self, ctx: TxContext, new_authority: str) -> AuthorityTransferred:
        """Hand admin rights to another address. Authority only.

        Raises:
            NotAuthorized: If ctx.sender is not the authority
            InvalidAddress: If new_authority is the null sentinel
        """
        self._require_authority(ctx, "transfer_authority")
        new_authority = self._require_address("transfer_authority", new_authority)

        event = AuthorityTransferred(previous=self._state.authority, new=new_authority)
        self._state.authority = new_authority
        logger.info(
            "authority_transferred",
            previous=event.previous[-8:],
            new=event.new[-8:],
        )
        return event

    # --- Queries ---

    def total_supply(self) -> int:
        return self.ledger.current_total_supply(self._state.treasury)

    def total_backing(self) -> int:
        return self._state.backing_balance

    def current_price(self) -> int:
        """Price derived from live supply and backing; never cached."""
        return self._price_of(self._state.backing_balance, self.total_supply())

    def last_price(self) -> int:
        return self._state.last_price

    def fee_collector(self) -> str:
        return self._state.fee_collector

    def total_fees_collected(self) -> int:
        return self._state.total_fees_collected

    def authority(self) -> str:
        return self._state.authority

    def system_info(self) -> SystemInfo:
        supply = self.total_supply()
        return SystemInfo(
            total_supply=supply,
            total_backing=self._state.backing_balance,
            current_price=self._price_of(self._state.backing_balance, supply),
            last_price=self._state.last_price,
            fee_collector=self._state.fee_collector,
            total_fees_collected=self._state.total_fees_collected,
            authority=self._state.authority,
        )

    # --- Helpers ---

    def _price_of(self, backing: int, supply: int) -> int:
        if supply == 0:
            return self.config.initial_price
        return mul_div_u64(backing, self.config.price_scale, supply)

    def _check_price(self, operation: str, new_price: int) -> None:
        if new_price < self._state.last_price:
            logger.warning(
                "price_violation",
                operation=operation,
                new_price=new_price,
                last_price=self._state.last_price,
            )
            raise self._reject(
                operation,
                PriceViolation(f"Price would fall from {self._state.last_price} to {new_price}"),
            )

    def _check_coin(self, ctx: TxContext, coin: Coin, asset: Asset) -> None:
        self.ledger.ensure_spendable(coin, asset)
        if coin.owner != ctx.sender:
            raise LedgerError(f"Coin {coin.id} is not owned by {ctx.sender[-8:]}")

    def _require_initialized(self, operation: str) -> None:
        if not self._state.is_initialized:
            raise self._reject(operation, NotInitialized("Fee collector is not set"))

    def _require_authority(self, ctx: TxContext, operation: str) -> None:
        if ctx.sender != self._state.authority:
            raise self._reject(
                operation, NotAuthorized(f"{ctx.sender[-8:]} is not the authority")
            )

    def _require_address(self, operation: str, address: str) -> str:
        try:
            normalized = normalize_address(address)
        except InvalidAddress as err:
            raise self._reject(operation, err) from None
        if normalized == NULL_ADDRESS:
            raise self._reject(operation, InvalidAddress("Address cannot be the null address"))
        return normalized

    @staticmethod
    def _reject(operation: str, error: ReserveError) -> ReserveError:
        logger.warning(
            f"{operation}_rejected",
            error=error.name,
            code=error.code,
            detail=str(error),
        )
        return error
