"""Engine configuration."""

import os
from dataclasses import dataclass

from reserve_engine.constants import (
    FEE_DIVISOR,
    INITIAL_MINT_RATE,
    INITIAL_PRICE,
    MIN_TRADE,
    PRICE_SCALE,
)
from reserve_engine.safe_int import U64_MAX


@dataclass(frozen=True)
class EngineConfig:
    """Bonding-curve parameters for one reserve engine.

    Attributes:
        price_scale: Fixed-point scale for prices (default: 1e9)
        initial_mint_rate: Tokens per base-asset unit on the bootstrap mint
        min_trade: Minimum deposit / gross burn payout in base-asset units
        fee_divisor: Each fee leg is amount // fee_divisor (default: 2000)
        initial_price: Price reported while supply is zero
    """

    price_scale: int = PRICE_SCALE
    initial_mint_rate: int = INITIAL_MINT_RATE
    min_trade: int = MIN_TRADE
    fee_divisor: int = FEE_DIVISOR
    initial_price: int = INITIAL_PRICE

    def __post_init__(self) -> None:
        for name in ("price_scale", "initial_mint_rate", "min_trade", "fee_divisor", "initial_price"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an int, got {type(value).__name__}")
            if value <= 0 or value > U64_MAX:
                raise ValueError(f"{name} must be in [1, 2^64-1], got {value}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from RESERVE_* environment variables.

        Unset variables fall back to the protocol defaults.
        """
        return cls(
            price_scale=int(os.environ.get("RESERVE_PRICE_SCALE", str(PRICE_SCALE))),
            initial_mint_rate=int(
                os.environ.get("RESERVE_INITIAL_MINT_RATE", str(INITIAL_MINT_RATE))
            ),
            min_trade=int(os.environ.get("RESERVE_MIN_TRADE", str(MIN_TRADE))),
            fee_divisor=int(os.environ.get("RESERVE_FEE_DIVISOR", str(FEE_DIVISOR))),
            initial_price=int(os.environ.get("RESERVE_INITIAL_PRICE", str(INITIAL_PRICE))),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
