"""State, result and type definitions for the reserve engine."""

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
from reserve_engine.models.types import (
    NULL_ADDRESS,
    U64,
    Address,
    is_null_address,
    is_valid_address,
    normalize_address,
)

__all__ = [
    # Types
    "Address",
    "U64",
    "NULL_ADDRESS",
    "normalize_address",
    "is_valid_address",
    "is_null_address",
    # State
    "ReserveState",
    "TxContext",
    # Results
    "MintPlan",
    "BurnPlan",
    "MintResult",
    "BurnResult",
    "FeeCollectorUpdated",
    "AuthorityTransferred",
    "SystemInfo",
]
