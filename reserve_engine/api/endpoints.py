"""API endpoints for the reserve engine.

Handlers are ``async`` and never await, so each one runs to completion
on the event loop; no two operations against the engine interleave.
"""

import os
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Security
from fastapi.security import APIKeyHeader

from reserve_engine.api.schemas import (
    AddressChangeResponse,
    AdminRequest,
    BurnQuoteResponse,
    BurnRequest,
    BurnResponse,
    ErrorResponse,
    FundRequest,
    InitializeRequest,
    MintQuoteResponse,
    MintRequest,
    MintResponse,
    PriceResponse,
    SystemInfoResponse,
    WalletResponse,
)
from reserve_engine.config import EngineConfig
from reserve_engine.engine import ReserveEngine
from reserve_engine.ledger import Asset, InMemoryLedger
from reserve_engine.models.state import TxContext
from reserve_engine.models.types import normalize_address
from reserve_engine.safe_int import U64_MAX

logger = structlog.get_logger()

def env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


# Whether POST /wallets/{address}/fund may mint base asset from nothing
ALLOW_FUNDING = env_flag("RESERVE_ALLOW_FUNDING")

# Deployer / initial authority of the default engine
DEFAULT_AUTHORITY = os.environ.get("RESERVE_AUTHORITY", "0x1")

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Operation aborted by the engine or ledger"},
    403: {"model": ErrorResponse, "description": "Caller is not the authority"},
    409: {"model": ErrorResponse, "description": "Fee collector already set"},
}

router = APIRouter(responses=ERROR_RESPONSES)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def parse_api_keys(raw: str) -> dict[str, str]:
    """Parse ``key=address`` pairs separated by commas.

    Raises:
        ValueError: If an entry has no ``=`` or an empty key
        InvalidAddress: If an address is malformed
    """
    keys: dict[str, str] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        key, sep, address = entry.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Malformed RESERVE_API_KEYS entry: {entry!r}")
        keys[key.strip()] = normalize_address(address.strip())
    return keys


# API key -> caller address. Requests without a known key cannot change state.
API_KEYS = parse_api_keys(os.environ.get("RESERVE_API_KEYS", ""))


def get_api_keys() -> dict[str, str]:
    """Dependency provider for the key table; override in tests."""
    return API_KEYS


def get_caller(
    api_key: str | None = Security(api_key_header),
    api_keys: dict[str, str] = Depends(get_api_keys),
) -> TxContext:
    """Resolve the ``X-API-Key`` header to the calling address.

    Every state-changing route takes its TxContext from here, never from
    the request body.
    """
    if api_key is None:
        raise HTTPException(status_code=401, detail="Missing API key")
    address = api_keys.get(api_key)
    if address is None:
        logger.warning("api_key_rejected")
        raise HTTPException(status_code=401, detail="Invalid API key")
    return TxContext(address)


def _create_default_engine() -> ReserveEngine:
    """Deploy an engine on a fresh in-memory ledger using RESERVE_* settings."""
    ledger = InMemoryLedger()
    return ReserveEngine.deploy(ledger, DEFAULT_AUTHORITY, config=EngineConfig.from_env())


_default_engine: ReserveEngine | None = None


def get_engine() -> ReserveEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject a prepared engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    global _default_engine
    if _default_engine is None:
        _default_engine = _create_default_engine()
    return _default_engine


def _wallet_ledger(engine: ReserveEngine) -> InMemoryLedger:
    if not isinstance(engine.ledger, InMemoryLedger):
        raise HTTPException(status_code=501, detail="Ledger does not expose wallets")
    return engine.ledger


@router.get("/info")
async def info(engine: ReserveEngine = Depends(get_engine)) -> SystemInfoResponse:
    """Point-in-time snapshot of supply, backing, price, fees and roles."""
    return SystemInfoResponse.from_info(engine.system_info())


@router.get("/price")
async def price(engine: ReserveEngine = Depends(get_engine)) -> PriceResponse:
    return PriceResponse(
        current_price=engine.current_price(),
        last_price=engine.last_price(),
        price_scale=engine.config.price_scale,
    )


@router.get("/quote/mint")
async def quote_mint(
    amount: int = Query(..., ge=0, le=U64_MAX),
    engine: ReserveEngine = Depends(get_engine),
) -> MintQuoteResponse:
    return MintQuoteResponse.from_plan(engine.quote_mint(amount))


@router.get("/quote/burn")
async def quote_burn(
    token_amount: int = Query(..., ge=0, le=U64_MAX),
    engine: ReserveEngine = Depends(get_engine),
) -> BurnQuoteResponse:
    return BurnQuoteResponse.from_plan(engine.quote_burn(token_amount))


@router.post("/initialize")
async def initialize(
    request: InitializeRequest,
    caller: TxContext = Depends(get_caller),
    engine: ReserveEngine = Depends(get_engine),
) -> AddressChangeResponse:
    event = engine.initialize(caller, request.fee_collector)
    return AddressChangeResponse.from_event(event)


@router.post("/mint")
async def mint(
    request: MintRequest,
    caller: TxContext = Depends(get_caller),
    engine: ReserveEngine = Depends(get_engine),
) -> MintResponse:
    """Withdraw ``amount`` from the caller's wallet and mint against it.

    The withdrawal shares the engine's ledger transaction, so a rejected
    mint leaves the wallet untouched.
    """
    ledger = _wallet_ledger(engine)
    with ledger.transaction():
        payment = ledger.withdraw(caller.sender, Asset.BASE, request.amount)
        result = engine.mint(caller, payment)
    return MintResponse.from_result(result)


@router.post("/burn")
async def burn(
    request: BurnRequest,
    caller: TxContext = Depends(get_caller),
    engine: ReserveEngine = Depends(get_engine),
) -> BurnResponse:
    ledger = _wallet_ledger(engine)
    with ledger.transaction():
        tokens = ledger.withdraw(caller.sender, Asset.TOKEN, request.token_amount)
        result = engine.burn(caller, tokens)
    return BurnResponse.from_result(result)


@router.post("/admin/fee-collector")
async def set_fee_collector(
    request: AdminRequest,
    caller: TxContext = Depends(get_caller),
    engine: ReserveEngine = Depends(get_engine),
) -> AddressChangeResponse:
    event = engine.set_fee_collector(caller, request.new_address)
    return AddressChangeResponse.from_event(event)


@router.post("/admin/authority")
async def transfer_authority(
    request: AdminRequest,
    caller: TxContext = Depends(get_caller),
    engine: ReserveEngine = Depends(get_engine),
) -> AddressChangeResponse:
    event = engine.transfer_authority(caller, request.new_address)
    return AddressChangeResponse.from_event(event)


@router.get("/wallets/{address}")
async def wallet(
    address: str,
    engine: ReserveEngine = Depends(get_engine),
) -> WalletResponse:
    address = normalize_address(address)
    ledger = _wallet_ledger(engine)
    return WalletResponse(
        address=address,
        base=ledger.balance_of(address, Asset.BASE),
        token=ledger.balance_of(address, Asset.TOKEN),
    )


@router.post("/wallets/{address}/fund")
async def fund_wallet(
    address: str,
    request: FundRequest,
    engine: ReserveEngine = Depends(get_engine),
) -> WalletResponse:
    """Credit base asset to a wallet (local and test deployments only)."""
    if not ALLOW_FUNDING:
        raise HTTPException(status_code=403, detail="Wallet funding is disabled")
    address = normalize_address(address)
    ledger = _wallet_ledger(engine)
    ledger.fund(address, request.amount)
    logger.info("wallet_funded_via_api", address=address[-8:], amount=request.amount)
    return WalletResponse(
        address=address,
        base=ledger.balance_of(address, Asset.BASE),
        token=ledger.balance_of(address, Asset.TOKEN),
    )
