"""FastAPI application for the reserve engine."""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reserve_engine import __version__
from reserve_engine.api.endpoints import router
from reserve_engine.api.schemas import ErrorResponse
from reserve_engine.errors import (
    AlreadyInitialized,
    ArithmeticFault,
    NotAuthorized,
    ReserveError,
)
from reserve_engine.ledger import LedgerError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("RESERVE_HOST", "0.0.0.0")
PORT = int(os.environ.get("RESERVE_PORT", "8000"))
DEBUG = os.environ.get("RESERVE_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="BTB Reserve Engine",
    description="Reserve-backed bonding-curve token engine",
    version=__version__,
)


def _status_for(error: ReserveError) -> int:
    if isinstance(error, NotAuthorized):
        return 403
    if isinstance(error, AlreadyInitialized):
        return 409
    if isinstance(error, ArithmeticFault):
        return 422
    return 400


@app.exception_handler(ReserveError)
async def reserve_error_handler(request: Request, exc: ReserveError) -> JSONResponse:
    """Report an aborted operation with its stable error code."""
    return JSONResponse(
        status_code=_status_for(exc),
        content=ErrorResponse(error=exc.name, code=exc.code, detail=str(exc)).model_dump(),
    )


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    logger.warning("ledger_error", path=request.url.path, detail=str(exc))
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="LedgerError", detail=str(exc)).model_dump(),
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the reserve API server.

    Configuration via environment variables:
    - RESERVE_HOST: Host to bind to (default: 0.0.0.0)
    - RESERVE_PORT: Port to bind to (default: 8000)
    - RESERVE_DEBUG: Enable debug/reload mode (default: false)
    - RESERVE_API_KEYS: Comma-separated key=address pairs for callers
    - RESERVE_ALLOW_FUNDING: Enable wallet funding (default: false)
    """
    uvicorn.run(
        "reserve_engine.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
