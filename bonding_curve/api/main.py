"""FastAPI application for the bonding curve quoting service.

Note: The service is stateless. Every request carries the config parameters
and, optionally, a pool snapshot; nothing is persisted between requests.
"""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bonding_curve.api.endpoints import router
from bonding_curve.errors import ArithmeticFault, ConfigError, InternalError, TradeError
from bonding_curve.logging import configure_logging

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("CURVE_HOST", "0.0.0.0")
PORT = int(os.environ.get("CURVE_PORT", "8000"))
DEBUG = os.environ.get("CURVE_DEBUG", "false").lower() in ("true", "1", "yes")
LOG_LEVEL = os.environ.get("CURVE_LOG_LEVEL", "INFO")

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

configure_logging(LOG_LEVEL)

logger = structlog.get_logger()

app = FastAPI(
    title="Bonding Curve Quoter",
    description="Off-chain quotes and config derivation for a piecewise-liquidity bonding curve",
    version="0.1.0",
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"detail": str(exc), "error": type(exc).__name__}
    )


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    logger.warning(
        "config_rejected", path=request.url.path, error=type(exc).__name__, detail=str(exc)
    )
    return _error_response(400, exc)


@app.exception_handler(TradeError)
async def trade_error_handler(request: Request, exc: TradeError) -> JSONResponse:
    logger.info("trade_rejected", path=request.url.path, error=type(exc).__name__, detail=str(exc))
    return _error_response(400, exc)


@app.exception_handler(ArithmeticFault)
async def arithmetic_fault_handler(request: Request, exc: ArithmeticFault) -> JSONResponse:
    logger.warning(
        "arithmetic_fault", path=request.url.path, error=type(exc).__name__, detail=str(exc)
    )
    return _error_response(422, exc)


@app.exception_handler(InternalError)
async def internal_error_handler(request: Request, exc: InternalError) -> JSONResponse:
    logger.exception(
        "internal_error", path=request.url.path, error=type(exc).__name__, exc_info=exc
    )
    return _error_response(500, exc)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the quoting API server.

    Configuration via environment variables:
    - CURVE_HOST: Host to bind to (default: 0.0.0.0)
    - CURVE_PORT: Port to bind to (default: 8000)
    - CURVE_DEBUG: Enable debug/reload mode (default: false)
    - CURVE_LOG_LEVEL: Log level (default: INFO)
    """
    uvicorn.run(
        "bonding_curve.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
