"""FastAPI application for the Equity Risk Lab API.

Exposes the portfolio VaR / ES calculator and the volatility lab over REST.
Each request fetches fresh market data, computes, and returns; nothing is
cached or persisted between requests.
"""

from __future__ import annotations

import logging

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quantlab.errors import (
    InsufficientDataError,
    MarketDataError,
    PartialFetchFailure,
    QuantLabError,
    ValidationError,
)

from lab_api.config import get_settings
from lab_api.routers import market_data, risk, volatility

logger = structlog.get_logger()

# ---------------------------------------------------------------------------
# Error type -> HTTP status
# ---------------------------------------------------------------------------

_ERROR_STATUS: dict[type[QuantLabError], int] = {
    ValidationError: 400,
    InsufficientDataError: 422,
    PartialFetchFailure: 502,
    MarketDataError: 502,
}


def _configure_structlog(level: str) -> None:
    """Set up structlog with human-readable console output."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def status_for_error(exc: QuantLabError) -> int:
    for error_cls, status in _ERROR_STATUS.items():
        if isinstance(exc, error_cls):
            return status
    return 500


settings = get_settings()
_configure_structlog(settings.LOG_LEVEL)

app = FastAPI(title="Equity Risk Lab API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(risk.router)
app.include_router(volatility.router)
app.include_router(market_data.router)


@app.exception_handler(QuantLabError)
async def quantlab_error_handler(request: Request, exc: QuantLabError) -> JSONResponse:
    """Translate typed calculation failures into JSON error responses."""
    status = status_for_error(exc)
    logger.warning(
        "request_failed",
        path=request.url.path,
        error_type=exc.error_type,
        status=status,
        detail=str(exc),
    )
    return JSONResponse(status_code=status, content=exc.to_dict())


# ---------------------------------------------------------------------------
# REST endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness / readiness probe."""
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run("lab_api.main:app", host=settings.API_HOST, port=settings.API_PORT)
