"""Volatility lab API endpoints.

Rolling realized or EWMA volatility per ticker, short-term correlation
matrix, and the volatility regime timeline of the first ticker.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from quantlab.errors import QuantLabError
from quantlab.export import correlation_frame, regime_frame, to_csv, volatility_frame

from lab_api.config import get_settings
from lab_api.services.lab_service import compute_volatility

logger = structlog.get_logger()

router = APIRouter(prefix="/volatility", tags=["volatility"])


class VolatilityRequest(BaseModel):
    """Body for POST /volatility/lab."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tickers: str | list[str]
    lookback: int | None = None
    window: int | None = None
    model: str = "realized"


@router.post("/lab", response_model=None)
async def volatility_lab(
    body: VolatilityRequest,
    format: str = Query(default="json", pattern="^(json|csv)$", description="Response format"),
    table: str = Query(
        default="volatility",
        pattern="^(volatility|regimes|correlation)$",
        description="Which table to export when format=csv",
    ),
) -> Response:
    """Return volatility series, correlation matrix and regimes."""
    settings = get_settings()
    lookback = body.lookback if body.lookback is not None else settings.DEFAULT_LOOKBACK
    window = body.window if body.window is not None else settings.DEFAULT_WINDOW

    try:
        result = await compute_volatility(body.tickers, lookback=lookback, window=window, model=body.model)
    except QuantLabError:
        raise
    except Exception as e:
        logger.exception("volatility_request_failed", lookback=lookback, window=window, model=body.model)
        raise HTTPException(
            status_code=500,
            detail=f"Volatility computation failed: {str(e)}",
        )

    if format == "csv":
        if table == "regimes":
            csv_text = to_csv(regime_frame(result))
        elif table == "correlation":
            csv_text = to_csv(correlation_frame(result), index=True)
        else:
            csv_text = to_csv(volatility_frame(result))
        return Response(content=csv_text, media_type="text/csv")

    return JSONResponse(content=result.model_dump(by_alias=True, mode="json"))
