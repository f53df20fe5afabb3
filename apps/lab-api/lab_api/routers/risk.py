"""Portfolio risk API endpoints.

Historical-simulation VaR and Expected Shortfall for a weighted basket of
tickers.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from quantlab.errors import QuantLabError
from quantlab.export import risk_result_frame, to_csv

from lab_api.config import get_settings
from lab_api.services.lab_service import compute_var

logger = structlog.get_logger()

router = APIRouter(prefix="/risk", tags=["risk"])


class VarRequest(BaseModel):
    """Body for POST /risk/var. Omitted parameters take the configured defaults."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tickers: str | list[str]
    weights: str | list[float]
    portfolio_value: float | None = None
    lookback: int | None = None
    horizon: int | None = None
    confidence: int | None = None


@router.post("/var", response_model=None)
async def value_at_risk(
    body: VarRequest,
    format: str = Query(default="json", pattern="^(json|csv)$", description="Response format"),
) -> Response:
    """Return VaR / ES for the requested portfolio."""
    settings = get_settings()
    params = {
        "portfolio_value": body.portfolio_value if body.portfolio_value is not None else settings.DEFAULT_PORTFOLIO_VALUE,
        "lookback": body.lookback if body.lookback is not None else settings.DEFAULT_LOOKBACK,
        "horizon": body.horizon if body.horizon is not None else settings.DEFAULT_HORIZON,
        "confidence": body.confidence if body.confidence is not None else settings.DEFAULT_CONFIDENCE,
    }

    try:
        result = await compute_var(body.tickers, body.weights, **params)
    except QuantLabError:
        raise
    except Exception as e:
        logger.exception("var_request_failed", **params)
        raise HTTPException(
            status_code=500,
            detail=f"Risk computation failed: {str(e)}",
        )

    if format == "csv":
        return Response(content=to_csv(risk_result_frame(result)), media_type="text/csv")
    return JSONResponse(content=result.model_dump(by_alias=True, mode="json"))
