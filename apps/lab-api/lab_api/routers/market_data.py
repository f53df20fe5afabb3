"""Market-data helper endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from quantlab.data.yahoo import PERIOD_CATALOG, period_for_lookback

router = APIRouter(prefix="/market-data", tags=["market-data"])


@router.get("/period")
async def history_period(
    lookback: int = Query(..., ge=1, description="Lookback window in trading days"),
) -> dict[str, object]:
    """Return the history period fetched for a given lookback."""
    return {
        "lookback": lookback,
        "period": period_for_lookback(lookback),
        "catalog": list(PERIOD_CATALOG),
    }
