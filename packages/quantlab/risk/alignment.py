"""
Time-Series Alignment Module

Reconciles per-ticker daily price histories of different lengths, start
dates and missing days onto one common calendar.

Unlike an intersection join, missing days are forward-filled from the last
real observation (volume forced to 0), so no ticker's index drifts out of
step with the others. Leading gaps are never back-filled: every series is
trimmed to the latest first-observation date across all tickers.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd
import structlog

from ..errors import InsufficientDataError, ValidationError
from .validation import normalize_ticker

logger = structlog.get_logger(__name__)

PRICE_COLUMNS = ["date", "open", "high", "low", "close", "volume"]
OHLC_COLUMNS = ["open", "high", "low", "close"]


def normalize_history(history: pd.DataFrame | Iterable[Mapping[str, Any]] | None) -> pd.DataFrame:
    """Coerce a raw history into the PricePoint schema.

    Accepts a DataFrame (yfinance style ``Date`` index and capitalized
    columns are fine) or an iterable of records. Rows with a missing, zero
    or negative close are dropped, so the aligner forward-fills those days
    from the previous real observation.

    Returns:
        DataFrame with columns date, open, high, low, close, volume; sorted
        by date with duplicate dates removed (last one wins)

    Raises:
        ValueError: If the history has no date or close column
    """
    if history is None:
        return pd.DataFrame(columns=PRICE_COLUMNS)

    if isinstance(history, pd.DataFrame):
        df = history.copy()
    else:
        df = pd.DataFrame(list(history))

    if df.empty:
        return pd.DataFrame(columns=PRICE_COLUMNS)

    df.columns = [str(c).strip().lower() for c in df.columns]
    if "date" not in df.columns:
        df = df.reset_index()
        df.columns = [str(c).strip().lower() for c in df.columns]
    if "date" not in df.columns:
        raise ValueError("Price history has no date column")
    if "close" not in df.columns:
        raise ValueError("Price history has no close column")

    df["date"] = pd.to_datetime(df["date"]).dt.date
    df = df.dropna(subset=["close"]).copy()
    df["close"] = df["close"].astype(float)

    # Prices must be strictly positive for returns to be defined
    non_positive = df["close"] <= 0
    if non_positive.any():
        logger.warning(
            "normalize_history: dropped non-positive closes",
            rows=int(non_positive.sum()),
            dates=[str(d) for d in df.loc[non_positive, "date"]],
        )
        df = df[~non_positive].copy()

    for col in ("open", "high", "low"):
        if col not in df.columns:
            df[col] = df["close"]
        else:
            df[col] = df[col].fillna(df["close"])
    if "volume" not in df.columns:
        df["volume"] = 0

    df[OHLC_COLUMNS] = df[OHLC_COLUMNS].astype(float)
    df["volume"] = df["volume"].fillna(0).astype("int64")

    df = df.sort_values("date").drop_duplicates(subset="date", keep="last")
    return df[PRICE_COLUMNS].reset_index(drop=True)


def _forward_fill(history: pd.DataFrame, calendar: List[date]) -> pd.DataFrame:
    """Reindex one history onto the calendar from its first real date.

    Filled rows copy the previous OHLC values and get volume 0.
    """
    first_date = history["date"].iloc[0]
    own_calendar = [d for d in calendar if d >= first_date]

    filled = history.set_index("date").reindex(own_calendar)
    missing = filled["close"].isna()

    filled[OHLC_COLUMNS] = filled[OHLC_COLUMNS].ffill()
    filled["volume"] = filled["volume"].where(~missing, 0).astype("int64")
    filled.index.name = "date"

    return filled.reset_index()[PRICE_COLUMNS]


def common_start_date(histories: Mapping[str, Any]) -> date | None:
    """Latest first-observation date across all non-empty histories."""
    starts = []
    for history in histories.values():
        df = normalize_history(history)
        if not df.empty:
            starts.append(df["date"].iloc[0])
    return max(starts) if starts else None


def align_histories(histories: Mapping[str, Any]) -> Dict[str, pd.DataFrame]:
    """Align raw per-ticker histories onto a common gap-free calendar.

    Steps:
    1. Union of all dates across every history, sorted ascending
    2. Per ticker, forward-fill missing dates after its first observation
    3. Common start = latest first date across tickers
    4. Trim every series to dates >= common start

    Args:
        histories: Mapping of ticker -> raw history (DataFrame or records)

    Returns:
        Dict of upper-cased ticker -> DataFrame, all with identical dates

    Raises:
        InsufficientDataError: If no ticker has data, or fewer than 2
            overlapping dates remain
        ValidationError: If two keys normalize to the same ticker
    """
    normalized: Dict[str, pd.DataFrame] = {}
    seen = set()
    for ticker, history in histories.items():
        symbol = normalize_ticker(ticker)
        if symbol in seen:
            raise ValidationError(f"Duplicate ticker after normalization: {symbol}")
        seen.add(symbol)

        df = normalize_history(history)
        if df.empty:
            logger.warning("align_histories: empty history", ticker=symbol)
            continue
        normalized[symbol] = df

    if not normalized:
        raise InsufficientDataError("No price history available for any requested ticker.")

    calendar = sorted(set().union(*(set(df["date"]) for df in normalized.values())))
    filled = {symbol: _forward_fill(df, calendar) for symbol, df in normalized.items()}

    common_start = max(df["date"].iloc[0] for df in filled.values())
    aligned = {
        symbol: df[df["date"] >= common_start].reset_index(drop=True)
        for symbol, df in filled.items()
    }

    length = aligned_length(aligned)
    if length < 2:
        raise InsufficientDataError(
            "Not enough overlapping historical data for the selected tickers to "
            "calculate returns, even after forward-filling.",
            found=length,
            required=2,
        )

    logger.info(
        "align_histories: aligned",
        num_tickers=len(aligned),
        num_dates=length,
        calendar_dates=len(calendar),
        common_start=str(common_start),
        filled_rows={
            symbol: int(len(filled[symbol]) - len(normalized[symbol]))
            for symbol in filled
        },
    )

    return aligned


def aligned_length(aligned: Mapping[str, pd.DataFrame]) -> int:
    """Common length of an aligned set (0 when empty)."""
    if not aligned:
        return 0
    return len(next(iter(aligned.values())))


def aligned_dates(aligned: Mapping[str, pd.DataFrame]) -> List[date]:
    """Shared date column of an aligned set."""
    if not aligned:
        return []
    return list(next(iter(aligned.values()))["date"])


def is_aligned(aligned: Mapping[str, pd.DataFrame]) -> bool:
    """True if every series has the same length and the same dates."""
    reference = aligned_dates(aligned)
    return all(list(df["date"]) == reference for df in aligned.values())


def trim_to_lookback(
    aligned: Mapping[str, pd.DataFrame],
    lookback: int,
) -> Dict[str, pd.DataFrame]:
    """Keep the last `lookback` rows of every aligned series.

    Raises:
        InsufficientDataError: If fewer than `lookback` aligned rows exist
    """
    length = aligned_length(aligned)
    if length < lookback:
        raise InsufficientDataError(
            "Not enough overlapping data for the requested lookback period. "
            f"Found {length} overlapping days, but need {lookback}. "
            "Try a smaller lookback period or different tickers.",
            found=length,
            required=lookback,
        )

    return {
        symbol: df.iloc[-lookback:].reset_index(drop=True)
        for symbol, df in aligned.items()
    }


def closes_frame(aligned: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    """Date-indexed close price matrix, one column per ticker."""
    index = pd.Index(aligned_dates(aligned), name="date")
    return pd.DataFrame(
        {symbol: df["close"].to_numpy() for symbol, df in aligned.items()},
        index=index,
    )
