import datetime as dt
import logging

import pandas as pd

try:
    import yfinance as yf
except Exception:  # pragma: no cover - network / optional
    yf = None

from .errors import ProviderError
from .models import ChartPoint, ChartRequest, ChartSeries, round_price

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> dt.date:
    """Parse a YYYY-MM-DD flag value into a date."""
    try:
        return dt.datetime.strptime(value.strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValueError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def fetch_history(request: ChartRequest) -> pd.DataFrame:
    """Download the bars for a chart request using yfinance.

    yfinance treats `end` as exclusive, so one day is added to keep the
    requested end date in the frame. Prices are requested unadjusted so the
    frame carries an explicit 'Adj Close' column.

    Returns the provider frame indexed by bar date, possibly empty.
    """
    if yf is None:
        raise ProviderError("yfinance is not available in this environment")

    end = request.end + dt.timedelta(days=1)
    logger.debug("downloading %s %s..%s interval=%s", request.symbol, request.start, request.end,
                 request.interval.value)
    try:
        df = yf.download(request.symbol, start=request.start.isoformat(), end=end.isoformat(),
                         interval=request.interval.value, auto_adjust=False, progress=False)
    except Exception as exc:
        raise ProviderError(f"failed to fetch history for {request.symbol}: {exc}") from exc

    if df is None:
        return pd.DataFrame()
    if not isinstance(df, pd.DataFrame):
        raise ProviderError(f"unexpected response for {request.symbol}: {type(df).__name__}")

    # single ticker downloads come back with (Price, Ticker) column levels,
    # keep only the price names (Open/High/Low/Close/Adj Close/Volume)
    if df.columns.nlevels > 1:
        tickers = list(df.columns.get_level_values(-1).unique())
        if len(tickers) > 1:
            raise ProviderError(f"expected one ticker for {request.symbol!r}, got {', '.join(map(str, tickers))}")
        df = df.copy()
        df.columns = df.columns.get_level_values(0)
    if df.columns.duplicated().any():
        raise ProviderError(f"expected one ticker for {request.symbol!r}, got duplicate price columns")

    return df


def _price_column(df: pd.DataFrame) -> str:
    if "Adj Close" in df.columns:
        return "Adj Close"
    if "Close" in df.columns:
        # provider already adjusted the closes (auto_adjust)
        return "Close"
    raise ProviderError(f"no close prices in provider response (columns: {list(df.columns)})")


def bars_to_series(df: pd.DataFrame) -> ChartSeries:
    """Turn a provider frame into chart points, keeping the provider's row order."""
    if df.empty:
        return ChartSeries()

    column = _price_column(df)
    points = []
    for ts, value in df[column].items():
        if pd.isna(value):
            continue
        points.append(ChartPoint(date=pd.Timestamp(ts).date(), close=round_price(value)))
    return ChartSeries(points)


def fetch(request: ChartRequest) -> ChartSeries:
    """Fetch the chart series for a request. Provider failures raise ProviderError."""
    series = bars_to_series(fetch_history(request))
    logger.info("fetched %d bars for %s", len(series), request.symbol)
    return series
