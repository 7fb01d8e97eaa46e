"""
Live indicator downloads with caching and CSV fallback.

NIFTY 50 and USD/INR monthly closes come from yfinance; India CPI annual
values come from the World Bank through pandas-datareader. When a live
download fails the indicator's fallback CSV is used instead.
"""

import logging
from typing import Dict, List, Optional
import pandas as pd
import yfinance as yf
from macrodash.cache import DataCache
from macrodash.config import DashboardConfig, Indicator
from macrodash.entities import DataPoint
from macrodash.errors import DataError
from macrodash.data_sources.csv_series import load_series_csv


logger = logging.getLogger(__name__)


def fetch_yahoo_monthly(
    symbol: str,
    period: str = "10y",
    cache: Optional[DataCache] = None,
    use_cache: bool = True
) -> List[DataPoint]:
    """
    Download monthly closes for a Yahoo Finance symbol.

    Postconditions:
        - One point per month, dated at the first of the month
        - Non-positive and missing closes are dropped (the open is used
          when only the close is missing)
        - Points are sorted by date

    Args:
        symbol: Yahoo symbol (e.g. "^NSEI", "INR=X")
        period: History length understood by yfinance
        cache: Optional DataCache instance
        use_cache: Whether to use cache if available

    Returns:
        List of DataPoint

    Raises:
        DataError: If the download fails or returns no data
    """
    query_params = {"source": "yfinance", "symbol": symbol, "period": period, "interval": "1mo"}

    if use_cache and cache is not None:
        cached = cache.get(query_params)
        if cached is not None:
            return cached

    try:
        history = yf.Ticker(symbol).history(period=period, interval="1mo")
    except Exception as e:
        raise DataError(f"Failed to download {symbol}: {e}") from e

    if history is None or history.empty:
        raise DataError(f"No data returned for {symbol}")

    closes = history["Close"]
    if "Open" in history.columns:
        closes = closes.fillna(history["Open"])
    closes = closes.dropna()
    closes = closes[closes > 0].sort_index()

    points = []
    seen = set()
    for timestamp, value in closes.items():
        day = pd.Timestamp(timestamp).strftime("%Y-%m-%d")
        if day in seen:
            continue
        seen.add(day)
        points.append(DataPoint(day, float(value)))

    if not points:
        raise DataError(f"No usable closes returned for {symbol}")

    if cache is not None:
        cache.set(query_params, points)
    return points


def _download_world_bank(indicator: str, country: str, start: int, end: int) -> pd.DataFrame:
    import pandas_datareader.wb as wb

    return wb.download(indicator=indicator, country=[country], start=start, end=end)


def fetch_world_bank_series(
    indicator: str = "FP.CPI.TOTL",
    country: str = "IN",
    start: int = 2014,
    end: int = 2024,
    cache: Optional[DataCache] = None,
    use_cache: bool = True
) -> List[DataPoint]:
    """
    Download an annual World Bank indicator for one country.

    Annual values are dated "YYYY-01-01".

    Raises:
        DataError: If the download fails or returns no values
    """
    query_params = {
        "source": "worldbank", "indicator": indicator,
        "country": country, "start": start, "end": end,
    }

    if use_cache and cache is not None:
        cached = cache.get(query_params)
        if cached is not None:
            return cached

    try:
        df = _download_world_bank(indicator, country, start, end)
    except Exception as e:
        raise DataError(f"Failed to fetch {indicator} from World Bank: {e}") from e

    if df is None or df.empty or indicator not in df.columns:
        raise DataError(f"No World Bank data for {indicator} ({country})")

    values = df[indicator].dropna()
    points = []
    for key, value in values.items():
        # Index is (country, year)
        year = key[-1] if isinstance(key, tuple) else key
        points.append(DataPoint(f"{int(year):04d}-01-01", float(value)))
    points.sort(key=lambda p: p.date)

    if not points:
        raise DataError(f"No World Bank values for {indicator} ({country})")

    if cache is not None:
        cache.set(query_params, points)
    return points


def fetch_indicator(
    indicator: Indicator,
    cache: Optional[DataCache] = None,
    use_live: bool = True
) -> List[DataPoint]:
    """
    Fetch one indicator, falling back to its CSV dataset.

    Args:
        indicator: Configured Indicator
        cache: Optional DataCache for live downloads
        use_live: If False, skip live sources and read the CSV directly

    Returns:
        List of DataPoint

    Raises:
        DataError: If both the live source and the fallback CSV fail
    """
    if use_live and indicator.source != "csv":
        try:
            if indicator.source == "yfinance":
                return fetch_yahoo_monthly(indicator.symbol, cache=cache)
            return fetch_world_bank_series(
                indicator.symbol, country=indicator.country or "IN", cache=cache
            )
        except DataError as e:
            logger.warning("%s live fetch failed, falling back to CSV: %s", indicator.name, e)

    if indicator.fallback_csv is None:
        raise DataError(f"No fallback CSV configured for {indicator.name}")
    return load_series_csv(indicator.fallback_csv)


def fetch_all(
    config: DashboardConfig,
    cache: Optional[DataCache] = None,
    use_live: bool = True
) -> Dict[str, List[DataPoint]]:
    """Fetch every configured indicator, keyed by variable name."""
    return {
        name: fetch_indicator(indicator, cache=cache, use_live=use_live)
        for name, indicator in config.indicators.items()
    }
