"""
Tests for indicator downloads, caching, CSV fallback and configuration.

Tests cover:
- Cache hit/miss/expiry behavior
- CSV loading and validation
- Mocked yfinance and World Bank calls
- Fallback to CSV when a live source fails
- Config loading
"""

import pytest
import pandas as pd
import tempfile
from pathlib import Path
from unittest.mock import Mock, patch
from macrodash.cache import DataCache
from macrodash.config import load_config, Indicator, DashboardConfig, DEFAULT_CONFIG_PATH
from macrodash.entities import DataPoint
from macrodash.errors import CacheError, ConfigError, DataError
from macrodash.data_sources.csv_series import load_series_csv
from macrodash.data_sources.market import (
    fetch_yahoo_monthly, fetch_world_bank_series, fetch_indicator, fetch_all
)


class TestDataCache:
    """Tests for DataCache class."""

    def test_cache_init_creates_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache_dir = Path(tmpdir) / "nested" / "cache"
            DataCache(str(cache_dir))
            assert cache_dir.is_dir()

    def test_cache_set_and_get(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = DataCache(tmpdir)
            query_params = {"source": "yfinance", "symbol": "^NSEI"}
            points = [DataPoint("2024-01-01", 21000.0)]

            cache.set(query_params, points)
            assert cache.get(query_params) == points

    def test_cache_miss_returns_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert DataCache(tmpdir).get({"symbol": "INR=X"}) is None

    def test_cache_expiry(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = DataCache(tmpdir, ttl=60)
            query_params = {"symbol": "INR=X"}
            cache.set(query_params, [1, 2, 3], now=1000.0)

            assert cache.get(query_params, now=1059.0) == [1, 2, 3]
            assert cache.get(query_params, now=1061.0) is None
            # Expired entries stay on disk until overwritten
            assert cache.exists(query_params)

    def test_cache_delete_and_clear(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = DataCache(tmpdir)
            for i in range(3):
                cache.set({"symbol": f"S{i}"}, i)

            cache.delete({"symbol": "S0"})
            assert not cache.exists({"symbol": "S0"})
            assert cache.exists({"symbol": "S1"})

            cache.clear()
            assert len(list(Path(tmpdir).glob("*.pkl"))) == 0

    def test_cache_hash_consistency(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = DataCache(tmpdir)
            hash1 = cache._compute_hash({"symbol": "^NSEI", "period": "10y"})
            hash2 = cache._compute_hash({"period": "10y", "symbol": "^NSEI"})
            assert hash1 == hash2

    def test_corrupt_file_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cache = DataCache(tmpdir)
            query_params = {"symbol": "^NSEI"}
            cache._path(query_params).write_bytes(b"not a pickle")
            with pytest.raises(CacheError):
                cache.get(query_params)

    def test_invalid_ttl_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ValueError, match="ttl"):
                DataCache(tmpdir, ttl=0)


class TestLoadSeriesCsv:
    """Tests for load_series_csv function."""

    def test_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "cpi.csv"
            path.write_text(
                "date,value\n"
                "2024-02-01,101.5\n"
                "2024-01-01,100.0\n"
                "2024-03-01,\n"
                "2024-01-01,999.0\n"
            )
            points = load_series_csv(path)
            assert points == [DataPoint("2024-01-01", 100.0), DataPoint("2024-02-01", 101.5)]

    def test_missing_file_raises(self):
        with pytest.raises(DataError, match="not found"):
            load_series_csv("/nonexistent/series.csv")

    def test_missing_columns_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.csv"
            path.write_text("day,close\n2024-01-01,1.0\n")
            with pytest.raises(DataError, match="Missing required columns"):
                load_series_csv(path)

    def test_invalid_date_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.csv"
            path.write_text("date,value\n01/01/2024,1.0\n")
            with pytest.raises(DataError, match="Invalid row"):
                load_series_csv(path)

    def test_bundled_datasets(self):
        config = load_config()
        for indicator in config.indicators.values():
            points = load_series_csv(indicator.fallback_csv)
            assert len(points) > 24
            assert [p.date for p in points] == sorted(p.date for p in points)


class TestFetchYahooMonthly:
    """Tests for fetch_yahoo_monthly function."""

    def _history(self):
        return pd.DataFrame({
            "Open": [100.0, 110.0, 120.0],
            "Close": [102.0, None, 122.0],
            "Volume": [1000, 1100, 1200],
        }, index=pd.date_range("2024-01-01", periods=3, freq="MS"))

    @patch("macrodash.data_sources.market.yf.Ticker")
    def test_download(self, mock_ticker_class):
        mock_ticker = Mock()
        mock_ticker.history.return_value = self._history()
        mock_ticker_class.return_value = mock_ticker

        points = fetch_yahoo_monthly("^NSEI", use_cache=False)

        mock_ticker_class.assert_called_once_with("^NSEI")
        mock_ticker.history.assert_called_once_with(period="10y", interval="1mo")
        assert points == [
            DataPoint("2024-01-01", 102.0),
            DataPoint("2024-02-01", 110.0),  # missing close falls back to the open
            DataPoint("2024-03-01", 122.0),
        ]

    @patch("macrodash.data_sources.market.yf.Ticker")
    def test_empty_raises(self, mock_ticker_class):
        mock_ticker = Mock()
        mock_ticker.history.return_value = pd.DataFrame()
        mock_ticker_class.return_value = mock_ticker

        with pytest.raises(DataError, match="No data"):
            fetch_yahoo_monthly("INR=X", use_cache=False)

    @patch("macrodash.data_sources.market.yf.Ticker")
    def test_network_error_raises_data_error(self, mock_ticker_class):
        mock_ticker_class.return_value.history.side_effect = ConnectionError("offline")
        with pytest.raises(DataError, match="Failed to download"):
            fetch_yahoo_monthly("INR=X", use_cache=False)

    @patch("macrodash.data_sources.market.yf.Ticker")
    def test_uses_cache(self, mock_ticker_class):
        mock_ticker = Mock()
        mock_ticker.history.return_value = self._history()
        mock_ticker_class.return_value = mock_ticker

        with tempfile.TemporaryDirectory() as tmpdir:
            cache = DataCache(tmpdir)
            first = fetch_yahoo_monthly("^NSEI", cache=cache)
            second = fetch_yahoo_monthly("^NSEI", cache=cache)

        assert first == second
        assert mock_ticker.history.call_count == 1


class TestFetchWorldBank:
    """Tests for fetch_world_bank_series function."""

    @patch("macrodash.data_sources.market._download_world_bank")
    def test_annual_dates(self, mock_download):
        index = pd.MultiIndex.from_tuples(
            [("India", "2023"), ("India", "2022")], names=["country", "year"]
        )
        mock_download.return_value = pd.DataFrame({"FP.CPI.TOTL": [180.4, 170.1]}, index=index)

        points = fetch_world_bank_series(use_cache=False)

        assert points == [DataPoint("2022-01-01", 170.1), DataPoint("2023-01-01", 180.4)]

    @patch("macrodash.data_sources.market._download_world_bank")
    def test_failure_raises_data_error(self, mock_download):
        mock_download.side_effect = IOError("service unavailable")
        with pytest.raises(DataError, match="World Bank"):
            fetch_world_bank_series(use_cache=False)


class TestFetchIndicator:
    """Tests for fetch_indicator and fetch_all."""

    @patch("macrodash.data_sources.market.fetch_yahoo_monthly")
    def test_falls_back_to_csv(self, mock_fetch):
        mock_fetch.side_effect = DataError("offline")
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nifty.csv"
            path.write_text("date,value\n2024-01-01,21000\n")
            indicator = Indicator("nifty", "NIFTY 50", "yfinance", symbol="^NSEI", fallback_csv=path)

            assert fetch_indicator(indicator) == [DataPoint("2024-01-01", 21000.0)]

    @patch("macrodash.data_sources.market.fetch_yahoo_monthly")
    def test_no_fallback_raises(self, mock_fetch):
        mock_fetch.side_effect = DataError("offline")
        indicator = Indicator("nifty", "NIFTY 50", "yfinance", symbol="^NSEI")
        with pytest.raises(DataError, match="No fallback CSV"):
            fetch_indicator(indicator)

    @patch("macrodash.data_sources.market.fetch_yahoo_monthly")
    def test_offline_skips_live(self, mock_fetch):
        config = load_config()
        raw = fetch_all(config, use_live=False)
        assert set(raw) == {"cpi", "usdinr", "nifty"}
        mock_fetch.assert_not_called()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_default_config(self):
        config = load_config()
        assert config.variables == ("cpi", "usdinr", "nifty")
        assert config.indicators["nifty"].symbol == "^NSEI"
        assert config.indicators["cpi"].source == "worldbank"
        assert config.indicators["cpi"].fallback_csv == DEFAULT_CONFIG_PATH.parent / "cpi_data.csv"
        assert config.analysis.moving_average_windows == (3, 6, 12)
        assert config.analysis.rolling_window == 12
        assert config.cache_ttl == 3600

    def test_missing_file_raises(self):
        with pytest.raises(ConfigError, match="not found"):
            load_config("/nonexistent/indicators.yaml")

    def test_no_indicators_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "empty.yaml"
            path.write_text("analysis:\n  rolling_window: 6\n")
            with pytest.raises(ConfigError, match="at least one indicator"):
                load_config(str(path))

    def test_invalid_values_raise(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text(
                "indicators:\n  cpi:\n    source: csv\n    fallback_csv: cpi.csv\n"
                "analysis:\n  rolling_window: 0\n"
            )
            with pytest.raises(ConfigError, match="rolling_window"):
                load_config(str(path))

    def test_invalid_source_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text("indicators:\n  cpi:\n    source: bloomberg\n")
            with pytest.raises(ConfigError, match="invalid source"):
                load_config(str(path))

    def test_malformed_yaml_raises(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "bad.yaml"
            path.write_text("indicators: [unclosed\n")
            with pytest.raises(ConfigError, match="Failed to parse"):
                load_config(str(path))
