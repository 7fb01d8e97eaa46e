"""
Dashboard configuration.

Loads the indicator definitions and analysis defaults from
data/indicators.yaml. Engine functions never read this module; callers
pass the configured windows and bin counts explicitly.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple
import yaml
from macrodash.errors import ConfigError


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "data" / "indicators.yaml"

SOURCES = ("yfinance", "worldbank", "csv")


@dataclass(frozen=True)
class Indicator:
    """
    One dashboard variable and where its data comes from.

    Representation Invariants:
        - name is non-empty
        - source is one of: "yfinance", "worldbank", "csv"
    """
    name: str
    label: str
    source: str
    symbol: Optional[str] = None
    country: Optional[str] = None
    fallback_csv: Optional[Path] = None

    def __post_init__(self):
        """Validate representation invariants."""
        if not self.name:
            raise ConfigError("indicator name cannot be empty")
        if self.source not in SOURCES:
            raise ConfigError(f"invalid source for {self.name}: {self.source}")


@dataclass(frozen=True)
class AnalysisSettings:
    """Windows and bin counts used when the caller does not override them."""
    moving_average_windows: Tuple[int, ...] = (3, 6, 12)
    rolling_window: int = 12
    bin_count: int = 10
    regime_threshold: float = 0.5


@dataclass(frozen=True)
class DashboardConfig:
    indicators: Dict[str, Indicator]
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    cache_dir: str = ".cache"
    cache_ttl: int = 3600

    @property
    def variables(self) -> Tuple[str, ...]:
        return tuple(self.indicators)


def _positive_int(value, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {value!r}")
    return value


def load_config(path: Optional[str] = None) -> DashboardConfig:
    """
    Load the dashboard configuration.

    Args:
        path: YAML file. If None, uses data/indicators.yaml.

    Returns:
        DashboardConfig

    Raises:
        ConfigError: If the file is missing or invalid
    """
    config_file = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")

    try:
        with open(config_file) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {config_file}: {e}") from e

    raw_indicators = raw.get("indicators") or {}
    if not raw_indicators:
        raise ConfigError("config must define at least one indicator")

    indicators = {}
    for name, entry in raw_indicators.items():
        entry = entry or {}
        fallback = entry.get("fallback_csv")
        indicators[name] = Indicator(
            name=name,
            label=entry.get("label", name),
            source=entry.get("source", "csv"),
            symbol=entry.get("symbol"),
            country=entry.get("country"),
            fallback_csv=(config_file.parent / fallback) if fallback else None,
        )

    analysis_raw = raw.get("analysis") or {}
    windows = analysis_raw.get("moving_average_windows", [3, 6, 12])
    analysis = AnalysisSettings(
        moving_average_windows=tuple(
            _positive_int(w, "moving_average_windows") for w in windows
        ),
        rolling_window=_positive_int(analysis_raw.get("rolling_window", 12), "rolling_window"),
        bin_count=_positive_int(analysis_raw.get("bin_count", 10), "bin_count"),
        regime_threshold=float(analysis_raw.get("regime_threshold", 0.5)),
    )

    cache_raw = raw.get("cache") or {}
    return DashboardConfig(
        indicators=indicators,
        analysis=analysis,
        cache_dir=str(cache_raw.get("directory", ".cache")),
        cache_ttl=_positive_int(cache_raw.get("ttl_seconds", 3600), "ttl_seconds"),
    )
