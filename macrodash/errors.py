"""Custom exceptions for the dashboard analytics package."""


class DashboardError(Exception):
    """Base exception for dashboard errors."""
    pass


class InsufficientDataError(DashboardError):
    """Raised when an operation receives fewer points than it needs."""
    pass


class LengthMismatchError(DashboardError):
    """Raised when paired-series operations receive unequal-length inputs."""
    pass


class DataError(DashboardError):
    """Raised when source data is missing, malformed, or unavailable."""
    pass


class CacheError(DashboardError):
    """Raised when caching operations fail."""
    pass


class ConfigError(DashboardError):
    """Raised when the indicator configuration file is invalid."""
    pass
