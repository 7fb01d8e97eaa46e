"""
Caching layer for fetched indicator series.

This module provides a disk-based cache that stores raw downloads by
query hash, with an expiry time, to avoid repeated network calls.
"""

import hashlib
import json
import logging
import pickle
import time
from pathlib import Path
from typing import Optional, Any
from macrodash.errors import CacheError


logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600


class DataCache:
    """
    A disk-based cache with per-entry expiry.

    Each entry is a pickle of {"stored_at": epoch seconds, "data": payload},
    named by the md5 hash of its query parameters. Entries older than
    ttl seconds are treated as misses.

    Representation Invariants:
        - cache_dir exists and is a directory
        - ttl > 0
    """

    def __init__(self, cache_dir: str = ".cache", ttl: int = DEFAULT_TTL):
        """
        Initialize the cache.

        Preconditions:
            - cache_dir is a valid path (will be created if it doesn't exist)
            - ttl > 0

        Postconditions:
            - cache_dir exists as a directory
        """
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.ttl = ttl

    def _compute_hash(self, query_params: dict) -> str:
        """Hash query parameters; key order does not matter."""
        sorted_params = json.dumps(query_params, sort_keys=True)
        return hashlib.md5(sorted_params.encode()).hexdigest()

    def _path(self, query_params: dict) -> Path:
        return self.cache_dir / f"{self._compute_hash(query_params)}.pkl"

    def get(self, query_params: dict, now: Optional[float] = None) -> Optional[Any]:
        """
        Retrieve cached data if it exists and has not expired.

        Args:
            query_params: Query parameters used to generate cache key
            now: Current epoch time (defaults to time.time())

        Returns:
            Cached payload, or None on a miss or an expired entry

        Raises:
            CacheError: If the cache file cannot be read
        """
        cache_file = self._path(query_params)
        if not cache_file.exists():
            return None

        try:
            with open(cache_file, "rb") as f:
                entry = pickle.load(f)
        except Exception as e:
            raise CacheError(f"Failed to read cache file: {e}") from e

        now = time.time() if now is None else now
        if now - entry["stored_at"] > self.ttl:
            logger.info("Cache expired for %s", query_params)
            return None
        return entry["data"]

    def set(self, query_params: dict, data: Any, now: Optional[float] = None) -> None:
        """
        Store data in cache.

        Raises:
            CacheError: If the cache file cannot be written
        """
        entry = {"stored_at": time.time() if now is None else now, "data": data}
        try:
            with open(self._path(query_params), "wb") as f:
                pickle.dump(entry, f)
        except Exception as e:
            raise CacheError(f"Failed to write cache file: {e}") from e

    def delete(self, query_params: dict) -> None:
        """Remove one entry if present."""
        cache_file = self._path(query_params)
        if cache_file.exists():
            cache_file.unlink()

    def clear(self) -> None:
        """Remove all cached files."""
        for cache_file in self.cache_dir.glob("*.pkl"):
            cache_file.unlink()

    def exists(self, query_params: dict) -> bool:
        """Check whether a (possibly expired) entry is on disk."""
        return self._path(query_params).exists()
