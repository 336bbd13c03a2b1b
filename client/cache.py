"""
Market-result caching for settlement checks.

Implements a TTL cache over CLOB market metadata with:
- Thread-safe cache access
- 60s TTL, so repeated sweeps over many pending trades reuse one fetch
- Network fetch performed outside the lock
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from client.errors import PriceSourceError
from client.platform import PriceSource
from scanner.models import MarketMetadata

logger = logging.getLogger(__name__)

MARKET_RESULT_TTL = 60.0


@dataclass(frozen=True)
class MarketResultCacheEntry:
    """A condition id's last-fetched metadata with its fetch time."""

    market: MarketMetadata
    fetched_at: float

    def is_stale(self, ttl: float, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now - self.fetched_at >= ttl


class MarketResultCache:
    """
    Thread-safe metadata cache keyed by condition id.

    Concurrent misses for the same condition id may both fetch; the cache
    write is last-writer-wins, so the duplicate work is harmless.
    """

    def __init__(self, source: PriceSource, ttl: float = MARKET_RESULT_TTL):
        self._source = source
        self._ttl = ttl
        self._lock = threading.Lock()
        self._entries: dict[str, MarketResultCacheEntry] = {}

    def get(self, condition_id: str) -> MarketMetadata | None:
        """
        Cached metadata if fresh, otherwise fetch and store it.
        Returns None when the fetch fails.
        """
        with self._lock:
            entry = self._entries.get(condition_id)
            if entry is not None and not entry.is_stale(self._ttl):
                logger.debug("Using cached market data for condition_id: %s", condition_id)
                return entry.market

        # Fetch outside lock to avoid holding during API call
        try:
            market = self._source.fetch_market_metadata(condition_id)
        except PriceSourceError as e:
            logger.warning("Failed to fetch market %s: %s", condition_id, e)
            return None

        with self._lock:
            self._entries[condition_id] = MarketResultCacheEntry(market, time.monotonic())
        return market

    def result(self, condition_id: str, token_id: str) -> tuple[bool, bool]:
        """
        (closed, won) for one leg. A failed fetch reads as (False, False) so a
        trade is never settled on missing data.
        """
        market = self.get(condition_id)
        if market is None or not market.closed:
            return False, False
        return True, market.winner_for(token_id)
