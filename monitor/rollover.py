"""
Period rollover: when the 15-minute window turns over, discover the next
SOL/BTC pair and swap it into the registry.
"""

from __future__ import annotations

import logging
import time

from client.errors import InvariantViolation, NotFoundError
from client.platform import PriceSource
from monitor.display import print_rollover
from monitor.registry import MarketRegistry, period_start
from scanner.discovery import BTC_PREFIX, SOL_PREFIX, discover_market

logger = logging.getLogger(__name__)


class PeriodRollover:
    """Driven by the period-rollover task; a failed check leaves the old pair in place."""

    def __init__(self, registry: MarketRegistry, source: PriceSource, clock=time.time):
        self._registry = registry
        self._source = source
        self._clock = clock

    def check(self) -> bool:
        """Returns True if a new pair was swapped in."""
        now = self._clock()
        if not self._registry.is_new_period(now):
            return False

        new_period = period_start(now)
        logger.info(
            "New 15-minute period detected (%d -> %d), searching for new markets...",
            self._registry.current_period, new_period,
        )
        excluded = set(self._registry.current_condition_ids())
        try:
            sol = discover_market(self._source, "SOL", SOL_PREFIX, now, excluded)
            excluded.add(sol.condition_id)
            btc = discover_market(self._source, "BTC", BTC_PREFIX, now, excluded)
            self._registry.swap_markets(sol, btc)
        except (NotFoundError, InvariantViolation) as e:
            logger.warning("Rollover to period %d failed, keeping current markets: %s", new_period, e)
            return False

        print_rollover(new_period, sol, btc)
        return True
