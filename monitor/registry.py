"""
Tracked SOL/BTC markets for the current 15-minute period, plus their cached
per-outcome token ids.

Thread safety: one lock guards the market pair, token ids, refresh stamp and
period marker. Reads copy values out; no lock is held over a network call.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass

from client.errors import DataQualityWarning, InvariantViolation, PriceSourceError
from client.platform import PriceSource
from scanner.models import Market, Outcome

logger = logging.getLogger(__name__)

PERIOD_SEC = 900


def period_start(now: float) -> int:
    """Start of the 15-minute period containing *now* (unix seconds)."""
    return int(now // PERIOD_SEC) * PERIOD_SEC


def classify_outcome(label: str) -> Outcome:
    """
    Map an outcome label to up/down. Case-insensitive "UP"/"DOWN" substring,
    or the literal "1"/"0" encoding. Raises DataQualityWarning otherwise.
    """
    upper = label.strip().upper()
    if "UP" in upper or upper == "1":
        return Outcome.UP
    if "DOWN" in upper or upper == "0":
        return Outcome.DOWN
    raise DataQualityWarning(f"unclassifiable outcome label: {label!r}")


@dataclass(frozen=True)
class OutcomeTokenIds:
    sol_up: str | None = None
    sol_down: str | None = None
    btc_up: str | None = None
    btc_down: str | None = None


class MarketRegistry:
    """
    Owns the SOL/BTC market pair for the current period.

    Token ids are resolved lazily from market metadata, at most once per
    period; swap_markets() invalidates them.
    """

    def __init__(
        self,
        source: PriceSource,
        sol_market: Market,
        btc_market: Market,
        clock=time.time,
        monotonic=time.monotonic,
    ):
        if sol_market.condition_id == btc_market.condition_id:
            raise InvariantViolation(
                f"SOL and BTC markets share condition id {sol_market.condition_id}"
            )
        self._source = source
        self._clock = clock
        self._monotonic = monotonic
        self._lock = threading.Lock()
        self._sol_market = sol_market
        self._btc_market = btc_market
        self._token_ids = OutcomeTokenIds()
        self._last_refresh: float | None = None
        self._current_period = period_start(clock())

    # -- Reads --

    def markets(self) -> tuple[Market, Market]:
        with self._lock:
            return self._sol_market, self._btc_market

    def current_condition_ids(self) -> tuple[str, str]:
        with self._lock:
            return self._sol_market.condition_id, self._btc_market.condition_id

    def current_outcome_token_ids(self) -> OutcomeTokenIds:
        with self._lock:
            return self._token_ids

    @property
    def current_period(self) -> int:
        with self._lock:
            return self._current_period

    def is_new_period(self, now: float | None = None) -> bool:
        """True once wall-clock time has moved past the stored period."""
        now = self._clock() if now is None else now
        with self._lock:
            return period_start(now) != self._current_period

    # -- Writes --

    def swap_markets(self, sol_market: Market, btc_market: Market) -> None:
        """Atomically install a new pair and drop every cached token id."""
        if sol_market.condition_id == btc_market.condition_id:
            raise InvariantViolation(
                f"SOL and BTC markets share condition id {sol_market.condition_id}"
            )
        new_period = period_start(self._clock())
        with self._lock:
            self._sol_market = sol_market
            self._btc_market = btc_market
            self._token_ids = OutcomeTokenIds()
            self._last_refresh = None
            self._current_period = new_period
        logger.info("New SOL market: %s (%s)", sol_market.slug, sol_market.condition_id)
        logger.info("New BTC market: %s (%s)", btc_market.slug, btc_market.condition_id)

    def refresh_token_ids_if_stale(self) -> bool:
        """
        Resolve up/down token ids from market metadata unless already done
        within the last period. Returns True if a refresh was attempted.
        """
        with self._lock:
            last = self._last_refresh
            sol_market = self._sol_market
            btc_market = self._btc_market
        if last is not None and self._monotonic() - last < PERIOD_SEC:
            return False

        sol_up, sol_down = self._resolve_tokens("SOL", sol_market.condition_id)
        btc_up, btc_down = self._resolve_tokens("BTC", btc_market.condition_id)

        with self._lock:
            # A swap that raced this refresh wins; its markets get resolved next tick
            if (self._sol_market is not sol_market) or (self._btc_market is not btc_market):
                logger.debug("Markets swapped during token refresh, discarding result")
                return True
            self._token_ids = OutcomeTokenIds(
                sol_up=sol_up or self._token_ids.sol_up,
                sol_down=sol_down or self._token_ids.sol_down,
                btc_up=btc_up or self._token_ids.btc_up,
                btc_down=btc_down or self._token_ids.btc_down,
            )
            self._last_refresh = self._monotonic()
        return True

    def _resolve_tokens(self, name: str, condition_id: str) -> tuple[str | None, str | None]:
        """(up_token_id, down_token_id) for one instrument; None where unresolved."""
        try:
            details = self._source.fetch_market_metadata(condition_id)
        except PriceSourceError as e:
            logger.warning("Failed to refresh %s token ids (%s): %s", name, condition_id, e)
            return None, None

        up: str | None = None
        down: str | None = None
        for token in details.tokens:
            try:
                outcome = classify_outcome(token.outcome)
            except DataQualityWarning as e:
                logger.warning("%s market %s: %s, token %s dropped", name, condition_id, e, token.token_id)
                continue
            if outcome is Outcome.UP:
                up = token.token_id
                logger.info("%s Up token_id: %s", name, token.token_id)
            else:
                down = token.token_id
                logger.info("%s Down token_id: %s", name, token.token_id)
        return up, down
