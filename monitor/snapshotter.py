"""
Per-tick price capture for the four outcome tokens.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from client.errors import PriceSourceError
from client.platform import PriceSource
from monitor.registry import MarketRegistry
from scanner.models import InstrumentQuotes, MarketSnapshot, Side, TokenQuote

logger = logging.getLogger(__name__)

# One worker per outcome token (SOL/BTC x Up/Down)
_QUOTE_WORKERS = 4


class Snapshotter:
    """
    Builds a MarketSnapshot from the registry's current token ids.

    A failed quote is logged and left absent. A token with neither side
    quoted, or whose id is not resolved yet, yields no TokenQuote at all.
    """

    def __init__(self, registry: MarketRegistry, source: PriceSource, max_workers: int = _QUOTE_WORKERS):
        self._registry = registry
        self._source = source
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="quote")

    def capture_snapshot(self) -> MarketSnapshot:
        self._registry.refresh_token_ids_if_stale()

        sol_cid, btc_cid = self._registry.current_condition_ids()
        ids = self._registry.current_outcome_token_ids()

        legs = {
            ("SOL", "Up"): ids.sol_up,
            ("SOL", "Down"): ids.sol_down,
            ("BTC", "Up"): ids.btc_up,
            ("BTC", "Down"): ids.btc_down,
        }
        futures = {
            leg: self._pool.submit(self._fetch_token_quote, token_id, *leg)
            for leg, token_id in legs.items()
        }
        # Snapshot is only assembled after every leg resolves or is marked absent
        quotes = {leg: future.result() for leg, future in futures.items()}

        return MarketSnapshot(
            sol=InstrumentQuotes(
                name="SOL",
                condition_id=sol_cid,
                up=quotes[("SOL", "Up")],
                down=quotes[("SOL", "Down")],
            ),
            btc=InstrumentQuotes(
                name="BTC",
                condition_id=btc_cid,
                up=quotes[("BTC", "Up")],
                down=quotes[("BTC", "Down")],
            ),
        )

    def _fetch_token_quote(self, token_id: str | None, market_name: str, outcome: str) -> TokenQuote | None:
        if token_id is None:
            return None

        ask = self._fetch_side(token_id, Side.BUY, market_name, outcome)
        bid = self._fetch_side(token_id, Side.SELL, market_name, outcome)
        if ask is None and bid is None:
            return None
        return TokenQuote(token_id=token_id, bid=bid, ask=ask)

    def _fetch_side(self, token_id: str, side: Side, market_name: str, outcome: str):
        try:
            return self._source.fetch_quote(token_id, side)
        except PriceSourceError as e:
            logger.warning("Failed to fetch %s %s %s price: %s", market_name, outcome, side.value, e)
            return None

    def close(self) -> None:
        self._pool.shutdown(wait=False)
