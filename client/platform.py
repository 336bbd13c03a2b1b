"""
Price source protocol. The narrow interface the monitor, discovery and ledger
need from the venue; PolymarketPriceSource implements it, tests plug in fakes.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from scanner.models import Market, MarketMetadata, OrderResponse, Side


@runtime_checkable
class PriceSource(Protocol):
    """
    Quotes, market metadata, slug discovery and order placement.

    Every method raises a client.errors.PriceSourceError subclass on failure;
    callers decide whether that is fatal.
    """

    def fetch_quote(self, token_id: str, side: Side) -> Decimal:
        """Current quoted price. BUY = ask, SELL = bid."""
        ...

    def fetch_market_metadata(self, condition_id: str) -> MarketMetadata:
        """Open/closed flag and per-token outcome + winner flags."""
        ...

    def fetch_market_by_slug(self, slug: str) -> Market:
        """Resolve a discovery slug to a Market. NotFoundError if not live yet."""
        ...

    def submit_order(
        self,
        token_id: str,
        side: Side,
        size: float,
        price: float,
        order_type: str = "GTC",
    ) -> OrderResponse:
        """Place a limit order (live mode only)."""
        ...
