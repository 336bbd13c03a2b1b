"""
Polymarket implementation of the PriceSource protocol: Gamma for discovery,
CLOB for quotes, market metadata and orders.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from py_clob_client.client import ClobClient

from client import clob, gamma
from scanner.models import Market, MarketMetadata, OrderResponse, Side

logger = logging.getLogger(__name__)


class PolymarketPriceSource:
    """
    Usage:
        source = PolymarketPriceSource(build_clob_client(cfg), gamma_host=cfg.gamma_host)
        ask = source.fetch_quote(token_id, Side.BUY)
    """

    def __init__(
        self,
        client: ClobClient,
        gamma_host: str = "https://gamma-api.polymarket.com",
        timeout: float = clob.REQUEST_TIMEOUT_SEC,
    ):
        self._client = client
        self._gamma_host = gamma_host
        self._timeout = timeout

    def fetch_quote(self, token_id: str, side: Side) -> Decimal:
        return clob.get_price(self._client, token_id, side)

    def fetch_market_metadata(self, condition_id: str) -> MarketMetadata:
        return clob.get_market(self._client, condition_id)

    def fetch_market_by_slug(self, slug: str) -> Market:
        return gamma.get_market_by_slug(self._gamma_host, slug, timeout=self._timeout)

    def submit_order(
        self,
        token_id: str,
        side: Side,
        size: float,
        price: float,
        order_type: str = "GTC",
    ) -> OrderResponse:
        logger.debug(
            "Submitting %s %s order: token=%s size=%.6f price=%.4f",
            order_type, side.value, token_id, size, price,
        )
        return clob.submit_order(self._client, token_id, side, size, price, order_type)
