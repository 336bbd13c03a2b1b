"""
Tests for client/polymarket.py and client/platform.py -- the PriceSource adapter.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import httpx
import respx

from client.platform import PriceSource
from client.polymarket import PolymarketPriceSource
from scanner.models import Side

GAMMA_HOST = "https://gamma.test"


class TestPolymarketPriceSource:
    def test_satisfies_protocol(self):
        assert isinstance(PolymarketPriceSource(MagicMock()), PriceSource)

    def test_fetch_quote_delegates_to_clob(self):
        client = MagicMock()
        client.get_price.return_value = {"price": "0.61"}
        source = PolymarketPriceSource(client)
        assert source.fetch_quote("tok", Side.BUY) == Decimal("0.61")
        client.get_price.assert_called_once_with("tok", "BUY")

    def test_fetch_market_metadata(self):
        client = MagicMock()
        client.get_market.return_value = {
            "condition_id": "0xbtc",
            "closed": True,
            "tokens": [{"token_id": "1", "outcome": "Up", "winner": True}],
        }
        meta = PolymarketPriceSource(client).fetch_market_metadata("0xbtc")
        assert meta.closed
        assert meta.winner_for("1")

    @respx.mock
    def test_fetch_market_by_slug_uses_gamma_host(self):
        slug = "btc-updown-15m-1767726000"
        route = respx.get(f"{GAMMA_HOST}/events/slug/{slug}").mock(
            return_value=httpx.Response(200, json={"markets": [{
                "conditionId": "0xbtc",
                "slug": slug,
                "active": True,
                "closed": False,
                "outcomes": '["Up", "Down"]',
                "clobTokenIds": '["1", "2"]',
            }]})
        )
        market = PolymarketPriceSource(MagicMock(), gamma_host=GAMMA_HOST).fetch_market_by_slug(slug)
        assert route.called
        assert market.condition_id == "0xbtc"
        assert market.tokens == (("Up", "1"), ("Down", "2"))

    def test_submit_order(self):
        client = MagicMock()
        client.get_tick_size.return_value = "0.01"
        client.post_order.return_value = {"orderID": "o", "status": "live"}
        resp = PolymarketPriceSource(client).submit_order("tok", Side.BUY, 2.0, 0.4)
        assert resp.ok
        assert resp.order_id == "o"
