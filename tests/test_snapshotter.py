"""
Unit tests for monitor/snapshotter.py -- concurrent four-leg price capture.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from client.errors import NetworkError
from monitor.registry import MarketRegistry
from monitor.snapshotter import Snapshotter
from scanner.models import Market, MarketMetadata, MarketToken, Side


def _make_metadata(cid):
    return MarketMetadata(
        condition_id=cid,
        active=True,
        closed=False,
        tokens=(
            MarketToken(token_id=f"{cid}-up", outcome="Up"),
            MarketToken(token_id=f"{cid}-down", outcome="Down"),
        ),
    )


def _make_source(prices):
    """prices: {(token_id, Side): Decimal | Exception}"""
    source = MagicMock()
    source.fetch_market_metadata.side_effect = _make_metadata

    def quote(token_id, side):
        value = prices.get((token_id, side))
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise NetworkError("no quote")
        return value

    source.fetch_quote.side_effect = quote
    return source


@pytest.fixture
def snap_env():
    built = []

    def factory(prices):
        source = _make_source(prices)
        registry = MarketRegistry(source, Market("sol", "sol-slug"), Market("btc", "btc-slug"))
        snapshotter = Snapshotter(registry, source)
        built.append(snapshotter)
        return snapshotter, source

    yield factory
    for s in built:
        s.close()


class TestCaptureSnapshot:
    def test_all_legs_quoted(self, snap_env):
        prices = {}
        for tok in ("sol-up", "sol-down", "btc-up", "btc-down"):
            prices[(tok, Side.BUY)] = Decimal("0.51")
            prices[(tok, Side.SELL)] = Decimal("0.49")
        snapshotter, source = snap_env(prices)

        snap = snapshotter.capture_snapshot()
        assert snap.sol.condition_id == "sol"
        assert snap.btc.condition_id == "btc"
        assert snap.sol.up.token_id == "sol-up"
        assert snap.sol.up.ask == Decimal("0.51")
        assert snap.sol.up.bid == Decimal("0.49")
        assert snap.btc.down.token_id == "btc-down"
        assert source.fetch_quote.call_count == 8

    def test_failed_ask_leaves_bid(self, snap_env):
        prices = {
            ("sol-up", Side.BUY): NetworkError("timeout"),
            ("sol-up", Side.SELL): Decimal("0.40"),
        }
        snapshotter, _ = snap_env(prices)
        snap = snapshotter.capture_snapshot()
        assert snap.sol.up.ask is None
        assert snap.sol.up.bid == Decimal("0.40")

    def test_no_quotes_means_absent_leg(self, snap_env):
        snapshotter, _ = snap_env({})
        snap = snapshotter.capture_snapshot()
        assert snap.sol.up is None
        assert snap.sol.down is None
        assert snap.btc.up is None
        assert snap.btc.down is None

    def test_unresolved_token_ids_skip_quotes(self):
        source = MagicMock()
        source.fetch_market_metadata.side_effect = NetworkError("metadata down")
        registry = MarketRegistry(source, Market("sol", "s"), Market("btc", "b"))
        snapshotter = Snapshotter(registry, source)
        try:
            snap = snapshotter.capture_snapshot()
        finally:
            snapshotter.close()
        assert snap.sol.up is None
        source.fetch_quote.assert_not_called()

    def test_token_ids_refreshed_once_per_period(self, snap_env):
        snapshotter, source = snap_env({})
        snapshotter.capture_snapshot()
        snapshotter.capture_snapshot()
        assert source.fetch_market_metadata.call_count == 2
