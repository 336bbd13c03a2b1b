"""
Unit tests for scanner/models.py.
"""

import time
from decimal import Decimal

import pytest

from scanner.models import (
    ArbitrageOpportunity,
    MarketMetadata,
    MarketToken,
    OrderResponse,
    PendingTrade,
    TokenQuote,
)


class TestTokenQuote:
    def test_ask_price_absent_is_zero(self):
        assert TokenQuote("t", bid=Decimal("0.4")).ask_price == Decimal("0")

    def test_frozen(self):
        q = TokenQuote("t", ask=Decimal("0.5"))
        with pytest.raises(AttributeError):
            q.ask = Decimal("0.6")


class TestMarketMetadata:
    def test_winner_for(self):
        meta = MarketMetadata(
            condition_id="c",
            active=False,
            closed=True,
            tokens=(MarketToken("up", "Up", winner=True), MarketToken("down", "Down")),
        )
        assert meta.winner_for("up") is True
        assert meta.winner_for("down") is False
        assert meta.winner_for("missing") is False


class TestArbitrageOpportunity:
    def test_key_and_profit_pct(self):
        opp = ArbitrageOpportunity(
            label="SOL_UP+BTC_DOWN",
            sol_price=Decimal("0.30"),
            btc_price=Decimal("0.60"),
            total_cost=Decimal("0.90"),
            expected_profit=Decimal("0.10"),
            sol_token_id="a",
            btc_token_id="b",
            sol_condition_id="s",
            btc_condition_id="b",
        )
        assert opp.key == ("s", "b")
        assert opp.profit_pct.quantize(Decimal("0.01")) == Decimal("11.11")


class TestPendingTrade:
    def test_age(self):
        trade = PendingTrade("a", "b", "s", "c", 100.0, 108.7, created_at=10.0)
        assert trade.age_sec(now=850.0) == 840.0
        assert trade.key == ("s", "c")

    def test_default_created_at_is_monotonic(self):
        before = time.monotonic()
        trade = PendingTrade("a", "b", "s", "c", 1.0, 1.0)
        assert trade.created_at >= before


class TestOrderResponse:
    @pytest.mark.parametrize("status,ok", [
        ("live", True),
        ("matched", True),
        ("delayed", True),
        ("error", False),
        ("FAILED", False),
        ("", False),
    ])
    def test_ok(self, status, ok):
        assert OrderResponse(status=status).ok is ok
