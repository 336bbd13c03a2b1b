"""
Unit tests for scanner/arbitrage.py -- cross-market up/down detection.
"""

from decimal import Decimal

import pytest

from scanner.arbitrage import ArbitrageDetector, MIN_LEG_PRICE
from scanner.models import InstrumentQuotes, MarketSnapshot, TokenQuote

SOL_CID = "0xsol"
BTC_CID = "0xbtc"


def _quote(token_id, ask, bid=None):
    return TokenQuote(
        token_id=token_id,
        ask=Decimal(ask) if ask is not None else None,
        bid=Decimal(bid) if bid is not None else None,
    )


def _make_snapshot(sol_up=None, sol_down=None, btc_up=None, btc_down=None):
    """Asks as strings; None leaves the leg absent."""
    return MarketSnapshot(
        sol=InstrumentQuotes(
            name="SOL",
            condition_id=SOL_CID,
            up=_quote("sol_up", sol_up) if sol_up is not None else None,
            down=_quote("sol_down", sol_down) if sol_down is not None else None,
        ),
        btc=InstrumentQuotes(
            name="BTC",
            condition_id=BTC_CID,
            up=_quote("btc_up", btc_up) if btc_up is not None else None,
            down=_quote("btc_down", btc_down) if btc_down is not None else None,
        ),
    )


class TestCheckArbitrage:
    def test_profitable_pair(self):
        det = ArbitrageDetector(Decimal("0.01"))
        opp = det.check_arbitrage("SOL_UP+BTC_DOWN", _quote("a", "0.42"), _quote("b", "0.62"), SOL_CID, BTC_CID)
        assert opp is None  # 1.04 >= 1

        opp = det.check_arbitrage("SOL_UP+BTC_DOWN", _quote("a", "0.32"), _quote("b", "0.62"), SOL_CID, BTC_CID)
        assert opp is not None
        assert opp.total_cost == Decimal("0.94")
        assert opp.expected_profit == Decimal("0.06")
        assert opp.sol_token_id == "a"
        assert opp.btc_token_id == "b"
        assert opp.key == (SOL_CID, BTC_CID)

    def test_total_cost_at_one_rejected(self):
        det = ArbitrageDetector(Decimal("0"))
        assert det.check_arbitrage("x", _quote("a", "0.40"), _quote("b", "0.60"), SOL_CID, BTC_CID) is None

    def test_both_legs_below_floor_rejected_regardless_of_threshold(self):
        det = ArbitrageDetector(Decimal("0"))
        assert det.check_arbitrage("x", _quote("a", "0.30"), _quote("b", "0.55"), SOL_CID, BTC_CID) is None
        assert det.check_arbitrage("x", _quote("a", "0.10"), _quote("b", "0.10"), SOL_CID, BTC_CID) is None

    def test_one_leg_at_floor_accepted(self):
        det = ArbitrageDetector(Decimal("0.01"))
        opp = det.check_arbitrage("x", _quote("a", "0.30"), _quote("b", str(MIN_LEG_PRICE)), SOL_CID, BTC_CID)
        assert opp is not None
        assert opp.expected_profit == Decimal("0.10")

    def test_profit_below_threshold_rejected(self):
        det = ArbitrageDetector(Decimal("0.05"))
        assert det.check_arbitrage("x", _quote("a", "0.35"), _quote("b", "0.61"), SOL_CID, BTC_CID) is None

    def test_profit_equal_to_threshold_accepted(self):
        det = ArbitrageDetector(Decimal("0.04"))
        opp = det.check_arbitrage("x", _quote("a", "0.35"), _quote("b", "0.61"), SOL_CID, BTC_CID)
        assert opp is not None
        assert opp.expected_profit == Decimal("0.04")

    def test_float_threshold_converted_exactly(self):
        det = ArbitrageDetector(0.01)
        assert det.min_profit_threshold == Decimal("0.01")


class TestDetectOpportunities:
    def test_sol_up_btc_down(self):
        det = ArbitrageDetector(Decimal("0.01"))
        snap = _make_snapshot(sol_up="0.30", sol_down="0.72", btc_up="0.40", btc_down="0.65")
        opps = det.detect_opportunities(snap)
        assert len(opps) == 1
        assert opps[0].label == "SOL_UP+BTC_DOWN"
        assert opps[0].sol_price == Decimal("0.30")
        assert opps[0].btc_price == Decimal("0.65")
        assert opps[0].total_cost == Decimal("0.95")
        assert opps[0].sol_token_id == "sol_up"
        assert opps[0].btc_token_id == "btc_down"

    def test_both_combinations_in_order(self):
        det = ArbitrageDetector(Decimal("0.01"))
        snap = _make_snapshot(sol_up="0.30", sol_down="0.61", btc_up="0.30", btc_down="0.62")
        opps = det.detect_opportunities(snap)
        assert [o.label for o in opps] == ["SOL_UP+BTC_DOWN", "SOL_DOWN+BTC_UP"]
        assert opps[1].sol_token_id == "sol_down"
        assert opps[1].btc_token_id == "btc_up"

    def test_example_pair_below_one(self):
        det = ArbitrageDetector(Decimal("0.01"))
        snap = _make_snapshot(sol_up="0.42", btc_down="0.50")
        # both legs below 0.6 -> rejected by the floor
        assert det.detect_opportunities(snap) == []

    def test_overpriced_pair(self):
        det = ArbitrageDetector(Decimal("0.01"))
        snap = _make_snapshot(sol_up="0.55", btc_down="0.58")
        assert det.detect_opportunities(snap) == []

    def test_missing_leg_skips_combination(self):
        det = ArbitrageDetector(Decimal("0.01"))
        snap = _make_snapshot(sol_up="0.30", btc_down=None, sol_down="0.30", btc_up="0.65")
        opps = det.detect_opportunities(snap)
        assert [o.label for o in opps] == ["SOL_DOWN+BTC_UP"]

    def test_bid_only_leg_skips_combination(self):
        det = ArbitrageDetector(Decimal("0.01"))
        snap = MarketSnapshot(
            sol=InstrumentQuotes("SOL", SOL_CID, up=_quote("sol_up", None, bid="0.29")),
            btc=InstrumentQuotes("BTC", BTC_CID, down=_quote("btc_down", "0.65")),
        )
        assert det.detect_opportunities(snap) == []

    def test_empty_snapshot(self):
        det = ArbitrageDetector()
        assert det.detect_opportunities(_make_snapshot()) == []

    @pytest.mark.parametrize("sol,btc,expected", [
        ("0.30", "0.65", True),
        ("0.30", "0.55", False),
        ("0.55", "0.58", False),
        ("0.39", "0.60", True),
        ("0.40", "0.60", False),
    ])
    def test_decision_table(self, sol, btc, expected):
        det = ArbitrageDetector(Decimal("0.01"))
        opps = det.detect_opportunities(_make_snapshot(sol_up=sol, btc_down=btc))
        assert bool(opps) is expected
