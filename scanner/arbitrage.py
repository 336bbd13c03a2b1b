"""
Cross-market up/down arbitrage detector.
Buys SOL-up + BTC-down (or SOL-down + BTC-up) when the two asks sum below $1.00.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from scanner.models import ONE, ArbitrageOpportunity, MarketSnapshot, TokenQuote

logger = logging.getLogger(__name__)

# Both legs priced as likely losers looks like a broken/rugged book, not an arb
MIN_LEG_PRICE = Decimal("0.6")


class ArbitrageDetector:
    """Stateless apart from the configured profit floor."""

    def __init__(self, min_profit_threshold: float | Decimal = Decimal("0.01")):
        self.min_profit_threshold = Decimal(str(min_profit_threshold))

    def detect_opportunities(self, snapshot: MarketSnapshot) -> list[ArbitrageOpportunity]:
        """
        Evaluate the two fixed hedges:
          SOL_UP + BTC_DOWN, then SOL_DOWN + BTC_UP.
        A missing leg, or a leg quoted on the bid side only, means no
        opportunity for that combination.
        """
        combos = (
            ("SOL_UP+BTC_DOWN", snapshot.sol.up, snapshot.btc.down),
            ("SOL_DOWN+BTC_UP", snapshot.sol.down, snapshot.btc.up),
        )
        opportunities = []
        for label, sol_leg, btc_leg in combos:
            if sol_leg is None or btc_leg is None:
                continue
            if sol_leg.ask is None or btc_leg.ask is None:
                continue
            opp = self.check_arbitrage(
                label, sol_leg, btc_leg,
                snapshot.sol.condition_id, snapshot.btc.condition_id,
            )
            if opp:
                opportunities.append(opp)
        return opportunities

    def check_arbitrage(
        self,
        label: str,
        sol_leg: TokenQuote,
        btc_leg: TokenQuote,
        sol_condition_id: str,
        btc_condition_id: str,
    ) -> ArbitrageOpportunity | None:
        sol_price = sol_leg.ask_price
        btc_price = btc_leg.ask_price

        if sol_price < MIN_LEG_PRICE and btc_price < MIN_LEG_PRICE:
            return None

        total_cost = sol_price + btc_price
        if total_cost >= ONE:
            return None

        expected_profit = ONE - total_cost
        if expected_profit < self.min_profit_threshold:
            return None

        logger.debug(
            "%s: sol=%s btc=%s total=%s profit=%s",
            label, sol_price, btc_price, total_cost, expected_profit,
        )
        return ArbitrageOpportunity(
            label=label,
            sol_price=sol_price,
            btc_price=btc_price,
            total_cost=total_cost,
            expected_profit=expected_profit,
            sol_token_id=sol_leg.token_id,
            btc_token_id=btc_leg.token_id,
            sol_condition_id=sol_condition_id,
            btc_condition_id=btc_condition_id,
        )
