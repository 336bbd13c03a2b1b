"""
Position sizing for two-leg up/down arbitrage: fixed dollar budget per opportunity.
"""

from __future__ import annotations

import logging

from scanner.models import ArbitrageOpportunity

logger = logging.getLogger(__name__)


def compute_position_size(opportunity: ArbitrageOpportunity, max_position_size: float) -> float:
    """
    Dollars to invest in one opportunity.

    A unit (one token of each leg) costs total_cost, so the budget buys
    max_position_size / total_cost units; the position is capped at the budget.
    Returns 0 when the opportunity has no positive cost.
    """
    cost_per_unit = float(opportunity.total_cost)
    if cost_per_unit <= 0:
        logger.warning("Skipping %s: non-positive cost per unit %.4f", opportunity.label, cost_per_unit)
        return 0.0
    units_affordable = max_position_size / cost_per_unit
    return min(max_position_size, units_affordable * cost_per_unit)


def compute_units(opportunity: ArbitrageOpportunity, position_size: float) -> float:
    """Number of matched leg pairs bought with *position_size* dollars."""
    cost_per_unit = float(opportunity.total_cost)
    if cost_per_unit <= 0:
        return 0.0
    return position_size / cost_per_unit


def settlement_payout(units: float, sol_won: bool, btc_won: bool) -> float:
    """
    Each winning leg redeems at $1 per unit:
      both won -> 2 x units, one won -> 1 x units, neither -> 0.
    """
    winners = int(sol_won) + int(btc_won)
    return float(winners) * units
