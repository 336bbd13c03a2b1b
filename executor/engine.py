"""
Live order placement for entries and settlement exits.

Order failures never raise: they are logged and the ledger's bookkeeping
proceeds regardless of what the venue accepted.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from client.errors import PriceSourceError
from client.platform import PriceSource
from scanner.models import ArbitrageOpportunity, OrderResponse, PendingTrade, Side

logger = logging.getLogger(__name__)

# Winning tokens redeem at $1 once resolved; clob.submit_order clamps it to 1 - tick
SETTLEMENT_SELL_PRICE = 1.0
ORDER_TYPE = "GTC"


def _place(
    source: PriceSource,
    leg_name: str,
    token_id: str,
    side: Side,
    size: float,
    price: float,
) -> OrderResponse | None:
    """Submit one limit order. Returns None if it could not be placed."""
    try:
        resp = source.submit_order(token_id, side, round(size, 6), price, ORDER_TYPE)
    except PriceSourceError as e:
        logger.warning("Failed to place %s %s order: %s", leg_name, side.value, e)
        return None
    if resp.ok:
        logger.info(
            "%s %s order placed: id=%s status=%s size=%.6f price=%.4f",
            leg_name, side.value, resp.order_id, resp.status, size, price,
        )
    else:
        logger.warning(
            "%s %s order not accepted: status=%s message=%s",
            leg_name, side.value, resp.status, resp.message,
        )
    return resp


def place_entry_orders(
    source: PriceSource,
    opportunity: ArbitrageOpportunity,
    units: float,
) -> tuple[OrderResponse | None, OrderResponse | None]:
    """
    Buy *units* of each leg at its quoted ask. Both orders are submitted
    concurrently; either may fail independently.
    """
    sol_leg, btc_leg = opportunity.label.split("+", 1)
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="entry") as pool:
        sol_future = pool.submit(
            _place, source, sol_leg, opportunity.sol_token_id,
            Side.BUY, units, float(opportunity.sol_price),
        )
        btc_future = pool.submit(
            _place, source, btc_leg, opportunity.btc_token_id,
            Side.BUY, units, float(opportunity.btc_price),
        )
        return sol_future.result(), btc_future.result()


def sell_winning_legs(
    source: PriceSource,
    trade: PendingTrade,
    sol_won: bool,
    btc_won: bool,
) -> list[OrderResponse | None]:
    """Sell the full unit size of each winning leg at $1.00."""
    responses: list[OrderResponse | None] = []
    if sol_won:
        responses.append(_place(
            source, "SOL winner", trade.sol_token_id,
            Side.SELL, trade.units, SETTLEMENT_SELL_PRICE,
        ))
    if btc_won:
        responses.append(_place(
            source, "BTC winner", trade.btc_token_id,
            Side.SELL, trade.units, SETTLEMENT_SELL_PRICE,
        ))
    if not sol_won and not btc_won:
        logger.warning("Both legs lost - nothing to sell (both worth $0)")
    return responses
