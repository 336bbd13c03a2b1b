"""
Pending-trade ledger and settlement sweep.

Each SOL/BTC period pair has at most one PendingTrade. Repeat opportunities
for the same pair accumulate into it; a sweep removes it once both markets
have closed and books the realized profit.
"""

from __future__ import annotations

import logging
import threading
import time

from client.cache import MarketResultCache
from client.platform import PriceSource
from executor.engine import place_entry_orders, sell_winning_legs
from executor.sizing import compute_position_size, compute_units, settlement_payout
from monitor.display import print_opportunity, print_settlement
from monitor.pnl import PnLTracker
from scanner.models import ArbitrageOpportunity, PendingTrade, SettlementResult

logger = logging.getLogger(__name__)

# Markets close 15 minutes after open; checking earlier is wasted polling
MIN_SETTLEMENT_AGE_SEC = 14 * 60


class TradeLedger:
    """
    Owns pending trades and the session P&L counters.

    One lock guards both. A sweep holds it for the whole pass, so recording
    waits behind a running sweep.
    """

    def __init__(
        self,
        source: PriceSource,
        max_position_size: float,
        paper_trading: bool = True,
        result_cache: MarketResultCache | None = None,
        min_settlement_age_sec: float = MIN_SETTLEMENT_AGE_SEC,
        monotonic=time.monotonic,
    ):
        self._source = source
        self._max_position_size = max_position_size
        self._paper_trading = paper_trading
        self._results = result_cache if result_cache is not None else MarketResultCache(source)
        self._min_age = min_settlement_age_sec
        self._monotonic = monotonic

        self._lock = threading.Lock()
        self._pending: dict[tuple[str, str], PendingTrade] = {}
        self._pnl = PnLTracker()

    @property
    def paper_trading(self) -> bool:
        return self._paper_trading

    # -- Entry --

    def record_opportunity(self, opportunity: ArbitrageOpportunity) -> float:
        """
        Size the opportunity, place orders in live mode, then accumulate it
        into the ledger. Returns the units recorded.
        """
        position_size = compute_position_size(opportunity, self._max_position_size)
        units = compute_units(opportunity, position_size)
        if units <= 0:
            return 0.0

        print_opportunity(opportunity, position_size, units, simulated=self._paper_trading)

        if not self._paper_trading:
            # Bookkeeping below does not depend on these orders being accepted
            place_entry_orders(self._source, opportunity, units)

        with self._lock:
            existing = self._pending.get(opportunity.key)
            if existing is not None:
                existing.units += units
                existing.investment_amount += position_size
                logger.info(
                    "   Accumulated trade: total units %.2f, total investment $%.2f",
                    existing.units, existing.investment_amount,
                )
            else:
                self._pending[opportunity.key] = PendingTrade(
                    sol_token_id=opportunity.sol_token_id,
                    btc_token_id=opportunity.btc_token_id,
                    sol_condition_id=opportunity.sol_condition_id,
                    btc_condition_id=opportunity.btc_condition_id,
                    investment_amount=position_size,
                    units=units,
                    created_at=self._monotonic(),
                )
            self._pnl.record_entry(position_size)
            trades = self._pnl.trades_executed

        logger.info(
            "   %s trade recorded - investment $%.2f | expected profit $%.4f | trades %d",
            "Simulated" if self._paper_trading else "Live",
            position_size, float(opportunity.expected_profit) * units, trades,
        )
        return units

    # -- Settlement --

    def sweep_settlements(self) -> list[SettlementResult]:
        """
        Settle every pending trade old enough to have closed whose two
        markets both report closed. Others stay for the next sweep.
        """
        settled: list[SettlementResult] = []
        with self._lock:
            if self._pending:
                logger.debug("Checking %d pending trades for market closure...", len(self._pending))

            now = self._monotonic()
            for key, trade in list(self._pending.items()):
                age = trade.age_sec(now)
                if age < self._min_age:
                    logger.debug(
                        "Trade %s too recent (age %.1fs, need %.1fs), skipping",
                        key, age, self._min_age,
                    )
                    continue

                logger.info("Checking market closure for trade %s (age %.1f minutes)", key, age / 60.0)
                sol_closed, sol_won = self._results.result(trade.sol_condition_id, trade.sol_token_id)
                btc_closed, btc_won = self._results.result(trade.btc_condition_id, trade.btc_token_id)
                logger.info(
                    "   SOL market %s: closed=%s winner=%s | BTC market %s: closed=%s winner=%s",
                    trade.sol_condition_id[:16], sol_closed, sol_won,
                    trade.btc_condition_id[:16], btc_closed, btc_won,
                )

                if not (sol_closed and btc_closed):
                    logger.info("   Markets not both closed yet, will check again")
                    continue

                if not self._paper_trading:
                    sell_winning_legs(self._source, trade, sol_won, btc_won)

                payout = settlement_payout(trade.units, sol_won, btc_won)
                result = SettlementResult(
                    key=key,
                    sol_won=sol_won,
                    btc_won=btc_won,
                    units=trade.units,
                    investment_amount=trade.investment_amount,
                    payout=payout,
                    realized_profit=payout - trade.investment_amount,
                )
                self._pnl.record_settlement(result)
                del self._pending[key]
                settled.append(result)
                print_settlement(result, self._pnl.total_profit)

            if settled:
                logger.info(
                    "Sweep settled %d trade(s) | total profit $%.2f | still pending %d",
                    len(settled), self._pnl.total_profit, len(self._pending),
                )
        return settled

    # -- Reads --

    def stats(self) -> tuple[float, int]:
        """(total realized profit, opportunities recorded)."""
        with self._lock:
            return self._pnl.total_profit, self._pnl.trades_executed

    def summary(self) -> dict:
        with self._lock:
            summary = self._pnl.summary()
            summary["pending_trades"] = len(self._pending)
            return summary

    def pending_trades(self) -> dict[tuple[str, str], PendingTrade]:
        """Copy of the pending trades, safe to inspect without the lock."""
        with self._lock:
            return {
                key: PendingTrade(
                    sol_token_id=t.sol_token_id,
                    btc_token_id=t.btc_token_id,
                    sol_condition_id=t.sol_condition_id,
                    btc_condition_id=t.btc_condition_id,
                    investment_amount=t.investment_amount,
                    units=t.units,
                    created_at=t.created_at,
                )
                for key, t in self._pending.items()
            }

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)
