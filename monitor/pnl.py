"""
Realized P&L and trade counters for the session. In-memory only.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from scanner.models import SettlementResult

logger = logging.getLogger(__name__)


@dataclass
class PnLTracker:
    """
    Aggregate counters owned by the TradeLedger. Not thread-safe on its own;
    the ledger mutates it only while holding its lock.
    """

    total_profit: float = 0.0
    trades_executed: int = 0
    total_invested: float = 0.0
    settled_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0

    _session_start: float = field(default_factory=time.time)

    def record_entry(self, position_size: float) -> None:
        """Count one accepted opportunity and its invested dollars."""
        self.trades_executed += 1
        self.total_invested += position_size

    def record_settlement(self, result: SettlementResult) -> None:
        """Fold a settled trade into the running totals."""
        self.settled_trades += 1
        self.total_profit += result.realized_profit
        if result.realized_profit >= 0:
            self.winning_trades += 1
        else:
            self.losing_trades += 1

    @property
    def win_rate(self) -> float:
        if self.settled_trades == 0:
            return 0.0
        return (self.winning_trades / self.settled_trades) * 100.0

    @property
    def session_duration_sec(self) -> float:
        return time.time() - self._session_start

    def summary(self) -> dict:
        """Return a summary dict of current P&L state."""
        return {
            "total_profit": round(self.total_profit, 2),
            "trades_executed": self.trades_executed,
            "total_invested": round(self.total_invested, 2),
            "settled_trades": self.settled_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "win_rate_pct": round(self.win_rate, 1),
            "session_duration_sec": round(self.session_duration_sec, 0),
        }
