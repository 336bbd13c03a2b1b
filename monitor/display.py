"""
Clean, scannable console output for the up/down monitor.

Pure formatting functions that emit structured log lines using box-drawing
characters. No side effects beyond logging. All data arrives via arguments.
"""

from __future__ import annotations

import logging
import time

from scanner.models import ArbitrageOpportunity, Market, SettlementResult

logger = logging.getLogger(__name__)

# Box-drawing characters
_TOP = "┌"  # ┌
_MID = "│"  # │
_BOT = "└"  # └
_DASH = "─"  # ─
_VERT_SEP = "│"  # │ (inline separator)

_MAX_QUESTION_LEN = 50


def _truncate(text: str, length: int = _MAX_QUESTION_LEN) -> str:
    """Truncate text to *length* chars, appending ellipsis if trimmed."""
    if len(text) <= length:
        return text
    return text[: length - 1] + "…"


def _mode_label(paper_trading: bool) -> str:
    return "SIMULATION" if paper_trading else "LIVE"


def _divider(title: str) -> str:
    ts = time.strftime("%H:%M:%S")
    label = f" {title} "
    left_dashes = _DASH * 2
    right_pad = max(2, 60 - len(left_dashes) - len(label) - len(ts) - 3)
    return f"{left_dashes}{label}{_DASH * right_pad} {ts} {_DASH * 2}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def print_startup(
    paper_trading: bool,
    min_profit_threshold: float,
    max_position_size: float,
    poll_interval_sec: float,
    sol_market: Market,
    btc_market: Market,
) -> None:
    """Compact config block emitted once after discovery."""
    logger.info(_divider("SOL/BTC 15m up/down monitor"))
    logger.info(
        "  Mode: %-12s Profit >= $%.4f  Position <= $%.2f  Interval: %.1fs",
        _mode_label(paper_trading), min_profit_threshold, max_position_size, poll_interval_sec,
    )
    logger.info("  %s SOL: %s", _TOP, _truncate(sol_market.question or sol_market.slug))
    logger.info("  %s      %s", _MID, sol_market.condition_id)
    logger.info("  %s BTC: %s", _MID, _truncate(btc_market.question or btc_market.slug))
    logger.info("  %s      %s", _BOT, btc_market.condition_id)


def print_opportunity(
    opp: ArbitrageOpportunity,
    position_size: float,
    units: float,
    simulated: bool,
) -> None:
    """Boxed block for one accepted opportunity."""
    logger.info(
        "  %s ARBITRAGE %s %s %s",
        _TOP, opp.label, _VERT_SEP, "simulated" if simulated else "live",
    )
    sol_leg, btc_leg = opp.label.split("+", 1)
    logger.info("  %s  %-9s ask $%.4f  token %s", _MID, sol_leg, opp.sol_price, opp.sol_token_id[:16])
    logger.info("  %s  %-9s ask $%.4f  token %s", _MID, btc_leg, opp.btc_price, opp.btc_token_id[:16])
    logger.info(
        "  %s  Cost $%.4f %s Profit $%.4f/unit (%.2f%%)",
        _MID, opp.total_cost, _VERT_SEP, opp.expected_profit, opp.profit_pct,
    )
    logger.info(
        "  %s  Position $%.2f %s Units %.2f",
        _BOT, position_size, _VERT_SEP, units,
    )


def print_settlement(result: SettlementResult, total_profit: float) -> None:
    """Boxed block for one settled trade."""
    if result.sol_won and result.btc_won:
        outcome = "both legs won"
    elif result.sol_won or result.btc_won:
        outcome = "SOL leg won" if result.sol_won else "BTC leg won"
    else:
        outcome = "both legs lost"
    logger.info("  %s SETTLED %s %s", _TOP, outcome, _VERT_SEP)
    logger.info(
        "  %s  Units %.2f %s Invested $%.2f %s Payout $%.2f",
        _MID, result.units, _VERT_SEP, result.investment_amount, _VERT_SEP, result.payout,
    )
    logger.info(
        "  %s  Realized $%.2f %s Session P&L $%.2f",
        _BOT, result.realized_profit, _VERT_SEP, total_profit,
    )


def print_rollover(period: int, sol_market: Market, btc_market: Market) -> None:
    """Emit a divider when the tracked pair switches to a new period."""
    logger.info(_divider(f"Period {period}"))
    logger.info("  SOL %s %s BTC %s", sol_market.slug, _VERT_SEP, btc_market.slug)


def print_summary(summary: dict, paper_trading: bool) -> None:
    """Close the session with the P&L counters."""
    logger.info(_divider("Session summary"))
    logger.info(
        "  %s Mode: %s %s Duration %.0fs",
        _TOP, _mode_label(paper_trading), _VERT_SEP, summary.get("session_duration_sec", 0.0),
    )
    logger.info(
        "  %s  Trades %d %s Invested $%.2f %s Pending %d",
        _MID, summary.get("trades_executed", 0), _VERT_SEP,
        summary.get("total_invested", 0.0), _VERT_SEP, summary.get("pending_trades", 0),
    )
    logger.info(
        "  %s  Settled %d (%d won / %d lost, %.1f%%)",
        _MID, summary.get("settled_trades", 0), summary.get("winning_trades", 0),
        summary.get("losing_trades", 0), summary.get("win_rate_pct", 0.0),
    )
    logger.info("  %s Total realized P&L: $%.2f", _BOT, summary.get("total_profit", 0.0))
