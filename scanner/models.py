"""
Data models for the SOL/BTC up/down monitor. Pure data, minimal behavior.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

ZERO = Decimal("0")
ONE = Decimal("1")


class Side(Enum):
    BUY = "BUY"
    SELL = "SELL"


class Outcome(Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Market:
    condition_id: str
    slug: str
    question: str = ""
    active: bool = True
    closed: bool = False
    end_date: str = ""  # ISO 8601 from Gamma (empty = unknown)
    # (outcome label, token id) pairs as reported by Gamma at discovery
    tokens: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class MarketToken:
    token_id: str
    outcome: str
    price: Decimal | None = None
    winner: bool = False


@dataclass(frozen=True)
class MarketMetadata:
    """CLOB view of one market: open/closed plus per-token winner flags."""

    condition_id: str
    active: bool
    closed: bool
    tokens: tuple[MarketToken, ...] = ()
    slug: str = ""
    question: str = ""

    def winner_for(self, token_id: str) -> bool:
        for token in self.tokens:
            if token.token_id == token_id:
                return token.winner
        return False


@dataclass(frozen=True)
class TokenQuote:
    token_id: str
    bid: Decimal | None = None  # SELL quote: what we get when selling
    ask: Decimal | None = None  # BUY quote: what we pay when buying

    @property
    def ask_price(self) -> Decimal:
        """Ask, or zero when absent. Callers decide on presence, not on this."""
        return self.ask if self.ask is not None else ZERO


@dataclass(frozen=True)
class InstrumentQuotes:
    name: str
    condition_id: str
    up: TokenQuote | None = None
    down: TokenQuote | None = None


@dataclass(frozen=True)
class MarketSnapshot:
    sol: InstrumentQuotes
    btc: InstrumentQuotes
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ArbitrageOpportunity:
    label: str  # e.g. "SOL_UP+BTC_DOWN"
    sol_price: Decimal
    btc_price: Decimal
    total_cost: Decimal
    expected_profit: Decimal
    sol_token_id: str
    btc_token_id: str
    sol_condition_id: str
    btc_condition_id: str
    timestamp: float = field(default_factory=time.time)

    @property
    def key(self) -> tuple[str, str]:
        return (self.sol_condition_id, self.btc_condition_id)

    @property
    def profit_pct(self) -> Decimal:
        if self.total_cost <= 0:
            return ZERO
        return self.expected_profit / self.total_cost * 100


@dataclass
class PendingTrade:
    """Open two-leg position for one SOL/BTC period pair. Accumulates in place."""

    sol_token_id: str
    btc_token_id: str
    sol_condition_id: str
    btc_condition_id: str
    investment_amount: float
    units: float
    created_at: float = field(default_factory=time.monotonic)

    @property
    def key(self) -> tuple[str, str]:
        return (self.sol_condition_id, self.btc_condition_id)

    def age_sec(self, now: float | None = None) -> float:
        now = time.monotonic() if now is None else now
        return now - self.created_at


@dataclass(frozen=True)
class SettlementResult:
    key: tuple[str, str]
    sol_won: bool
    btc_won: bool
    units: float
    investment_amount: float
    payout: float
    realized_profit: float
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class OrderResponse:
    status: str
    order_id: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status.lower() not in ("", "error", "failed", "rejected")
