"""
Discovery of the live SOL and BTC 15-minute up/down markets.

Markets are published under deterministic slugs, "{prefix}-updown-15m-{period}",
where period is the unix start of the 15-minute window. A freshly opened
period may not be live yet, so the three preceding periods are tried as well.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable

from client.errors import InvariantViolation, NotFoundError, PriceSourceError
from client.platform import PriceSource
from monitor.registry import PERIOD_SEC, period_start
from scanner.models import Market

logger = logging.getLogger(__name__)

SOL_PREFIX = "sol"
BTC_PREFIX = "btc"
FALLBACK_PERIODS = 3


def period_slug(prefix: str, period: int) -> str:
    return f"{prefix}-updown-15m-{period}"


def discover_market(
    source: PriceSource,
    name: str,
    prefix: str,
    now: float | None = None,
    exclude: Iterable[str] = (),
) -> Market:
    """
    First active, not-closed market among the current period and the
    FALLBACK_PERIODS before it whose condition id is not in *exclude*.

    Raises NotFoundError when no candidate qualifies.
    """
    now = time.time() if now is None else now
    current = period_start(now)
    excluded = set(exclude)

    for offset in range(FALLBACK_PERIODS + 1):
        slug = period_slug(prefix, current - offset * PERIOD_SEC)
        try:
            market = source.fetch_market_by_slug(slug)
        except NotFoundError:
            logger.debug("%s slug %s not found", name, slug)
            continue
        except PriceSourceError as e:
            logger.warning("%s slug %s lookup failed: %s", name, slug, e)
            continue

        if not market.active or market.closed:
            logger.debug(
                "%s slug %s skipped (active=%s closed=%s)",
                name, slug, market.active, market.closed,
            )
            continue
        if market.condition_id in excluded:
            logger.debug("%s slug %s skipped (condition id %s excluded)", name, slug, market.condition_id)
            continue

        logger.info("Found active %s market: %s (ends %s)", name, slug, market.end_date or "unknown")
        logger.info("   %s condition_id: %s", name, market.condition_id)
        return market

    raise NotFoundError(
        f"no active {name} 15m market in the last {FALLBACK_PERIODS + 1} periods (from {current})"
    )


def discover_markets(
    source: PriceSource,
    now: float | None = None,
    exclude: Iterable[str] = (),
) -> tuple[Market, Market]:
    """
    Discover the (SOL, BTC) pair. Raises NotFoundError if either is missing
    and InvariantViolation if both resolve to the same condition id.
    """
    now = time.time() if now is None else now
    excluded = set(exclude)
    logger.info("Searching for active 15m markets (period %d)...", period_start(now))

    sol = discover_market(source, "SOL", SOL_PREFIX, now, excluded)
    btc = discover_market(source, "BTC", BTC_PREFIX, now, excluded)
    if sol.condition_id == btc.condition_id:
        raise InvariantViolation(f"SOL and BTC discovered the same condition id {sol.condition_id}")
    return sol, btc


def markets_from_condition_ids(
    source: PriceSource,
    sol_condition_id: str,
    btc_condition_id: str,
) -> tuple[Market, Market]:
    """
    Build the pair from pinned condition ids using CLOB metadata, skipping
    slug discovery. Propagates PriceSourceError from the metadata fetch.
    """
    if sol_condition_id == btc_condition_id:
        raise InvariantViolation(f"SOL and BTC condition ids are identical: {sol_condition_id}")

    markets = []
    for name, condition_id in (("SOL", sol_condition_id), ("BTC", btc_condition_id)):
        meta = source.fetch_market_metadata(condition_id)
        markets.append(Market(
            condition_id=condition_id,
            slug=meta.slug or condition_id,
            question=meta.question,
            active=meta.active,
            closed=meta.closed,
            tokens=tuple((t.outcome, t.token_id) for t in meta.tokens),
        ))
        logger.info("Using configured %s market: %s", name, condition_id)
    return markets[0], markets[1]
