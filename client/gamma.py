"""
Gamma API client for 15-minute market discovery. Pure REST, no SDK dependency.
"""

from __future__ import annotations

import json
import logging

import httpx

from client.errors import NetworkError, NotFoundError, ParseError
from scanner.models import Market

logger = logging.getLogger(__name__)

_TIMEOUT = 10.0


def _get(base_url: str, path: str, params: dict | None = None, timeout: float = _TIMEOUT) -> dict | list:
    """GET a Gamma endpoint. 404 -> NotFoundError, other failures -> NetworkError."""
    url = f"{base_url}{path}"
    try:
        resp = httpx.get(url, params=params, timeout=timeout)
    except httpx.HTTPError as e:
        raise NetworkError(f"GET {path} failed: {e}") from e
    if resp.status_code == 404:
        raise NotFoundError(f"GET {path}: not found")
    if resp.status_code >= 400:
        raise NetworkError(f"GET {path}: status {resp.status_code}")
    try:
        return resp.json()
    except ValueError as e:
        raise ParseError(f"GET {path}: invalid JSON body") from e


def _json_list(raw) -> list:
    """clobTokenIds / outcomes may arrive as a JSON-encoded string or a list."""
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return []
    return list(raw) if isinstance(raw, list) else []


def parse_market(m: dict, default_slug: str = "") -> Market:
    """Convert a raw Gamma market object to our Market model."""
    if not isinstance(m, dict):
        raise ParseError(f"market entry is not an object: {m!r}")
    condition_id = m.get("conditionId", m.get("condition_id", ""))
    slug = m.get("slug") or default_slug
    if not condition_id or not slug:
        raise ParseError("market missing conditionId or slug")

    token_ids = [str(t) for t in _json_list(m.get("clobTokenIds") or m.get("clob_token_ids"))]
    outcomes = [str(o) for o in _json_list(m.get("outcomes"))]
    tokens = tuple(zip(outcomes, token_ids)) if len(outcomes) == len(token_ids) else ()

    end_date = str(
        m.get("endDateIso")
        or m.get("endDateISO")
        or m.get("endDate")
        or m.get("end_date_iso")
        or ""
    )

    return Market(
        condition_id=condition_id,
        slug=slug,
        question=m.get("question", ""),
        active=bool(m.get("active", False)),
        closed=bool(m.get("closed", False)),
        end_date=end_date,
        tokens=tokens,
    )


def get_market_by_slug(gamma_host: str, slug: str, timeout: float = _TIMEOUT) -> Market:
    """
    Fetch a market by event slug (e.g. "btc-updown-15m-1767726000").
    The endpoint returns an event object; the first entry of its markets array is used.
    """
    event = _get(gamma_host, f"/events/slug/{slug}", timeout=timeout)
    if not isinstance(event, dict):
        raise ParseError(f"slug {slug}: expected event object")
    markets = event.get("markets")
    if not isinstance(markets, list) or not markets:
        raise ParseError(f"slug {slug}: no markets array found")
    market = parse_market(markets[0], default_slug=slug)
    logger.debug(
        "Gamma slug %s -> condition_id=%s active=%s closed=%s",
        slug, market.condition_id, market.active, market.closed,
    )
    return market
