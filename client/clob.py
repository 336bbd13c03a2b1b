"""
CLOB REST client wrapper. Thin layer converting SDK payloads and errors to our domain models.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal, InvalidOperation

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import OrderArgs, OrderType
from py_clob_client.exceptions import PolyApiException, PolyException
from py_clob_client.order_builder.constants import BUY, SELL

from client.errors import NetworkError, ParseError
from scanner.models import ZERO, MarketMetadata, MarketToken, OrderResponse, Side

logger = logging.getLogger(__name__)

# Retry config for flaky CLOB API (HTTP/2 connection resets, SSL errors)
_MAX_RETRIES = 3
_RETRY_BACKOFF_SEC = 1.0
REQUEST_TIMEOUT_SEC = 10.0

# Patch py_clob_client's shared httpx client:
#   - Disable HTTP/2: the CLOB server sends GOAWAY frames that crash the shared
#     connection pool (httpcore.RemoteProtocolError: ConnectionTerminated)
#   - Bound every call at 10s so a stalled request degrades one quote, not the loop
import httpx as _httpx
from py_clob_client.http_helpers import helpers as _clob_helpers
_clob_helpers._http_client = _httpx.Client(http2=False, timeout=REQUEST_TIMEOUT_SEC)


def _is_connection_error(exc: Exception) -> bool:
    if isinstance(exc, _httpx.TransportError):
        return True
    err_str = str(exc)
    return "Request exception" in err_str or "status_code=None" in err_str


def _retry_api_call(fn, *args, max_retries: int = _MAX_RETRIES, **kwargs):
    """
    Call a py_clob_client method, retrying connection-level errors with exponential
    backoff. Whatever still fails is raised as NetworkError.
    """
    for attempt in range(max_retries):
        try:
            return fn(*args, **kwargs)
        except (PolyApiException, _httpx.HTTPError) as exc:
            # Only retry on connection-level errors (status_code=None), not 4xx/5xx
            if not _is_connection_error(exc) or attempt == max_retries - 1:
                raise NetworkError(str(exc)) from exc
            wait = _RETRY_BACKOFF_SEC * (2 ** attempt)
            logger.debug("CLOB API retry %d/%d after %.1fs: %s", attempt + 1, max_retries, wait, exc)
            time.sleep(wait)
        except PolyException as exc:
            # Missing L1/L2 auth and other client-side SDK refusals
            raise NetworkError(str(exc.msg)) from exc
    raise NetworkError("retries exhausted")


def _to_decimal(raw, field_name: str) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ParseError(f"invalid {field_name}: {raw!r}") from e


def get_price(client: ClobClient, token_id: str, side: Side) -> Decimal:
    """
    Current quoted price for a token. side=BUY is what we pay (ask),
    side=SELL is what we receive (bid).
    """
    resp = _retry_api_call(client.get_price, token_id, side.value)
    if not isinstance(resp, dict) or "price" not in resp:
        raise ParseError(f"price response for {token_id} has no price field")
    price = _to_decimal(resp["price"], "price")
    logger.debug("Price for token %s (side=%s): %s", token_id, side.value, price)
    return price


def parse_market_metadata(raw: dict) -> MarketMetadata:
    """Convert a CLOB /markets/{condition_id} payload to MarketMetadata."""
    if not isinstance(raw, dict):
        raise ParseError("market response is not an object")
    condition_id = raw.get("condition_id")
    raw_tokens = raw.get("tokens")
    if not condition_id or not isinstance(raw_tokens, list):
        raise ParseError("market response missing condition_id or tokens")

    tokens = []
    for t in raw_tokens:
        if not isinstance(t, dict):
            raise ParseError(f"malformed token entry in market {condition_id}: {t!r}")
        token_id = t.get("token_id")
        if not token_id:
            raise ParseError(f"token without token_id in market {condition_id}")
        price = t.get("price")
        tokens.append(MarketToken(
            token_id=str(token_id),
            outcome=str(t.get("outcome", "")),
            price=_to_decimal(price, "token price") if price is not None else None,
            winner=bool(t.get("winner", False)),
        ))

    return MarketMetadata(
        condition_id=condition_id,
        active=bool(raw.get("active", False)),
        closed=bool(raw.get("closed", False)),
        tokens=tuple(tokens),
        slug=raw.get("market_slug", ""),
        question=raw.get("question", ""),
    )


def get_market(client: ClobClient, condition_id: str) -> MarketMetadata:
    """Fetch market metadata (closed flag, tokens, winner flags) by condition id."""
    raw = _retry_api_call(client.get_market, condition_id)
    market = parse_market_metadata(raw)
    logger.debug(
        "Market %s: active=%s closed=%s tokens=%d",
        market.condition_id, market.active, market.closed, len(market.tokens),
    )
    for token in market.tokens:
        logger.debug(
            "  token outcome=%s price=%s token_id=%s winner=%s",
            token.outcome, token.price, token.token_id, token.winner,
        )
    return market


def get_tick_size(client: ClobClient, token_id: str) -> Decimal:
    """Minimum price increment for a token (SDK caches it per token)."""
    raw = _retry_api_call(client.get_tick_size, token_id)
    tick = _to_decimal(raw, "tick size")
    if not ZERO < tick < Decimal("0.5"):
        raise ParseError(f"tick size for {token_id} out of range: {tick}")
    return tick


def clamp_to_tick_range(price: float, tick: Decimal) -> float:
    """The venue only accepts prices in [tick, 1 - tick]."""
    clamped = min(max(Decimal(str(price)), tick), Decimal("1") - tick)
    return float(clamped)


def create_limit_order(
    client: ClobClient,
    token_id: str,
    side: Side,
    price: float,
    size: float,
) -> object:
    """Create and sign a limit order. Returns a SignedOrder ready to post."""
    args = OrderArgs(
        token_id=token_id,
        price=price,
        size=size,
        side=BUY if side == Side.BUY else SELL,
    )
    return client.create_order(args)


def post_order(
    client: ClobClient,
    signed_order: object,
    order_type: OrderType = OrderType.GTC,
) -> dict:
    """Post a signed order to the CLOB. Returns the response dict."""
    return _retry_api_call(client.post_order, signed_order, order_type)


def submit_order(
    client: ClobClient,
    token_id: str,
    side: Side,
    size: float,
    price: float,
    order_type: str = "GTC",
) -> OrderResponse:
    """
    Sign and post a limit order, normalizing the response.

    The price is clamped into the token's tick range first, so a $1.00
    settlement sell goes out at 1 - tick. Every SDK failure surfaces as a
    PriceSourceError.
    """
    # OrderType is a plain class of string constants in the SDK, not an Enum
    resolved_type = getattr(OrderType, order_type.upper(), None)
    if not isinstance(resolved_type, str):
        raise ParseError(f"unknown order type {order_type!r}")

    tick = get_tick_size(client, token_id)
    limit_price = clamp_to_tick_range(price, tick)
    if limit_price != price:
        logger.info(
            "%s price %.4f for token %s clamped to %.4f (tick %s)",
            side.value, price, token_id, limit_price, tick,
        )

    try:
        signed = create_limit_order(client, token_id, side, limit_price, size)
    except (PolyApiException, _httpx.HTTPError) as e:
        raise NetworkError(f"order for {token_id} could not be prepared: {e}") from e
    except Exception as e:
        # The SDK signals price/tick/fee validation with a bare Exception
        raise ParseError(f"order for {token_id} rejected before posting: {e}") from e

    resp = post_order(client, signed, resolved_type)
    if not isinstance(resp, dict):
        raise ParseError("order response is not an object")
    status = str(resp.get("status") or ("error" if resp.get("success") is False else "unknown"))
    return OrderResponse(
        status=status,
        order_id=resp.get("orderID", resp.get("order_id")) or None,
        message=resp.get("errorMsg", resp.get("message")) or None,
    )
