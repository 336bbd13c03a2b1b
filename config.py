"""
Configuration from a JSON file plus environment variables. Fail-fast on invalid values.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"

# Never written back to a generated config file
_SECRET_FIELDS = {"private_key", "polymarket_profile_address"}
# Section names accepted from nested config files; their keys are flattened
_SECTIONS = ("polymarket", "trading")


class Config(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "frozen": True, "extra": "ignore"}

    # Credentials (required for live trading only)
    private_key: str = Field(default="", description="Polygon wallet private key (hex)")
    polymarket_profile_address: str = Field(default="", description="Polymarket proxy address")
    signature_type: int = Field(default=1, ge=0, le=2)

    # API endpoints
    clob_host: str = "https://clob.polymarket.com"
    gamma_host: str = "https://gamma-api.polymarket.com"
    chain_id: int = 137  # Polygon mainnet

    # Trading thresholds
    # Minimum 1 - (leg_a + leg_b) margin for an opportunity to be taken
    min_profit_threshold: float = Field(default=0.01, ge=0, lt=1.0)
    # Dollars invested per accepted opportunity
    max_position_size: float = Field(default=100.0, gt=0)

    # Pin markets instead of slug discovery (both must be set to take effect)
    sol_condition_id: str | None = None
    btc_condition_id: str | None = None

    # Timing
    poll_interval_sec: float = Field(default=1.0, gt=0)

    # Modes
    paper_trading: bool = True
    log_level: str = "INFO"


def _flatten(raw: dict) -> dict:
    """Accept both flat files and the sectioned {"polymarket": {...}, "trading": {...}} layout."""
    flat: dict = {}
    for key, value in raw.items():
        if key in _SECTIONS and isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value
    if "check_interval_ms" in flat and "poll_interval_sec" not in flat:
        flat["poll_interval_sec"] = float(flat.pop("check_interval_ms")) / 1000.0
    return flat


def load_config(path: str | Path | None = DEFAULT_CONFIG_PATH) -> Config:
    """
    Load and validate config. Values from the JSON file override environment
    variables. A missing file is created with the non-secret defaults.
    Raises pydantic.ValidationError on invalid values.
    """
    if path is None:
        return Config()

    path = Path(path)
    if path.exists():
        raw = json.loads(path.read_text())
        if not isinstance(raw, dict):
            raise ValueError(f"{path}: top-level JSON value must be an object")
        return Config(**_flatten(raw))

    cfg = Config()
    path.write_text(cfg.model_dump_json(indent=2, exclude=_SECRET_FIELDS) + "\n")
    logger.info("Wrote default config to %s", path)
    return cfg
