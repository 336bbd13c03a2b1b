"""
CLOB client construction: public read-only client or wallet-authenticated trading client.
"""

from py_clob_client.client import ClobClient
from py_clob_client.clob_types import ApiCreds

from config import Config


def build_clob_client(cfg: Config, authenticated: bool = False) -> ClobClient:
    """
    Build a ClobClient.
      - Simulation: public endpoints only (prices, market metadata), no wallet.
      - Live: L1 client with private key, L2 API credentials derived (created
        on first use), ready to sign and post orders.
    """
    if not authenticated:
        return ClobClient(host=cfg.clob_host, chain_id=cfg.chain_id)

    client = ClobClient(
        host=cfg.clob_host,
        chain_id=cfg.chain_id,
        key=cfg.private_key,
        signature_type=cfg.signature_type,
        funder=cfg.polymarket_profile_address or None,
    )

    creds: ApiCreds = client.create_or_derive_api_creds()
    client.set_api_creds(creds)

    return client
