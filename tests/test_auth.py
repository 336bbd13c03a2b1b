"""
Unit tests for client/auth.py -- CLOB client construction.
"""

from unittest.mock import MagicMock, patch

from client.auth import build_clob_client
from config import Config


class TestBuildClobClient:
    @patch("client.auth.ClobClient")
    def test_public_client_for_simulation(self, mock_cls):
        cfg = Config(clob_host="https://clob.test")
        build_clob_client(cfg)
        mock_cls.assert_called_once_with(host="https://clob.test", chain_id=137)
        mock_cls.return_value.create_or_derive_api_creds.assert_not_called()

    @patch("client.auth.ClobClient")
    def test_authenticated_client_derives_creds(self, mock_cls):
        instance = MagicMock()
        mock_cls.return_value = instance
        cfg = Config(
            private_key="0xkey",
            polymarket_profile_address="0xproxy",
            signature_type=2,
        )
        client = build_clob_client(cfg, authenticated=True)

        assert client is instance
        kwargs = mock_cls.call_args.kwargs
        assert kwargs["key"] == "0xkey"
        assert kwargs["funder"] == "0xproxy"
        assert kwargs["signature_type"] == 2
        instance.set_api_creds.assert_called_once_with(instance.create_or_derive_api_creds.return_value)

    @patch("client.auth.ClobClient")
    def test_missing_funder_passed_as_none(self, mock_cls):
        cfg = Config(private_key="0xkey", polymarket_profile_address="")
        build_clob_client(cfg, authenticated=True)
        assert mock_cls.call_args.kwargs["funder"] is None
