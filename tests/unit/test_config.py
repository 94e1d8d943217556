"""Unit tests for settings loading."""

import pytest

from alephium_voting.config import Settings
from alephium_voting.constants import (
    DEFAULT_EXPLORER_URL,
    DEFAULT_NODE_HOST,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WALLET_NAME,
    DEFAULT_WALLET_PASSWORD,
)


class TestSettingsFromEnv:
    """Test the Settings.from_env constructor."""

    def test_defaults_without_environment(self):
        """Test that the tutorial's local setup is the default."""
        settings = Settings.from_env({})

        assert settings.node_host == DEFAULT_NODE_HOST
        assert settings.explorer_url == DEFAULT_EXPLORER_URL
        assert settings.wallet_name == DEFAULT_WALLET_NAME
        assert settings.wallet_password == DEFAULT_WALLET_PASSWORD
        assert settings.poll_interval == DEFAULT_POLL_INTERVAL
        assert settings.request_timeout == DEFAULT_REQUEST_TIMEOUT

    def test_reads_variables(self):
        settings = Settings.from_env(
            {
                "ALEPHIUM_NODE_HOST": "http://10.0.0.2:22973/",
                "ALEPHIUM_EXPLORER_URL": "https://explorer.alephium.org/",
                "ALEPHIUM_WALLET_NAME": "wallet-2",
                "ALEPHIUM_WALLET_PASSWORD": "hunter2",
                "ALEPHIUM_POLL_INTERVAL": "2.5",
                "ALEPHIUM_REQUEST_TIMEOUT": "10",
            }
        )

        assert settings.node_host == "http://10.0.0.2:22973"
        assert settings.explorer_url == "https://explorer.alephium.org"
        assert settings.wallet_name == "wallet-2"
        assert settings.wallet_password == "hunter2"
        assert settings.poll_interval == 2.5
        assert settings.request_timeout == 10.0

    def test_reads_os_environ_by_default(self, monkeypatch):
        monkeypatch.setenv("ALEPHIUM_WALLET_NAME", "from-env")

        assert Settings.from_env().wallet_name == "from-env"

    @pytest.mark.parametrize("value", ["soon", "0", "-3", "nan", "inf"])
    def test_rejects_invalid_intervals(self, value: str):
        with pytest.raises(ValueError, match="ALEPHIUM_POLL_INTERVAL"):
            Settings.from_env({"ALEPHIUM_POLL_INTERVAL": value})

    def test_repr_hides_password(self):
        settings = Settings(wallet_password="hunter2")
        assert "hunter2" not in repr(settings)
