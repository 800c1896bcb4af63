"""Test configuration reading from multiple sources."""

import os
from ipaddress import IPv4Network
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from real_ip.configs import config as config_module
from real_ip.configs.config import AppConfig, get_trusted_proxies
from real_ip.configs.system import ProxyConfig


@pytest.fixture(autouse=True)
def _clear_trusted_proxies_cache():
    get_trusted_proxies.cache_clear()
    yield
    get_trusted_proxies.cache_clear()


class TestConfigSources:
    """Test configuration loading from multiple sources."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = AppConfig()

        assert config.proxy.trusted_proxies == ()
        assert config.logging.level == "INFO"

    def test_env_vars_comma_separated(self):
        env_vars = {
            "REAL_IP_PROXY__TRUSTED_PROXIES": "10.0.0.1, 10.10.10.0/24",
            "REAL_IP_LOGGING__LEVEL": "debug",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

        assert config.proxy.trusted_proxies == (
            IPv4Network("10.0.0.1/32"),
            IPv4Network("10.10.10.0/24"),
        )
        assert config.logging.level == "debug"

    def test_invalid_trusted_proxy_fails_validation(self):
        env_vars = {"REAL_IP_PROXY__TRUSTED_PROXIES": "10.0.0.1,not-an-ip"}

        with patch.dict(os.environ, env_vars, clear=False):
            with pytest.raises(ValidationError, match="Invalid trusted proxy"):
                AppConfig()

    def test_override_yaml_file(self, tmp_path, monkeypatch):
        override = tmp_path / "override.yaml"
        override.write_text(
            "proxy:\n  trusted_proxies:\n    - 192.168.0.0/16\n"
            "logging:\n  json_output: false\n",
            encoding="utf-8",
        )
        monkeypatch.setattr(config_module, "OVERRIDE_CONFIG_FILE", override)

        config = AppConfig()

        assert config.proxy.trusted_proxies == (IPv4Network("192.168.0.0/16"),)
        assert config.logging.json_output is False

    def test_trusted_proxies_parsed_once(self):
        env_vars = {"REAL_IP_PROXY__TRUSTED_PROXIES": "10.0.0.1"}

        with patch.dict(os.environ, env_vars, clear=False):
            first = get_trusted_proxies()

        with patch.dict(os.environ, {"REAL_IP_PROXY__TRUSTED_PROXIES": "10.0.0.2"}):
            assert get_trusted_proxies() is first

        assert first == (IPv4Network("10.0.0.1/32"),)


class TestProxyConfig:
    def test_list_input(self):
        config = ProxyConfig(trusted_proxies=["10.0.0.1", "10.10.10.7/24"])
        assert config.trusted_proxies == (
            IPv4Network("10.0.0.1/32"),
            IPv4Network("10.10.10.0/24"),
        )

    def test_none_is_empty(self):
        assert ProxyConfig(trusted_proxies=None).trusted_proxies == ()
