"""Tests for trusted proxy parsing."""

from ipaddress import IPv4Address, IPv4Network, IPv6Address, IPv6Network

import pytest

from real_ip.networks import (
    InvalidTrustedProxy,
    is_trusted,
    parse_trusted_proxies,
    parse_trusted_proxy,
)


class TestParseTrustedProxy:
    def test_single_ipv4_is_host_network(self):
        assert parse_trusted_proxy("10.0.0.1") == IPv4Network("10.0.0.1/32")

    def test_single_ipv6_is_host_network(self):
        assert parse_trusted_proxy("::1") == IPv6Network("::1/128")

    def test_cidr(self):
        assert parse_trusted_proxy(" 10.10.10.0/24 ") == IPv4Network("10.10.10.0/24")

    def test_host_bits_tolerated(self):
        assert parse_trusted_proxy("10.10.10.7/24") == IPv4Network("10.10.10.0/24")

    def test_address_and_network_objects(self):
        assert parse_trusted_proxy(IPv4Address("10.0.0.1")) == IPv4Network("10.0.0.1/32")
        net = IPv6Network("2001:db8::/32")
        assert parse_trusted_proxy(net) is net

    @pytest.mark.parametrize("value", ["", "localhost", "10.0.0.0/33", "[::1]"])
    def test_invalid(self, value):
        with pytest.raises(InvalidTrustedProxy, match="Invalid trusted proxy"):
            parse_trusted_proxy(value)

    def test_invalid_is_value_error(self):
        assert issubclass(InvalidTrustedProxy, ValueError)


class TestParseTrustedProxies:
    def test_comma_separated_string(self):
        assert parse_trusted_proxies("10.0.0.1, 10.10.10.0/24,,") == (
            IPv4Network("10.0.0.1/32"),
            IPv4Network("10.10.10.0/24"),
        )

    def test_empty_string(self):
        assert parse_trusted_proxies("") == ()

    def test_list(self):
        assert parse_trusted_proxies(["10.0.0.1", "::1"]) == (
            IPv4Network("10.0.0.1/32"),
            IPv6Network("::1/128"),
        )


class TestIsTrusted:
    def test_membership(self):
        trusted = parse_trusted_proxies(["10.0.0.1", "10.10.10.0/24"])
        assert is_trusted(IPv4Address("10.10.10.99"), trusted)
        assert is_trusted(IPv4Address("10.0.0.1"), trusted)
        assert not is_trusted(IPv4Address("10.0.0.2"), trusted)
        assert not is_trusted(IPv6Address("::1"), trusted)

    def test_empty(self):
        assert not is_trusted(IPv4Address("10.0.0.1"), ())
