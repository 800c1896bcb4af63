"""Trusted proxy ranges.

A trusted proxy is configured either as a single address (treated as a
``/32`` or ``/128``) or as a CIDR block.  Host bits in a CIDR entry are
ignored, so ``10.10.10.7/24`` trusts the whole ``10.10.10.0/24`` range.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

_LIST_SEPARATOR = ","


class InvalidTrustedProxy(ValueError):
    """Raised when a trusted proxy entry is neither an address nor a CIDR."""


def parse_trusted_proxy(value: str | IPAddress | IPNetwork) -> IPNetwork:
    """Convert one trusted proxy entry into an ``ipaddress`` network."""
    if isinstance(value, ipaddress.IPv4Network | ipaddress.IPv6Network):
        return value
    if isinstance(value, ipaddress.IPv4Address | ipaddress.IPv6Address):
        return ipaddress.ip_network(value)

    text = str(value).strip()
    try:
        return ipaddress.ip_network(text, strict=False)
    except ValueError as exc:
        raise InvalidTrustedProxy(f"Invalid trusted proxy: {value!r}") from exc


def parse_trusted_proxies(
    values: str | Iterable[str | IPAddress | IPNetwork],
) -> tuple[IPNetwork, ...]:
    """Parse a list of trusted proxies.

    A plain string is read as a comma-separated list, the format used by
    environment variables.  Blank entries are ignored.
    """
    if isinstance(values, str):
        values = [part for part in values.split(_LIST_SEPARATOR) if part.strip()]
    return tuple(parse_trusted_proxy(value) for value in values)


def is_trusted(address: IPAddress, trusted_proxies: Iterable[IPNetwork]) -> bool:
    """Return True when *address* falls inside any trusted range."""
    return any(address in network for network in trusted_proxies)


__all__ = [
    "IPAddress",
    "IPNetwork",
    "InvalidTrustedProxy",
    "is_trusted",
    "parse_trusted_proxies",
    "parse_trusted_proxy",
]
