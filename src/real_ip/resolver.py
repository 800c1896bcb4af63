"""Trust-chain resolution of the real client IP.

To stop clients from spoofing their address, only proxies listed as
trusted may contribute hops.  The chain declared by the headers is
extended with the transport peer and walked from the nearest hop
outward; the first hop that is not a trusted proxy is the client.

With nested reverse proxies every proxy in the chain has to be trusted
for the earliest address to be accepted::

    # 192.0.2.1 -> 10.10.10.10 -> 10.0.0.1 -> us
    real_ip(
        {"x-forwarded-for": "192.0.2.1, 10.10.10.10"},
        IPv4Address("10.0.0.1"),
        parse_trusted_proxies(["10.0.0.1", "10.10.10.0/24"]),
    )  # -> IPv4Address("192.0.2.1")
"""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable, Mapping
from typing import Any

from .headers import get_forwarded_for
from .networks import IPAddress, IPNetwork, is_trusted


def resolve(
    hops: Iterable[IPAddress],
    peer: IPAddress,
    trusted_proxies: Iterable[IPNetwork],
) -> IPAddress | None:
    """Return the first untrusted hop, scanning from *peer* backwards.

    When every hop is trusted the earliest one is returned.  Hops are
    taken positionally; repeated addresses are not collapsed.
    """
    chain = (*hops, peer)
    trusted_proxies = tuple(trusted_proxies)

    for hop in reversed(chain):
        if not is_trusted(hop, trusted_proxies):
            return hop

    # all hops were trusted, return the first one
    return chain[0] if chain else None


def real_ip(
    headers: Mapping[Any, Any],
    remote: IPAddress | str,
    trusted_proxies: Iterable[IPNetwork],
) -> IPAddress | None:
    """Get the real IP of an incoming request.

    Args:
        headers: Request headers (case-insensitive lookup).
        remote: Address of the directly connected peer.
        trusted_proxies: Ranges of proxies allowed to set forwarding
            headers.

    Raises:
        ValueError: if *remote* is text that is not an IP address.
    """
    if isinstance(remote, str):
        remote = ipaddress.ip_address(remote)
    return resolve(get_forwarded_for(headers), remote, trusted_proxies)


__all__ = ["real_ip", "resolve"]
