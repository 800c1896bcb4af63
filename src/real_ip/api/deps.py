"""FastAPI binding for real client IP resolution.

``request.client.host`` is the directly connected peer, typically the
nearest reverse proxy.  The forwarding headers are only honoured as far
back as the configured trusted proxies reach::

    @router.get("/whoami")
    def whoami(client_ip: RealIPDep) -> str:
        return client_ip

Trusted proxies come from ``get_trusted_proxies`` and can be swapped in
tests via ``app.dependency_overrides[get_trusted_proxies] = ...``.
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Annotated

from fastapi import Depends, Request

from real_ip.configs.config import get_trusted_proxies
from real_ip.headers import get_forwarded_for, select_header
from real_ip.networks import IPNetwork
from real_ip.resolver import resolve

from .models import ResolvedIP

logger = logging.getLogger(__name__)

_DEFAULT_UNKNOWN_IP = "unknown"

TrustedProxiesDep = Annotated[tuple[IPNetwork, ...], Depends(get_trusted_proxies)]


def resolve_request(
    request: Request, trusted_proxies: tuple[IPNetwork, ...]
) -> ResolvedIP:
    """Resolve the client IP of *request* and report how it was found."""
    host = request.client.host if request.client else _DEFAULT_UNKNOWN_IP
    selected = select_header(request.headers)
    source = selected[0] if selected else None

    try:
        peer = ipaddress.ip_address(host)
    except ValueError:
        # No address to check against the trusted proxies, so no header
        # can be trusted either.
        logger.warning(
            "Peer is not an IP address, ignoring forwarding headers",
            extra={"remote_addr": host},
        )
        return ResolvedIP(ip=host, peer=host, source=source)

    hops = get_forwarded_for(request.headers)
    # never None: the chain always holds at least the peer
    client_ip = resolve(hops, peer, trusted_proxies)

    logger.debug(
        "Resolved client IP",
        extra={
            "client_ip": str(client_ip),
            "remote_addr": host,
            "header_source": source.value if source else None,
            "hop_count": len(hops),
        },
    )
    return ResolvedIP(
        ip=str(client_ip),
        peer=str(peer),
        source=source,
        hops=[str(hop) for hop in hops],
    )


def get_real_ip(request: Request, trusted_proxies: TrustedProxiesDep) -> str:
    """Extract the real client IP from the request.

    Usable as a FastAPI dependency::

        client_ip: str = Depends(get_real_ip)
    """
    return resolve_request(request, trusted_proxies).ip


RealIPDep = Annotated[str, Depends(get_real_ip)]
