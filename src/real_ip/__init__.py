"""Get the "real IP" of an incoming request.

Uses the ``forwarded``, ``x-forwarded-for`` or ``x-real-ip`` headers set
by reverse proxies, accepting them only from configured trusted proxies.
"""

from .headers import (
    HeaderSource,
    extract_forwarded_header,
    extract_real_ip_header,
    extract_x_forwarded_for_header,
    get_forwarded_for,
    select_header,
)
from .networks import (
    IPAddress,
    IPNetwork,
    InvalidTrustedProxy,
    parse_trusted_proxies,
    parse_trusted_proxy,
)
from .resolver import real_ip, resolve

__all__ = [
    "HeaderSource",
    "IPAddress",
    "IPNetwork",
    "InvalidTrustedProxy",
    "extract_forwarded_header",
    "extract_real_ip_header",
    "extract_x_forwarded_for_header",
    "get_forwarded_for",
    "parse_trusted_proxies",
    "parse_trusted_proxy",
    "real_ip",
    "resolve",
    "select_header",
]
