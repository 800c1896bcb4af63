"""Hop extraction from reverse-proxy headers.

Three header families are understood, checked in priority order:

1. ``Forwarded`` (RFC 7239) -- ``for=192.0.2.1, for="[2001:db8::1]:4711"``
2. ``X-Forwarded-For`` -- ``192.0.2.1, 10.10.10.10``
3. ``X-Real-IP`` -- a single address

Exactly one family is used per request.  The first one *present* wins,
even when its value yields no addresses at all: a request carrying an
empty ``Forwarded`` header never falls back to ``X-Forwarded-For``.

Every extractor returns hops ordered from the originating client to the
nearest proxy.  Entries that do not parse as an IP address are dropped;
nothing here raises on malformed input.

Note that this module performs no validation against clients forging
the headers; see :mod:`real_ip.resolver` for that.
"""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from .networks import IPAddress

_QUOTE = '"'
_ESCAPE = "\\"
_ELEMENT_SEPARATOR = ","
_PAIR_SEPARATOR = ";"
_FOR_PARAM = "for"
_MAX_PORT = 65535

# RFC 7230 token / quoted-string, as used by RFC 7239 forwarded-pair.
_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_QUOTED_STRING = r'"(?:[^"\\]|\\.)*"'
_PAIR_RE = re.compile(rf"(?P<name>{_TOKEN})=(?P<value>{_TOKEN}|{_QUOTED_STRING})")

# node = nodename [ ":" node-port ]; IPv6 names must be bracketed.
_NODE_RE = re.compile(
    r"(?P<name>\[[^\]]*\]|[^:\[\]]+)(?::(?P<port>[0-9]{1,5}|_[A-Za-z0-9._-]+))?"
)

# Header values that are not visible ASCII are not text.
_VISIBLE_ASCII_RE = re.compile(r"[\t\x20-\x7e]*")


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------


def unquote(text: str) -> str:
    """Strip one layer of double quotes, resolving backslash escapes.

    Scanning stops at the first unescaped closing quote; anything after
    it is discarded.  Unquoted text is returned as is.
    """
    if not text.startswith(_QUOTE):
        return text

    chars: list[str] = []
    escaped = False
    for char in text[1:]:
        if escaped:
            chars.append(char)
            escaped = False
        elif char == _ESCAPE:
            escaped = True
        elif char == _QUOTE:
            break
        else:
            chars.append(char)
    return "".join(chars)


def strip_brackets(text: str) -> str:
    """Strip the ``[...]`` around an IPv6 literal, if present."""
    if text.startswith("[") and text.endswith("]"):
        return text[1:-1]
    return text


def _parse_ip(text: str) -> IPAddress | None:
    try:
        return ipaddress.ip_address(strip_brackets(unquote(text)))
    except ValueError:
        return None


def _split_outside_quotes(text: str, separator: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif in_quotes and char == _ESCAPE:
            escaped = True
        elif char == _QUOTE:
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


# ---------------------------------------------------------------------------
# Forwarded (RFC 7239)
# ---------------------------------------------------------------------------


def _parse_forwarded_element(element: str) -> dict[str, str] | None:
    """Parse ``a=b;c="d"`` into a dict, or None when any pair is malformed."""
    params: dict[str, str] = {}
    for pair in _split_outside_quotes(element, _PAIR_SEPARATOR):
        pair = pair.strip()
        if not pair:
            continue
        match = _PAIR_RE.fullmatch(pair)
        if match is None:
            return None
        name = match["name"].lower()
        if name in params:
            return None
        params[name] = unquote(match["value"])
    return params


def _parse_node(node: str) -> IPAddress | None:
    """Return the address of a node identifier.

    ``unknown``, obfuscated names (``_hidden``) and malformed nodes all
    yield None.
    """
    match = _NODE_RE.fullmatch(node)
    if match is None:
        return None
    port = match["port"]
    if port and port.isdigit() and int(port) > _MAX_PORT:
        return None
    name = match["name"]
    try:
        if name.startswith("["):
            return ipaddress.IPv6Address(name[1:-1])
        return ipaddress.IPv4Address(name)
    except ValueError:
        return None


def extract_forwarded_header(header_value: str) -> tuple[IPAddress, ...]:
    """Get the addresses from the ``for`` parameters of a ``forwarded`` header.

    >>> extract_forwarded_header("for=10.10.10.10, for=10.10.10.20;proto=https")
    (IPv4Address('10.10.10.10'), IPv4Address('10.10.10.20'))
    """
    hops: list[IPAddress] = []
    for element in _split_outside_quotes(header_value, _ELEMENT_SEPARATOR):
        params = _parse_forwarded_element(element)
        if params is None or _FOR_PARAM not in params:
            continue
        address = _parse_node(params[_FOR_PARAM])
        if address is not None:
            hops.append(address)
    return tuple(hops)


# ---------------------------------------------------------------------------
# X-Forwarded-For / X-Real-IP
# ---------------------------------------------------------------------------


def extract_x_forwarded_for_header(header_value: str) -> tuple[IPAddress, ...]:
    """Get the addresses from an ``x-forwarded-for`` header.

    >>> extract_x_forwarded_for_header("10.10.10.10,10.10.10.20")
    (IPv4Address('10.10.10.10'), IPv4Address('10.10.10.20'))
    """
    hops: list[IPAddress] = []
    for segment in header_value.split(_ELEMENT_SEPARATOR):
        address = _parse_ip(segment.strip())
        if address is not None:
            hops.append(address)
    return tuple(hops)


def extract_real_ip_header(header_value: str) -> tuple[IPAddress, ...]:
    """Get the address from an ``x-real-ip`` header (zero or one element)."""
    address = _parse_ip(header_value)
    return () if address is None else (address,)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class HeaderSource(str, Enum):
    """Supported header families, declared in priority order."""

    FORWARDED = "forwarded"
    X_FORWARDED_FOR = "x-forwarded-for"
    X_REAL_IP = "x-real-ip"


_EXTRACTORS: dict[HeaderSource, Callable[[str], tuple[IPAddress, ...]]] = {
    HeaderSource.FORWARDED: extract_forwarded_header,
    HeaderSource.X_FORWARDED_FOR: extract_x_forwarded_for_header,
    HeaderSource.X_REAL_IP: extract_real_ip_header,
}


def _lookup(headers: Mapping[Any, Any], name: str) -> Any:
    value = headers.get(name)
    if value is not None:
        return value
    # Plain dicts are case-sensitive; Starlette ``Headers`` already are not.
    for key, value in headers.items():
        if isinstance(key, bytes):
            key = key.decode("latin-1")
        if str(key).lower() == name:
            return value
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError:
            return ""
    if not isinstance(value, str) or _VISIBLE_ASCII_RE.fullmatch(value) is None:
        return ""
    return value


def select_header(headers: Mapping[Any, Any]) -> tuple[HeaderSource, str] | None:
    """Pick the highest-priority header family present in *headers*.

    Returns the family and its raw value as text, or None when no
    supported header is present.
    """
    for source in HeaderSource:
        value = _lookup(headers, source.value)
        if value is not None:
            return source, _as_text(value)
    return None


def get_forwarded_for(headers: Mapping[Any, Any]) -> tuple[IPAddress, ...]:
    """Extract the "forwarded for" chain from a request's headers."""
    selected = select_header(headers)
    if selected is None:
        return ()
    source, value = selected
    return _EXTRACTORS[source](value)


__all__ = [
    "HeaderSource",
    "extract_forwarded_header",
    "extract_real_ip_header",
    "extract_x_forwarded_for_header",
    "get_forwarded_for",
    "select_header",
    "strip_brackets",
    "unquote",
]
