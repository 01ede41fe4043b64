"""Host normalization, validation and main-domain derivation."""

from __future__ import annotations

import re

_HOST_PATTERN = re.compile(r"(?:[a-z0-9-]+\.)+[a-z0-9-]+")
_STRIPPED_PREFIXES = ("www.", "app.", "web.")

# Second-level suffixes registered under a country code, e.g. example.gov.cn.
_COMPOUND_SUFFIXES = frozenset({("gov", "cn"), ("com", "cn"), ("edu", "cn")})


def normalize_host(domain: str) -> str | None:
    """Return the ASCII, lowercased host for *domain* or ``None`` if it cannot be encoded.

    A leading ``www.``, ``app.`` or ``web.`` label is dropped once.
    """
    host = domain.strip()
    for separator in ("/", "?", "#"):
        host = host.split(separator, 1)[0]
    host = host.rsplit("@", 1)[-1].split(":", 1)[0].rstrip(".")
    if not host:
        return None
    try:
        host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    host = host.lower()
    for prefix in _STRIPPED_PREFIXES:
        if host.startswith(prefix) and len(host) > len(prefix):
            host = host[len(prefix):]
            break
    return host


def is_valid_host(host: str | None) -> bool:
    return bool(host) and _HOST_PATTERN.fullmatch(host) is not None


def get_main_domain(hostname: str) -> str:
    """Return the registrable domain of *hostname*.

    >>> get_main_domain("a.b.gov.cn")
    'b.gov.cn'
    >>> get_main_domain("shop.example.com")
    'example.com'
    """
    parts = hostname.split(".")
    if len(parts) > 2 and (parts[-2], parts[-1]) in _COMPOUND_SUFFIXES:
        return ".".join(parts[-3:])
    return ".".join(parts[-2:])
