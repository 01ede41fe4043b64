"""Ordered discovery attempts across protocol and domain variants."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Mapping

from ..io.models import DiscoveryResult
from .discover_candidates import get_favicons
from .domains import get_main_domain
from .fetch import forwardable_headers

logger = logging.getLogger(__name__)

DiscoverFn = Callable[..., DiscoveryResult]

_PROTOCOLS = ("https", "http")


def iter_attempts(host: str) -> Iterator[str]:
    """Yield the page URLs tried for *host*, most preferred first."""
    main_domain = get_main_domain(host)
    hosts = [host] if main_domain == host else [host, main_domain]
    for target in hosts:
        for protocol in _PROTOCOLS:
            yield f"{protocol}://{target}/"


def discover(
    host: str,
    headers: Mapping[str, str] | None = None,
    discover_fn: DiscoverFn = get_favicons,
) -> DiscoveryResult | None:
    """Return the first attempt for *host* that yields at least one candidate.

    Candidates are never merged across attempts. Returns ``None`` once every
    variant has come back empty.
    """
    outbound = forwardable_headers(headers)
    for url in iter_attempts(host):
        result = discover_fn(url, headers=outbound)
        logger.debug(
            "Attempt %s -> status %s, %d candidate(s)",
            url,
            result.status,
            len(result.candidates),
        )
        if result.found:
            return result
    logger.info("No icon declarations found for %s", host)
    return None
