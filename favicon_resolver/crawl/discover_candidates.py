"""Discover icon link declarations within fetched documents."""

from __future__ import annotations

import logging
from typing import Iterator, Mapping
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..io.models import UNKNOWN_SIZE, DiscoveryResult, IconCandidate
from .fetch import fetch_html, is_data_uri

logger = logging.getLogger(__name__)

_FAILED_STATUS = 500
_FAILED_STATUS_TEXT = "Failed to fetch icons"


def discover_icon_candidates(html: str, base_url: str) -> list[IconCandidate]:
    """Return every icon ``<link>`` in *html*, in document order, with absolute hrefs."""
    soup = BeautifulSoup(html or "", "lxml")
    parsed = urlparse(base_url)
    return list(_extract_link_icons(soup, parsed.scheme or "https", parsed.netloc))


def get_favicons(url: str, headers: Mapping[str, str] | None = None) -> DiscoveryResult:
    """Fetch *url* and return the icon candidates declared by the page.

    Relative references are resolved against the final URL after redirects.
    The body is inspected whatever the status code. Network and parse errors
    are logged and reported as an empty result with status 500.
    """
    logger.debug("Discovering icons at %s", url)
    try:
        html, response = fetch_html(url, headers)
        candidates = discover_icon_candidates(html, response.url)
    except requests.RequestException as exc:
        logger.warning("Request error fetching %s: %s", url, exc)
        return _failed_result(url)
    except Exception:  # noqa: BLE001 - a broken page must not abort the waterfall
        logger.exception("Unexpected error discovering icons at %s", url)
        return _failed_result(url)

    final = urlparse(response.url)
    return DiscoveryResult(
        url=response.url,
        host=final.netloc,
        status=response.status_code,
        status_text=response.reason or "",
        candidates=tuple(candidates),
    )


def _failed_result(url: str) -> DiscoveryResult:
    return DiscoveryResult(
        url=url,
        host=urlparse(url).netloc,
        status=_FAILED_STATUS,
        status_text=_FAILED_STATUS_TEXT,
    )


def _extract_link_icons(soup: BeautifulSoup, scheme: str, host: str) -> Iterator[IconCandidate]:
    for link in soup.find_all("link"):
        if not any("icon" in value for value in _get_rel_values(link)):
            continue
        href = link.get("href")
        if not isinstance(href, str) or not href.strip():
            continue
        yield IconCandidate(
            href=make_absolute(href.strip(), scheme, host),
            sizes=_get_sizes(link),
        )


def make_absolute(href: str, scheme: str, host: str) -> str:
    """Resolve *href* against the page origin ``scheme://host``.

    Paths that are not path-absolute are resolved from the site root, not from
    the document's directory.
    """
    if href.startswith(("http://", "https://")) or is_data_uri(href):
        return href
    if href.startswith("//"):
        return f"{scheme}:{href}"
    path = href if href.startswith("/") else f"/{href}"
    return f"{scheme}://{host}{path}"


def _get_rel_values(tag: Tag) -> list[str]:
    rel = tag.get("rel")
    values: list[str] = []
    if isinstance(rel, str):
        values.append(rel.lower())
    elif isinstance(rel, (list, tuple)):
        for item in rel:
            if isinstance(item, str):
                values.append(item.lower())
    return values


def _get_sizes(tag: Tag) -> str:
    sizes = tag.get("sizes")
    if isinstance(sizes, (list, tuple)):
        sizes = " ".join(item for item in sizes if isinstance(item, str))
    if isinstance(sizes, str) and sizes.strip():
        return sizes.strip()
    return UNKNOWN_SIZE
