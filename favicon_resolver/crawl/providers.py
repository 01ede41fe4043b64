"""Third-party favicon services and the terminal placeholder glyph.

A provider is tried with the resolved host; the first HTTP-OK answer is served
as-is since it is already a single rendered icon. When every provider fails a
generated letter glyph is returned with a 404 status and a long cache
lifetime, marking a stable negative result.
"""

from __future__ import annotations

import logging
from html import escape
from typing import Mapping, Sequence

import requests

from ..config import settings
from ..io.models import IconResponse
from .fetch import RetryableHTTPStatusError, fetch

logger = logging.getLogger(__name__)

GOOGLE_SOURCE = "https://www.google.com/s2/favicons?domain={domain}"
DUCKDUCKGO_SOURCE = "https://icons.duckduckgo.com/ip3/{domain}.ico"

PROVIDER_SOURCES: tuple[str, ...] = (GOOGLE_SOURCE, DUCKDUCKGO_SOURCE)

_DEFAULT_PROVIDER_MIME = "image/x-icon"
_PLACEHOLDER_BG = "#cccccc"
_PLACEHOLDER_FG = "#000000"
_PLACEHOLDER_FONT_SIZE = 48


def cache_headers() -> dict[str, str]:
    return {"Cache-Control": f"public, max-age={settings.CACHE_MAX_AGE}"}


def fetch_from_source(
    source: str, domain: str, headers: Mapping[str, str] | None = None
) -> tuple[bytes, str] | None:
    """Return ``(data, mime)`` from one provider template, or ``None`` on failure."""
    url = source.format(domain=domain)
    logger.debug("fetch favicon from: %s", url)
    try:
        response = fetch(url, headers, retry=True)
    except (requests.RequestException, RetryableHTTPStatusError) as exc:
        logger.warning("Error fetching provider favicon %s: %s", url, exc)
        return None
    if not response.ok:
        logger.debug("Provider %s answered %s", url, response.status_code)
        return None
    mime = response.headers.get("Content-Type") or _DEFAULT_PROVIDER_MIME
    return response.content, mime


def query_providers(
    domain: str, sources: Sequence[str] = PROVIDER_SOURCES
) -> tuple[bytes, str] | None:
    """Try each provider in order and return the first successful icon."""
    for source in sources:
        found = fetch_from_source(source, domain)
        if found is not None:
            logger.info("icon source ok: %s", source.format(domain=domain))
            return found
    return None


def placeholder_svg(domain: str) -> bytes:
    """Return a square SVG showing the uppercased first character of *domain*."""
    size = settings.CANVAS_SIZE
    letter = escape(domain[:1].upper())
    svg = (
        f'<svg width="{size}" height="{size}" xmlns="http://www.w3.org/2000/svg">'
        f'<rect width="100%" height="100%" fill="{_PLACEHOLDER_BG}"/>'
        f'<text x="50%" y="50%" font-size="{_PLACEHOLDER_FONT_SIZE}" '
        f'text-anchor="middle" dominant-baseline="middle" fill="{_PLACEHOLDER_FG}">'
        f"{letter}</text></svg>"
    )
    return svg.encode("utf-8")


def placeholder_glyph(domain: str) -> IconResponse:
    return IconResponse(
        status=404,
        body=placeholder_svg(domain),
        content_type="image/svg+xml",
        headers=cache_headers(),
        source="placeholder",
    )


def provider_response(data: bytes, mime: str, source: str = "provider") -> IconResponse:
    return IconResponse(
        status=200,
        body=data,
        content_type=mime,
        headers=cache_headers(),
        source=source,
    )


def proxy_favicon(host: str, original_domain: str) -> IconResponse:
    """Serve *host*'s icon from an external provider or fall back to a glyph.

    The glyph letter comes from *original_domain*, the value as the caller
    supplied it before normalization.
    """
    logger.debug("Falling back to icon providers for %s", host)
    found = query_providers(host)
    if found is None:
        return placeholder_glyph(original_domain)
    data, mime = found
    return provider_response(data, mime)
