"""Resolve the best available icon for a domain into a servable response."""

from __future__ import annotations

import logging
import time
from typing import Mapping

import requests

from .crawl.domains import is_valid_host, normalize_host
from .crawl.fetch import InvalidDataURIError, decode_data_uri, fetch, forwardable_headers, is_data_uri
from .crawl.providers import (
    DUCKDUCKGO_SOURCE,
    cache_headers,
    fetch_from_source,
    placeholder_glyph,
    provider_response,
    proxy_favicon,
)
from .crawl.waterfall import discover
from .extract.compose import compose_svg
from .extract.select_icon import select_icon
from .extract.transparency import has_transparent_edges
from .io.models import IconCandidate, IconResponse, SelectionPreferences

logger = logging.getLogger(__name__)

ERROR_BODY = b"Failed to fetch the icon"
_DEFAULT_ICON_MIME = "image/png"


def resolve_favicon(
    domain: str,
    larger: bool = False,
    min_size: int = 0,
    auto_padding: bool = False,
    headers: Mapping[str, str] | None = None,
) -> IconResponse:
    """Run discovery, selection and composition for *domain*.

    Invalid domains and total exhaustion yield the placeholder glyph (404).
    A chosen icon that cannot be fetched, decoded or composed yields a plain
    text 500 response.
    """
    started = time.monotonic()

    host = normalize_host(domain)
    if host is None or not is_valid_host(host):
        logger.debug("Rejected malformed domain %r", domain)
        return placeholder_glyph(domain)

    if larger:
        found = fetch_from_source(DUCKDUCKGO_SOURCE, host)
        if found is not None:
            data, mime = found
            return provider_response(data, mime, source="fast-path")

    outbound = forwardable_headers(headers)
    result = discover(host, outbound)
    if result is None:
        return proxy_favicon(host, domain)

    preferences = SelectionPreferences(prefer_largest=larger, min_width=min_size)
    selected = select_icon(result.candidates, preferences)
    if selected is None:
        return proxy_favicon(host, domain)
    logger.debug("Selected %s (%s) for %s", selected.href[:120], selected.sizes, host)

    try:
        loaded = load_icon(selected, outbound)
    except (requests.RequestException, InvalidDataURIError) as exc:
        logger.error("Error fetching the selected icon %s: %s", selected.href[:120], exc)
        return error_response()
    if loaded is None:
        return placeholder_glyph(domain)
    data, mime = loaded

    try:
        add_padding = auto_padding and has_transparent_edges(data)
        rendered = compose_svg(data, mime, add_padding)
    except Exception:  # noqa: BLE001 - no further fallback exists at this point
        logger.exception("Failed to compose icon for %s", host)
        return error_response()

    response_headers = cache_headers()
    response_headers["X-Execution-Time"] = f"{elapsed_ms(started)} ms"
    return IconResponse(
        status=200,
        body=rendered.payload,
        content_type=rendered.mime_type,
        headers=response_headers,
    )


def load_icon(
    candidate: IconCandidate, headers: Mapping[str, str] | None = None
) -> tuple[bytes, str] | None:
    """Return the bytes and MIME type behind *candidate*.

    Returns ``None`` when the remote server answers with a non-OK status.
    Raises ``requests.RequestException`` or ``InvalidDataURIError`` when the
    payload cannot be obtained at all.
    """
    if is_data_uri(candidate.href):
        data, mime = decode_data_uri(candidate.href)
        return data, mime or _DEFAULT_ICON_MIME

    response = fetch(candidate.href, headers)
    if not response.ok:
        logger.warning("Selected icon %s answered %s", candidate.href, response.status_code)
        return None
    mime = response.headers.get("Content-Type") or _DEFAULT_ICON_MIME
    return response.content, mime


def error_response() -> IconResponse:
    return IconResponse(
        status=500,
        body=ERROR_BODY,
        content_type="text/plain; charset=utf-8",
        source="error",
    )


def elapsed_ms(started: float) -> int:
    return int(round((time.monotonic() - started) * 1000))
