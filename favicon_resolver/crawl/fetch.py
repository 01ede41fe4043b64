"""HTTP fetching utilities for the favicon resolution pipeline."""

from __future__ import annotations

import base64
import logging
import re
from threading import Lock
from typing import Mapping
from urllib.parse import unquote_to_bytes, urlparse

import requests
from requests import Response, Session
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import settings

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = (settings.CONNECT_TIMEOUT, settings.FETCH_TIMEOUT)
_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
_STRIPPED_HEADERS = frozenset({"host", "content-length"})
_DATA_URI_PATTERN = re.compile(r"^data:([^;,]*)((?:;[^;,]*)*),(.*)$", re.DOTALL)

_session_lock = Lock()
_session: Session | None = None


class RetryableHTTPStatusError(Exception):
    """Raised for HTTP status codes that should trigger a retry."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Server returned status {status_code}")
        self.status_code = status_code


class InvalidDataURIError(ValueError):
    """Raised when an inline ``data:`` reference cannot be decoded."""


def _get_session() -> Session:
    """Return a shared requests session configured with default headers."""
    global _session
    if _session is None:
        with _session_lock:
            if _session is None:
                session = requests.Session()
                session.headers.update(
                    {
                        "User-Agent": _USER_AGENT,
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                        "Accept-Language": "en-US,en;q=0.5",
                    }
                )
                session.max_redirects = settings.MAX_REDIRECTS
                _session = session
    return _session


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, requests.Timeout):
        return False
    return isinstance(exc, (requests.ConnectionError, RetryableHTTPStatusError))


# Only opted-in calls retry; page and icon fetches stay a single round trip.
_retryer = Retrying(
    stop=stop_after_attempt(max(1, settings.PROVIDER_FETCH_ATTEMPTS)),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=1),
    retry=retry_if_exception(_is_retryable),
    before_sleep=before_sleep_log(logger, logging.DEBUG),
    reraise=True,
)


def _ensure_http_scheme(url: str) -> str:
    """Ensure *url* is qualified with an HTTP scheme, defaulting to https."""
    cleaned = url.strip()
    if not cleaned:
        return cleaned
    if cleaned.startswith(("http://", "https://")):
        return cleaned
    if cleaned.startswith("//"):
        return f"https:{cleaned}"
    parsed = urlparse(cleaned)
    if parsed.scheme:
        return cleaned
    return f"https://{cleaned}"


def forwardable_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Return *headers* without the ones that describe the inbound request."""
    if not headers:
        return {}
    return {
        key: value
        for key, value in headers.items()
        if key.lower() not in _STRIPPED_HEADERS
    }


def _get_once(url: str, headers: Mapping[str, str] | None, retry: bool) -> Response:
    session = _get_session()
    response = session.get(
        url,
        headers=dict(headers or {}),
        timeout=_DEFAULT_TIMEOUT,
        allow_redirects=True,
    )
    if retry and 500 <= response.status_code < 600:
        response.close()
        raise RetryableHTTPStatusError(response.status_code)
    return response


def fetch(
    url: str,
    headers: Mapping[str, str] | None = None,
    retry: bool = False,
) -> Response:
    """GET *url* following redirects in a single attempt.

    With *retry* dropped connections and 5xx answers are re-attempted; a 5xx
    surfaces as ``RetryableHTTPStatusError`` once attempts run out. Raises
    ``requests.RequestException`` when the request cannot complete.
    """
    target_url = _ensure_http_scheme(url)
    if not retry:
        return _get_once(target_url, headers, retry=False)
    return _retryer(lambda: _get_once(target_url, headers, retry=True))


def fetch_html(url: str, headers: Mapping[str, str] | None = None) -> tuple[str, Response]:
    """Fetch *url* and return the decoded body together with the response."""
    response = fetch(url, headers)
    if not response.encoding:
        response.encoding = response.apparent_encoding or "utf-8"
    return response.text, response


def is_data_uri(value: str) -> bool:
    return value[:5].lower() == "data:"


def decode_data_uri(uri: str) -> tuple[bytes, str | None]:
    """Decode an inline ``data:`` reference into bytes and its declared MIME type."""
    match = _DATA_URI_PATTERN.match(uri.strip())
    if not match:
        raise InvalidDataURIError("Malformed data URI")
    mime, params, data = match.groups()
    if ";base64" in params.lower():
        try:
            payload = base64.b64decode(re.sub(r"\s+", "", data), validate=True)
        except (base64.binascii.Error, ValueError) as exc:
            raise InvalidDataURIError("Invalid base64 payload") from exc
    else:
        payload = unquote_to_bytes(data)
    if not payload:
        raise InvalidDataURIError("Empty data URI payload")
    return payload, (mime.strip().lower() or None)
