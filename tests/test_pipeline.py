import base64
import re

import pytest
import requests

from favicon_resolver import pipeline
from favicon_resolver.crawl import providers
from favicon_resolver.io.models import DiscoveryResult, IconCandidate
from favicon_resolver.pipeline import resolve_favicon

from conftest import DummyResponse, png_bytes


def _result(*candidates):
    return DiscoveryResult(
        url="https://example.com/", host="example.com", status=200, status_text="OK",
        candidates=tuple(candidates),
    )


@pytest.fixture
def no_network(monkeypatch):
    def forbidden(*args, **kwargs):
        raise AssertionError("network access attempted")

    monkeypatch.setattr(pipeline, "discover", forbidden)
    monkeypatch.setattr(pipeline, "fetch", forbidden)
    monkeypatch.setattr(pipeline, "fetch_from_source", forbidden)
    monkeypatch.setattr(providers, "fetch", forbidden)


@pytest.mark.parametrize("domain", ["localhost", "bad_domain.com", "..", "exa mple.com", "-"])
@pytest.mark.parametrize("larger, min_size, auto_padding", [(False, 0, False), (True, 64, True)])
def test_malformed_domain_yields_placeholder(no_network, domain, larger, min_size, auto_padding):
    response = resolve_favicon(domain, larger=larger, min_size=min_size, auto_padding=auto_padding)

    assert response.status == 404
    assert response.source == "placeholder"
    assert response.content_type == "image/svg+xml"
    assert response.headers["Cache-Control"] == "public, max-age=86400"


def test_larger_fast_path_returns_provider_bytes(monkeypatch):
    seen = []

    def fake_source(source, domain, headers=None):
        seen.append(source.format(domain=domain))
        return b"ICO", "image/x-icon"

    def forbidden(*args, **kwargs):
        raise AssertionError("waterfall should not run")

    monkeypatch.setattr(pipeline, "fetch_from_source", fake_source)
    monkeypatch.setattr(pipeline, "discover", forbidden)

    response = resolve_favicon("App.Example.com", larger=True)

    assert seen == ["https://icons.duckduckgo.com/ip3/example.com.ico"]
    assert response.status == 200
    assert response.body == b"ICO"
    assert response.source == "fast-path"


def test_total_exhaustion_uses_original_domain_letter(monkeypatch):
    monkeypatch.setattr(pipeline, "discover", lambda host, headers=None: None)

    def failing(url, headers=None, retry=False):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(providers, "fetch", failing)

    response = resolve_favicon("web.quartz.example")

    assert response.status == 404
    assert b">W</text>" in response.body


def test_inline_candidate_with_transparent_edge_is_padded(monkeypatch):
    data = png_bytes(transparent=[(0, 0)])
    href = "data:image/png;base64," + base64.b64encode(data).decode()
    monkeypatch.setattr(
        pipeline, "discover", lambda host, headers=None: _result(IconCandidate(href=href))
    )

    response = resolve_favicon("example.com", auto_padding=True)

    assert response.status == 200
    assert response.content_type == "image/svg+xml"
    assert response.headers["Cache-Control"] == "public, max-age=86400"
    assert re.fullmatch(r"\d+ ms", response.headers["X-Execution-Time"])
    assert b'<pattern id="img" x="10" y="10" width="80" height="80"' in response.body


def test_padding_is_skipped_without_auto_padding(monkeypatch):
    data = png_bytes(transparent=[(0, 0)])
    href = "data:image/png;base64," + base64.b64encode(data).decode()
    monkeypatch.setattr(
        pipeline, "discover", lambda host, headers=None: _result(IconCandidate(href=href))
    )
    monkeypatch.setattr(
        pipeline, "has_transparent_edges",
        lambda data: pytest.fail("analysis should be skipped"),
    )

    response = resolve_favicon("example.com")

    assert b'<pattern id="img" x="0" y="0" width="100" height="100"' in response.body


def test_remote_candidate_is_selected_and_fetched_with_forwarded_headers(monkeypatch):
    candidates = (
        IconCandidate(href="https://example.com/16.png", sizes="16x16"),
        IconCandidate(href="https://example.com/64.png", sizes="64x64"),
    )
    captured = {}

    def fake_discover(host, headers=None):
        captured["discover_headers"] = headers
        return _result(*candidates)

    def fake_fetch(url, headers=None):
        captured["url"] = url
        captured["fetch_headers"] = headers
        return DummyResponse(png_bytes(), 200, {"Content-Type": "image/png"})

    monkeypatch.setattr(pipeline, "discover", fake_discover)
    monkeypatch.setattr(pipeline, "fetch", fake_fetch)
    monkeypatch.setattr(pipeline, "fetch_from_source", lambda *a, **k: None)

    response = resolve_favicon(
        "example.com",
        larger=True,
        headers={"Host": "resolver.local", "content-length": "0", "User-Agent": "UA"},
    )

    assert response.status == 200
    assert captured["url"] == "https://example.com/64.png"
    assert captured["discover_headers"] == {"User-Agent": "UA"}
    assert captured["fetch_headers"] == {"User-Agent": "UA"}


def test_non_ok_selected_icon_yields_placeholder(monkeypatch):
    monkeypatch.setattr(
        pipeline, "discover",
        lambda host, headers=None: _result(IconCandidate(href="https://example.com/gone.ico")),
    )
    monkeypatch.setattr(pipeline, "fetch", lambda url, headers=None: DummyResponse(b"", 404))

    response = resolve_favicon("example.com")

    assert response.status == 404
    assert response.source == "placeholder"


def test_selected_icon_network_error_is_500(monkeypatch):
    monkeypatch.setattr(
        pipeline, "discover",
        lambda host, headers=None: _result(IconCandidate(href="https://example.com/x.ico")),
    )

    def boom(url, headers=None):
        raise requests.ConnectionError("reset")

    monkeypatch.setattr(pipeline, "fetch", boom)

    response = resolve_favicon("example.com")

    assert response.status == 500
    assert response.body == b"Failed to fetch the icon"
    assert response.content_type.startswith("text/plain")


def test_broken_inline_candidate_is_500(monkeypatch):
    monkeypatch.setattr(
        pipeline, "discover",
        lambda host, headers=None: _result(IconCandidate(href="data:image/png;base64,@@@")),
    )

    response = resolve_favicon("example.com")

    assert response.status == 500
