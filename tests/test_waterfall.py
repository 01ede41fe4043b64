import requests

from favicon_resolver.crawl import fetch as fetch_module
from favicon_resolver.crawl.waterfall import discover, iter_attempts
from favicon_resolver.io.models import DiscoveryResult, IconCandidate


class FakeDiscover:
    """Records calls and answers with candidates only for the given URLs."""

    def __init__(self, hits=()):
        self.hits = set(hits)
        self.calls = []

    def __call__(self, url, headers=None):
        self.calls.append((url, headers))
        candidates = (IconCandidate(href=f"{url}favicon.ico"),) if url in self.hits else ()
        status = 200 if url in self.hits else 500
        return DiscoveryResult(url=url, host="", status=status, status_text="", candidates=candidates)

    @property
    def urls(self):
        return [url for url, _ in self.calls]


def test_iter_attempts_order_with_main_domain():
    assert list(iter_attempts("shop.example.com")) == [
        "https://shop.example.com/",
        "http://shop.example.com/",
        "https://example.com/",
        "http://example.com/",
    ]


def test_iter_attempts_skips_main_domain_when_identical():
    assert list(iter_attempts("example.com")) == ["https://example.com/", "http://example.com/"]


def test_secure_hit_short_circuits_everything_else():
    fake = FakeDiscover(hits={"https://shop.example.com/"})

    result = discover("shop.example.com", discover_fn=fake)

    assert fake.urls == ["https://shop.example.com/"]
    assert result.candidates[0].href == "https://shop.example.com/favicon.ico"


def test_insecure_attempt_runs_only_after_empty_secure_attempt():
    fake = FakeDiscover(hits={"http://shop.example.com/"})

    result = discover("shop.example.com", discover_fn=fake)

    assert fake.urls == ["https://shop.example.com/", "http://shop.example.com/"]
    assert result.url == "http://shop.example.com/"


def test_main_domain_secure_then_insecure():
    fake = FakeDiscover(hits={"http://example.com/"})

    result = discover("shop.example.com", discover_fn=fake)

    assert fake.urls == [
        "https://shop.example.com/",
        "http://shop.example.com/",
        "https://example.com/",
        "http://example.com/",
    ]
    assert result.url == "http://example.com/"


def test_exhaustion_returns_none_without_main_domain_retry():
    fake = FakeDiscover()

    assert discover("example.com", discover_fn=fake) is None
    assert fake.urls == ["https://example.com/", "http://example.com/"]


def test_forwarded_headers_drop_host_and_content_length():
    fake = FakeDiscover(hits={"https://example.com/"})
    inbound = {
        "Host": "resolver.local",
        "Content-Length": "12",
        "User-Agent": "Browser/1.0",
        "Accept-Language": "de",
    }

    discover("example.com", headers=inbound, discover_fn=fake)

    (_, headers), = fake.calls
    assert headers == {"User-Agent": "Browser/1.0", "Accept-Language": "de"}


class UnreachableSession:
    def __init__(self):
        self.urls = []

    def get(self, url, headers=None, timeout=None, allow_redirects=True):
        self.urls.append(url)
        raise requests.ConnectionError("Name or service not known")


def test_unreachable_host_costs_one_request_per_attempt(monkeypatch):
    session = UnreachableSession()
    monkeypatch.setattr(fetch_module, "_get_session", lambda: session)

    assert discover("shop.example.com") is None
    assert session.urls == [
        "https://shop.example.com/",
        "http://shop.example.com/",
        "https://example.com/",
        "http://example.com/",
    ]
