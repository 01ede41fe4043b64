"""Data models shared across the favicon resolution pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

UNKNOWN_SIZE = "unknown"


@dataclass(frozen=True, slots=True)
class IconCandidate:
    """A single icon reference discovered in a page."""

    href: str
    sizes: str = UNKNOWN_SIZE


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    """Outcome of one fetch-and-extract attempt against a page."""

    url: str
    host: str
    status: int
    status_text: str
    candidates: Tuple[IconCandidate, ...] = ()

    @property
    def found(self) -> bool:
        return bool(self.candidates)


@dataclass(frozen=True, slots=True)
class SelectionPreferences:
    """Caller preferences used to choose one icon among candidates."""

    prefer_largest: bool = False
    min_width: int = 0

    def __post_init__(self) -> None:
        if self.min_width < 0:
            object.__setattr__(self, "min_width", 0)


@dataclass(frozen=True, slots=True)
class RenderedIcon:
    """A composed image ready to be served."""

    payload: bytes
    mime_type: str
    padding: int = 0


@dataclass(slots=True)
class IconResponse:
    """Framework-neutral response produced by the resolution pipeline."""

    status: int
    body: bytes
    content_type: str
    headers: Dict[str, str] = field(default_factory=dict)
    source: str = "discovered"

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(slots=True)
class ResolutionReport:
    """High-level summary of a batch resolution run."""

    total_domains: int
    resolved: int
    placeholders: int
    failed: int
    sources: Dict[str, str] = field(default_factory=dict)
