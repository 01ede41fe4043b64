"""Output helpers for persisting resolved icons and run reports."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from .models import IconResponse, ResolutionReport

_MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/svg+xml": ".svg",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/x-icon": ".ico",
    "image/vnd.microsoft.icon": ".ico",
}


def extension_for(content_type: str | None) -> str:
    """Return the file extension for a ``Content-Type`` value, ``.bin`` if unknown."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    return _MIME_EXTENSIONS.get(mime, ".bin")


def write_icon(out_dir: Path, host_label: str, response: IconResponse) -> Path:
    """Write the body of *response* below *out_dir* and return the path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{host_label}{extension_for(response.content_type)}"
    path.write_bytes(response.body)
    return path


def write_report(path: Path, report: ResolutionReport) -> Path:
    """Write a resolution report to *path* as JSON and return the path."""
    path.write_text(json.dumps(asdict(report), indent=2), encoding="utf-8")
    return path
