"""Command-line interface for the favicon_resolver project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

from tqdm import tqdm

from .crawl.domains import is_valid_host, normalize_host
from .crawl.waterfall import discover
from .extract.select_icon import select_icon
from .io.models import IconResponse, ResolutionReport, SelectionPreferences
from .io.outputs import write_icon, write_report
from .pipeline import resolve_favicon

DEFAULT_OUT_DIR = Path("out") / "icons"


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the favicon resolver."""
    parser = argparse.ArgumentParser(
        description="Resolve the best available icon for each domain and save it."
    )
    parser.add_argument(
        "domains",
        nargs="*",
        help="Domains to resolve, e.g. example.com.",
    )
    parser.add_argument(
        "--input",
        required=False,
        default=None,
        help="Path to a text file containing domains, one per line.",
    )
    parser.add_argument(
        "--out",
        required=False,
        default=None,
        help="Directory path where icons and report.json will be written.",
    )
    parser.add_argument(
        "--larger",
        action="store_true",
        help="Prefer the largest declared icon.",
    )
    parser.add_argument(
        "--min-size",
        type=int,
        default=0,
        metavar="N",
        help="Minimum icon width in pixels to prefer.",
    )
    parser.add_argument(
        "--auto-padding",
        action="store_true",
        help="Pad icons whose border touches a fully transparent pixel.",
    )
    parser.add_argument(
        "--debug-candidates",
        action="store_true",
        help="Print the discovered candidates and the selection for the first two domains.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def read_input(path: Path) -> list[str]:
    """Read newline separated entries from *path* and return non-empty lines."""
    if not path.exists():
        raise FileNotFoundError(f"Input file does not exist: {path}")
    lines = [line.strip() for line in path.read_text(encoding="utf-8-sig").splitlines()]
    return [line for line in lines if line and not line.startswith("#")]


def _debug_candidates(domains: list[str], preferences: SelectionPreferences) -> None:
    """Run the discovery waterfall and print candidates for the first two *domains*."""
    for domain in domains[:2]:
        host = normalize_host(domain)
        if host is None or not is_valid_host(host):
            print(f"[candidates] {domain}: invalid domain")
            continue
        result = discover(host)
        if result is None:
            print(f"[candidates] {domain}: (no candidates)")
            continue
        print(f"[candidates] {domain} -> {result.url} ({result.status} {result.status_text})")
        selected = select_icon(result.candidates, preferences)
        for index, candidate in enumerate(result.candidates, start=1):
            marker = "*" if candidate is selected else " "
            print(f" {marker}{index}. {candidate.sizes} -> {candidate.href[:100]}")


def _resolve_all(
    domains: list[str], out_dir: Path, args: argparse.Namespace
) -> ResolutionReport:
    report = ResolutionReport(
        total_domains=len(domains), resolved=0, placeholders=0, failed=0
    )
    for domain in tqdm(domains, desc="Resolving icons", unit="domain", leave=False):
        response = resolve_favicon(
            domain,
            larger=args.larger,
            min_size=max(0, args.min_size),
            auto_padding=args.auto_padding,
        )
        report.sources[domain] = response.source
        _tally(report, response)
        if response.source == "error":
            print(f"[warn] {domain}: failed to fetch the selected icon")
            continue
        path = write_icon(out_dir, _safe_host_label(domain), response)
        print(f"[saved] {domain}: {path} ({response.source}, {response.status})")
    return report


def _tally(report: ResolutionReport, response: IconResponse) -> None:
    if response.source == "placeholder":
        report.placeholders += 1
    elif response.ok:
        report.resolved += 1
    else:
        report.failed += 1


def _safe_host_label(domain: str) -> str:
    host = normalize_host(domain) or domain
    sanitized = "".join(ch if ch.isalnum() or ch in "._-" else "_" for ch in host)
    sanitized = sanitized.strip("._-")
    return sanitized or "site"


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )
    entries = list(args.domains)
    if args.input:
        entries.extend(read_input(Path(args.input)))
    if not entries:
        return 0

    if args.debug_candidates:
        preferences = SelectionPreferences(
            prefer_largest=args.larger, min_width=args.min_size
        )
        _debug_candidates(entries, preferences)

    out_dir = Path(args.out) if args.out else DEFAULT_OUT_DIR
    out_dir.mkdir(parents=True, exist_ok=True)
    report = _resolve_all(entries, out_dir, args)
    report_path = write_report(out_dir / "report.json", report)
    print(
        f"[report] resolved={report.resolved} placeholders={report.placeholders} "
        f"failed={report.failed} -> {report_path}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
