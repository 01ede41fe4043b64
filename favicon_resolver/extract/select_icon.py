"""Select one icon among discovered candidates according to size preferences."""

from __future__ import annotations

import re
from typing import Sequence

from ..io.models import IconCandidate, SelectionPreferences

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_width(sizes: str | None) -> int:
    """Return the width announced by a ``sizes`` hint such as ``"32x32"``.

    Missing, ``"unknown"`` and ``"any"`` hints count as width 0.
    """
    if not sizes:
        return 0
    match = _LEADING_INT.match(sizes)
    return int(match.group(1)) if match else 0


def select_icon(
    candidates: Sequence[IconCandidate],
    preferences: SelectionPreferences | None = None,
) -> IconCandidate | None:
    """Return exactly one candidate from *candidates*, or ``None`` when it is empty.

    With ``prefer_largest`` the widest candidate wins, and one meeting
    ``min_width`` always displaces a best that does not. Without it the first
    candidate meeting ``min_width`` wins, falling back to the widest. With
    neither, document order decides. Ties keep the earlier candidate.
    """
    if not candidates:
        return None
    prefs = preferences or SelectionPreferences()

    if prefs.prefer_largest:
        return _fold_widest(candidates, prefs.min_width)

    if prefs.min_width > 0:
        for candidate in candidates:
            if parse_width(candidate.sizes) >= prefs.min_width:
                return candidate
        return _fold_widest(candidates, 0)

    return candidates[0]


def _fold_widest(candidates: Sequence[IconCandidate], min_width: int) -> IconCandidate:
    best = candidates[0]
    best_width = parse_width(best.sizes)
    for candidate in candidates[1:]:
        width = parse_width(candidate.sizes)
        if min_width > 0 and width >= min_width and best_width < min_width:
            best, best_width = candidate, width
        elif width > best_width:
            best, best_width = candidate, width
    return best
