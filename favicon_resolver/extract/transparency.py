"""Detect fully transparent pixels on the border of an icon."""

from __future__ import annotations

import hashlib
import logging
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError

from ..config import settings
from .cache import TTLLRUCache

try:  # pragma: no cover - optional dependency
    import cairosvg  # type: ignore
except Exception:  # pragma: no cover - optional dependency
    cairosvg = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_FINGERPRINT_LENGTH = 32

_transparency_cache: TTLLRUCache[str, bool] = TTLLRUCache(
    maxsize=settings.CACHE_MAX_ENTRIES, ttl=settings.CACHE_TTL_SECONDS
)


def fingerprint(image_bytes: bytes) -> str:
    """Return the cache key for *image_bytes*: a truncated SHA-256 hex digest."""
    return hashlib.sha256(image_bytes).hexdigest()[:_FINGERPRINT_LENGTH]


def has_transparent_edges(
    image_bytes: bytes, cache: TTLLRUCache[str, bool] | None = None
) -> bool:
    """Return ``True`` when any outermost pixel of the image has alpha 0.

    Verdicts are memoised by content fingerprint, so a hit skips decoding.
    Undecodable input is reported as ``False`` and is not cached.
    """
    store = _transparency_cache if cache is None else cache
    key = fingerprint(image_bytes)
    cached = store.get(key)
    if cached is not None:
        return cached

    try:
        result = _scan_edges(image_bytes)
    except (UnidentifiedImageError, DecompressionBombError, OSError, ValueError) as exc:
        logger.warning("Error checking transparent edges: %s", exc)
        return False
    except Exception:  # noqa: BLE001 - padding is cosmetic, never block delivery
        logger.exception("Unexpected error checking transparent edges")
        return False

    store.set(key, result)
    return result


def _scan_edges(image_bytes: bytes) -> bool:
    """Decode *image_bytes* and inspect the alpha of its border pixels."""
    if not image_bytes:
        raise ValueError("Empty image payload cannot be analysed")

    with _open_image(image_bytes) as img:
        img.load()
        img = _expand_palette(img)
        bands = img.getbands()
        if len(bands) != 4 or "A" not in bands:
            return False
        alpha = np.asarray(img.getchannel("A"))

    if alpha.size == 0:
        return False
    if (alpha[0] == 0).any() or (alpha[-1] == 0).any():
        return True
    return bool((alpha[:, 0] == 0).any() or (alpha[:, -1] == 0).any())


def _open_image(image_bytes: bytes) -> Image.Image:
    data = image_bytes
    if _looks_like_svg(image_bytes):
        if cairosvg is None:
            raise ValueError("SVG input requires cairosvg to be rasterized")
        data = cairosvg.svg2png(bytestring=image_bytes)  # type: ignore[attr-defined]
    return Image.open(BytesIO(data))


def _expand_palette(img: Image.Image) -> Image.Image:
    """Give palette images the band count they have once their palette is applied."""
    if img.mode == "PA":
        return img.convert("RGBA")
    if img.mode == "P":
        if img.info.get("transparency") is not None:
            return img.convert("RGBA")
        return img.convert("RGB")
    return img


def _looks_like_svg(image_bytes: bytes) -> bool:
    snippet = image_bytes[:1024].lstrip().lower()
    return snippet.startswith(b"<svg") or (
        snippet.startswith(b"<?xml") and b"<svg" in snippet
    )


def clear_cache() -> None:
    _transparency_cache.clear()
