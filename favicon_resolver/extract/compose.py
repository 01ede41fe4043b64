"""Compose an icon into a fixed square SVG canvas."""

from __future__ import annotations

import base64
from html import escape

from ..config import settings
from ..io.models import RenderedIcon

SVG_MIME = "image/svg+xml"
_DEFAULT_MIME = "image/png"


def padding_for(add_padding: bool) -> int:
    return settings.PADDING if add_padding else 0


def compose_svg(image_bytes: bytes, mime_type: str | None, add_padding: bool) -> RenderedIcon:
    """Embed *image_bytes* centred in a transparent square canvas.

    The image keeps its aspect ratio and is inset by the padding on every side.
    """
    if not image_bytes:
        raise ValueError("Empty image payload cannot be composed")

    size = settings.CANVAS_SIZE
    padding = padding_for(add_padding)
    inner = size - (padding * 2)
    mime = escape(_clean_mime(mime_type), quote=True)
    encoded = base64.b64encode(image_bytes).decode("ascii")

    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {size} {size}" '
        f'width="{size}" height="{size}">'
        "<defs>"
        f'<pattern id="img" x="{padding}" y="{padding}" width="{inner}" height="{inner}" '
        'patternUnits="userSpaceOnUse">'
        f'<image x="0" y="0" width="{inner}" height="{inner}" '
        'preserveAspectRatio="xMidYMid meet" '
        f'href="data:{mime};base64,{encoded}"/>'
        "</pattern>"
        "</defs>"
        f'<rect width="{size}" height="{size}" fill="transparent"/>'
        f'<rect x="{padding}" y="{padding}" width="{inner}" height="{inner}" fill="url(#img)"/>'
        "</svg>"
    )
    return RenderedIcon(payload=svg.encode("utf-8"), mime_type=SVG_MIME, padding=padding)


def _clean_mime(mime_type: str | None) -> str:
    # Drop parameters such as "; charset=binary" from upstream Content-Type values.
    value = (mime_type or "").split(";", 1)[0].strip().lower()
    return value or _DEFAULT_MIME
