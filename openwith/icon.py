# -*- coding: utf-8 -*-
"""
App icons as PNG data URIs, using Pillow.

An .icns file is a container of differently sized renditions; we pick one by
byte size, decode it and re-encode it as PNG. When an app has no usable icon
a generic one can be drawn instead.
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from PIL import IcnsImagePlugin, Image, ImageDraw, UnidentifiedImageError

from .models import RankedApp

logger = logging.getLogger(__name__)


ICNS_MAGIC = b"icns"
# Renditions that do not decode to a usable bitmap.
SKIPPED_TYPES = {"ic04", "icnV"}
PNG_DATA_URI_PREFIX = "data:image/png;base64,"


def read_icns_entries(payload: bytes) -> List[Tuple[str, bytes]]:
    """Return (type, data) for each entry of an ICNS container, in file order."""
    if payload[:4] != ICNS_MAGIC:
        return []
    try:
        toc = IcnsImagePlugin.IcnsFile(io.BytesIO(payload)).dct
    except Exception as e:
        logger.debug("unreadable icns container: %s", e)
        return []
    out: List[Tuple[str, bytes]] = []
    for sig, (start, length) in toc.items():
        # A truncated file can announce more data than it holds.
        if start + length > len(payload):
            continue
        out.append((sig.decode("latin-1"), payload[start:start + length]))
    return out


def _usable_type(os_type: str) -> bool:
    if os_type in SKIPPED_TYPES:
        return False
    return os_type.startswith("ic") or os_type.startswith("it")


def image_to_data_uri(img: Image.Image) -> str:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return PNG_DATA_URI_PREFIX + base64.b64encode(buf.getvalue()).decode("ascii")


def _decode(data: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return image_to_data_uri(img)
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError):
        return None


def get_app_icon(icon_path: str, min_size: int = 0, prefer_larger: bool = False) -> Optional[str]:
    """
    Extract the best available rendition of an .icns file as a PNG data URI.

    Renditions are tried smallest first (largest first with `prefer_larger`),
    skipping those under `min_size` bytes. Returns None when nothing decodes.
    """
    try:
        payload = Path(icon_path).read_bytes()
    except OSError as e:
        logger.debug("cannot read icon %s: %s", icon_path, e)
        return None

    entries = sorted(read_icns_entries(payload), key=lambda e: len(e[1]), reverse=prefer_larger)
    for os_type, data in entries:
        if len(data) < min_size or not _usable_type(os_type):
            continue
        uri = _decode(data)
        if uri:
            return uri
    return None


def make_placeholder_icon(size: int = 64) -> Image.Image:
    """Draw a generic application icon: a rounded tile holding a page."""
    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)

    grey = (142, 142, 147, 255)
    grey_dark = (99, 99, 102, 255)
    white = (255, 255, 255, 255)

    # Tile
    pad = int(size * 0.06)
    radius = int(size * 0.2)
    d.rounded_rectangle([pad, pad, size - pad, size - pad], radius=radius, fill=grey, outline=grey_dark, width=2)

    # Page with a folded corner
    pw = int(size * 0.42)
    ph = int(size * 0.54)
    px0 = (size - pw) // 2
    py0 = (size - ph) // 2
    fold = int(size * 0.12)
    d.polygon(
        [(px0, py0), (px0 + pw - fold, py0), (px0 + pw, py0 + fold), (px0 + pw, py0 + ph), (px0, py0 + ph)],
        fill=white,
    )
    d.polygon([(px0 + pw - fold, py0), (px0 + pw - fold, py0 + fold), (px0 + pw, py0 + fold)], fill=grey_dark)

    # Text lines
    line_w = max(1, int(size * 0.03))
    for k in range(3):
        y = py0 + int(ph * (0.45 + 0.17 * k))
        d.line([(px0 + int(pw * 0.18), y), (px0 + int(pw * 0.82), y)], fill=grey, width=line_w)

    return img


def get_app_icons(
    apps: Iterable[RankedApp],
    min_size: int = 0,
    prefer_larger: bool = False,
    placeholder: bool = False,
) -> List[Optional[str]]:
    """One data URI (or None) per app, in order."""
    fallback: Optional[str] = None
    out: List[Optional[str]] = []
    for app in apps:
        uri = get_app_icon(app.icon, min_size, prefer_larger) if app.icon else None
        if uri is None and placeholder:
            if fallback is None:
                fallback = image_to_data_uri(make_placeholder_icon())
            uri = fallback
        out.append(uri)
    return out
