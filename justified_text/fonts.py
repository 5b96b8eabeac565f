from __future__ import annotations

import logging
from typing import Sequence

from PyQt6.QtGui import QFont

_LOGGER = logging.getLogger("JustifiedText.Fonts")


def fallback_family_list(primary: str, fallback_families: Sequence[str] | None) -> list[str]:
    """Primary family first, then each distinct fallback (case-insensitive)."""
    families = [primary] if primary else []
    seen = {primary.casefold()} if primary else set()
    for fallback in fallback_families or ():
        name = (fallback or "").strip()
        if name and name.casefold() not in seen:
            seen.add(name.casefold())
            families.append(name)
    return families


def apply_font_fallbacks(font: QFont, fallback_families: Sequence[str] | None) -> None:
    """Give ``font`` its fallback families so missing glyphs still measure and render."""
    families = fallback_family_list(font.family(), fallback_families)
    if len(families) > 1:
        font.setFamilies(families)
        _LOGGER.debug("Font families set to %s", families)


def build_font(family: str | None, point_size: float, fallbacks: Sequence[str] = ()) -> QFont:
    """Create the font used both for display and for measuring justified lines."""
    font = QFont()
    if family:
        font.setFamily(family)
    if point_size > 0:
        font.setPointSizeF(float(point_size))
    else:
        _LOGGER.debug("Ignoring non-positive point size %s; keeping %.1f", point_size, font.pointSizeF())
    apply_font_fallbacks(font, fallbacks)
    return font


def font_context(font: QFont, device_pixel_ratio: float = 1.0) -> tuple[str, tuple[str, ...], float, float]:
    """Return a hashable key describing everything that changes measured widths."""
    return (font.family(), tuple(font.families()), float(font.pointSizeF()), float(device_pixel_ratio))
