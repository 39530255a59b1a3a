"""
Color parsing and conversion helpers.

Hex strings are parsed through Pillow's ImageColor so CSS names and short
``#rgb`` forms are accepted too. Hex output is always lowercase ``#rrggbb``.
"""

import re
import colorsys
from typing import Optional, Sequence, Tuple

from PIL import ImageColor

RGB = Tuple[int, int, int]
HSL = Tuple[Optional[float], float, float]

_BARE_HEX_RE = re.compile(r"^(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def parse_color(color: str) -> RGB:
    """
    Parse a color string into an RGB tuple.

    Args:
        color: ``#RRGGBB``/``#RGB`` in either case, the same without ``#``,
            or any color string Pillow understands (``"navy"``, ``"rgb(1,2,3)"``)

    Returns:
        Tuple of (R, G, B) integers in [0, 255]

    Raises:
        ValueError: If the string is not a recognizable color
    """
    if not isinstance(color, str):
        raise ValueError(f"Invalid color value: {color!r}")

    candidate = color.strip()
    if _BARE_HEX_RE.match(candidate):
        candidate = f"#{candidate}"

    rgb = ImageColor.getrgb(candidate)
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple (tuple, list or uint8 array) to ``#rrggbb``."""
    r, g, b = [int(x) for x in rgb[:3]]
    return f"#{r:02x}{g:02x}{b:02x}"


def normalize_hex(color: str) -> str:
    """Parse a color string and re-emit it in canonical lowercase hex."""
    return rgb_to_hex(parse_color(color))


def rgb_to_hsl(rgb: Sequence[int]) -> HSL:
    """
    Convert RGB to HSL.

    Returns:
        Tuple of (hue, saturation, lightness) with hue in degrees [0, 360)
        or None for achromatic colors (grays, black, white), saturation and
        lightness in [0, 1]
    """
    r, g, b = [int(x) / 255.0 for x in rgb[:3]]
    h, l, s = colorsys.rgb_to_hls(r, g, b)

    if max(r, g, b) == min(r, g, b):
        return None, 0.0, l

    return (h * 360.0) % 360.0, s, l


def relative_luminance(rgb: Sequence[int]) -> float:
    """WCAG 2.x relative luminance of an sRGB color."""
    def channel(value: int) -> float:
        c = int(value) / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = rgb[:3]
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(rgb1: Sequence[int], rgb2: Sequence[int]) -> float:
    """WCAG contrast ratio between two colors, from 1 (none) to 21 (black/white)."""
    l1 = relative_luminance(rgb1)
    l2 = relative_luminance(rgb2)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def circular_hue_distance(h1: float, h2: float) -> float:
    """Smallest angle between two hues in degrees, in [0, 180]."""
    diff = abs(h1 - h2) % 360.0
    return 360.0 - diff if diff > 180.0 else diff
