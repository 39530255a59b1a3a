"""
Color Harmony Analysis

Classifies the colors of a look into a harmony category and derives the
contrast, saturation and brightness metrics shown next to it.

Bad color strings never fail a call: hue math substitutes a neutral gray,
saturation and contrast math substitute black.
"""

from dataclasses import dataclass, field, asdict, replace
from itertools import combinations
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from ..convert import HSL, RGB, contrast_ratio, parse_color, rgb_to_hex, rgb_to_hsl
from .detectors import (
    DETECTORS, HARMONY_TYPES, HarmonyResult,
    MONOCHROMATIC, ANALOGOUS, COMPLEMENTARY, TRIADIC,
    TETRADIC, SPLIT_COMPLEMENTARY, NEUTRAL, MIXED,
)

# Stand-ins for unparseable input
NEUTRAL_GRAY_HSL: HSL = (0.0, 0.0, 0.5)
BLACK_RGB: RGB = (0, 0, 0)

DISPLAY_NAMES = {
    MONOCHROMATIC: "Monochromatic",
    ANALOGOUS: "Analogous",
    COMPLEMENTARY: "Complementary",
    TRIADIC: "Triadic",
    TETRADIC: "Tetradic",
    SPLIT_COMPLEMENTARY: "Split-Complementary",
    NEUTRAL: "Neutral",
    MIXED: "Mixed",
}


@dataclass
class ColorAnalysis:
    """Overall color properties of a look."""
    primary: str
    secondary: List[str] = field(default_factory=list)
    harmony: Optional[HarmonyResult] = None
    contrast: float = 0.0
    saturation: float = 0.0
    brightness: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def harmony_display_name(harmony_type: str) -> str:
    """Human-readable label for a harmony type; unknown types are echoed."""
    return DISPLAY_NAMES.get(harmony_type, harmony_type)


def color_to_hsl(color: str) -> HSL:
    """HSL of a color string, or neutral gray (hue 0) if it does not parse."""
    try:
        return rgb_to_hsl(parse_color(color))
    except ValueError:
        logger.debug(f"Unparseable color {color!r}, using neutral gray for hue math")
        return NEUTRAL_GRAY_HSL


def _rgb_or_black(color: str) -> RGB:
    try:
        return parse_color(color)
    except ValueError:
        logger.debug(f"Unparseable color {color!r}, using black")
        return BLACK_RGB


def analyze_color_harmony(colors: Sequence[str]) -> HarmonyResult:
    """
    Find the harmony category that best describes a set of colors.

    Args:
        colors: Color strings, usually hex

    Returns:
        HarmonyResult carrying the input colors; ``mixed`` with confidence 0
        when no pattern matches
    """
    colors = list(colors)
    if not colors:
        return HarmonyResult(
            type=NEUTRAL,
            confidence=0.0,
            description="No colors to analyze",
            suggestions=["Add pieces to your look to get a color harmony analysis"],
            colors=[],
        )

    hues = [hue for hue, _, _ in (color_to_hsl(c) for c in colors) if hue is not None]

    if not hues:
        return HarmonyResult(
            type=NEUTRAL,
            confidence=0.8,
            description="Neutral look built from achromatic tones",
            suggestions=[
                "Add a vibrant piece to create more contrast",
                "Neutral bases pair with almost any accent color",
            ],
            colors=colors,
        )

    best = None
    for detector in DETECTORS:
        candidate = detector(hues)
        # Strictly greater: earlier detectors win ties
        if best is None or candidate.confidence > best.confidence:
            best = candidate

    if best.confidence <= 0:
        return HarmonyResult(type=MIXED, confidence=0.0,
                             description="Mixed look: no classic harmony pattern detected",
                             suggestions=[], colors=colors)

    return replace(best, colors=colors)


def calculate_contrast(color1: str, color2: str) -> float:
    """WCAG contrast ratio between two colors; 1.0 if either does not parse."""
    try:
        return contrast_ratio(parse_color(color1), parse_color(color2))
    except ValueError:
        return 1.0


def analyze_colors(colors: Sequence[str]) -> ColorAnalysis:
    """
    Summarize the colors of a look.

    The most saturated color becomes ``primary`` (first one on ties) and every
    color with a different hex becomes ``secondary``. ``contrast`` is the mean
    WCAG ratio over all unordered pairs.
    """
    colors = list(colors)
    if not colors:
        return ColorAnalysis(primary=rgb_to_hex(BLACK_RGB), secondary=[],
                             harmony=analyze_color_harmony([]))

    rgbs = [_rgb_or_black(c) for c in colors]
    hsls = [rgb_to_hsl(rgb) for rgb in rgbs]
    hexes = [rgb_to_hex(rgb) for rgb in rgbs]

    primary_index = max(range(len(rgbs)), key=lambda i: hsls[i][1])
    primary = hexes[primary_index]
    secondary = [h for h in hexes if h != primary]

    pairs = list(combinations(rgbs, 2))
    contrast = sum(contrast_ratio(a, b) for a, b in pairs) / len(pairs) if pairs else 0.0

    return ColorAnalysis(
        primary=primary,
        secondary=secondary,
        harmony=analyze_color_harmony(colors),
        contrast=contrast,
        saturation=sum(s for _, s, _ in hsls) / len(hsls),
        brightness=sum(l for _, _, l in hsls) / len(hsls),
    )


__all__ = [
    "HarmonyResult", "ColorAnalysis", "HARMONY_TYPES",
    "analyze_color_harmony", "analyze_colors", "calculate_contrast",
    "color_to_hsl", "harmony_display_name",
]
