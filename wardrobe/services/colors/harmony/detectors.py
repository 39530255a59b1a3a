"""
Hue-pattern detectors for color harmony classification.

Each detector takes the list of chromatic hues (degrees) and returns a
HarmonyResult: a match carries the detector's fixed confidence, a miss comes
back as ``mixed`` with confidence 0. DETECTORS fixes the evaluation order,
which is also the tie-break order.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Sequence

from ..convert import circular_hue_distance

MONOCHROMATIC = "monochromatic"
ANALOGOUS = "analogous"
COMPLEMENTARY = "complementary"
TRIADIC = "triadic"
TETRADIC = "tetradic"
SPLIT_COMPLEMENTARY = "split-complementary"
NEUTRAL = "neutral"
MIXED = "mixed"

HARMONY_TYPES = (
    MONOCHROMATIC, ANALOGOUS, COMPLEMENTARY, TRIADIC,
    TETRADIC, SPLIT_COMPLEMENTARY, NEUTRAL, MIXED,
)

HUE_BIN_DEGREES = 30.0
HUE_TOLERANCE = 30.0


@dataclass
class HarmonyResult:
    """Harmony classification for a set of colors."""
    type: str
    confidence: float
    description: str
    suggestions: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DESCRIPTIONS = {
    MONOCHROMATIC: "Monochromatic look: every color shares the same base hue",
    ANALOGOUS: "Analogous look: colors sit next to each other on the color wheel",
    COMPLEMENTARY: "Complementary look: colors sit opposite each other on the color wheel",
    TRIADIC: "Triadic look: three colors evenly spaced around the color wheel",
    TETRADIC: "Tetradic look: four colors forming a rectangle on the color wheel",
    SPLIT_COMPLEMENTARY: "Split-complementary look: one main color plus the two neighbours of its complement",
}

SUGGESTIONS = {
    MONOCHROMATIC: [
        "A monochromatic palette reads as elegant and sophisticated",
        "Great for minimalist and professional looks",
        "Consider one colorful accessory as a focal point",
    ],
    ANALOGOUS: [
        "Analogous colors feel harmonious and natural",
        "Ideal for casual, comfortable looks",
        "Works well for smooth transitions between seasons",
    ],
    COMPLEMENTARY: [
        "Complementary colors create high contrast and visual impact",
        "Ideal for bold, eye-catching looks",
        "Let one color dominate and use the other as an accent",
    ],
    TRIADIC: [
        "A triadic palette is vibrant yet balanced",
        "Ideal for creative, expressive looks",
        "Use one color as the base and the others as accents",
    ],
    TETRADIC: [
        "A tetradic palette is rich and complex",
        "Ideal for artistic, creative looks",
        "Use it sparingly to avoid visual overload",
    ],
    SPLIT_COMPLEMENTARY: [
        "Split-complementary colors give contrast without being harsh",
        "Ideal for balanced, sophisticated looks",
        "A good choice when you want to be daring without overdoing it",
    ],
}


def no_match() -> HarmonyResult:
    return HarmonyResult(type=MIXED, confidence=0.0, description="", suggestions=[], colors=[])


def _match(harmony_type: str, confidence: float) -> HarmonyResult:
    return HarmonyResult(
        type=harmony_type,
        confidence=confidence,
        description=DESCRIPTIONS[harmony_type],
        suggestions=list(SUGGESTIONS[harmony_type]),
        colors=[],
    )


def hue_bin(hue: float) -> float:
    """Round a hue to the nearest 30 degree bin (half up, 360 folds to 0)."""
    return (math.floor(hue / HUE_BIN_DEGREES + 0.5) * HUE_BIN_DEGREES) % 360.0


def consecutive_hue_differences(hues: Sequence[float]) -> List[float]:
    """Differences between neighbouring sorted hues, folded to the short way round."""
    ordered = sorted(hues)
    differences = []
    for prev, current in zip(ordered, ordered[1:]):
        diff = current - prev
        if diff > 180.0:
            diff = 360.0 - diff
        differences.append(diff)
    return differences


def _mean_difference(hues: Sequence[float]) -> float:
    differences = consecutive_hue_differences(hues)
    return sum(differences) / len(differences)


def detect_monochromatic(hues: Sequence[float]) -> HarmonyResult:
    if hues and len({hue_bin(h) for h in hues}) == 1:
        return _match(MONOCHROMATIC, 0.9)
    return no_match()


def detect_analogous(hues: Sequence[float]) -> HarmonyResult:
    if len(hues) < 2:
        return no_match()

    differences = consecutive_hue_differences(hues)
    average = sum(differences) / len(differences)
    if average <= 60.0 and all(d <= 90.0 for d in differences):
        return _match(ANALOGOUS, 0.85)
    return no_match()


def detect_complementary(hues: Sequence[float]) -> HarmonyResult:
    for i in range(len(hues)):
        for j in range(i + 1, len(hues)):
            if abs(circular_hue_distance(hues[i], hues[j]) - 180.0) <= HUE_TOLERANCE:
                return _match(COMPLEMENTARY, 0.8)
    return no_match()


def detect_triadic(hues: Sequence[float]) -> HarmonyResult:
    if len(hues) >= 3 and abs(_mean_difference(hues) - 120.0) <= HUE_TOLERANCE:
        return _match(TRIADIC, 0.75)
    return no_match()


def detect_tetradic(hues: Sequence[float]) -> HarmonyResult:
    if len(hues) >= 4 and abs(_mean_difference(hues) - 90.0) <= HUE_TOLERANCE:
        return _match(TETRADIC, 0.7)
    return no_match()


def detect_split_complementary(hues: Sequence[float]) -> HarmonyResult:
    if len(hues) < 3:
        return no_match()

    for i, main in enumerate(hues):
        for j, other in enumerate(hues):
            if i == j:
                continue
            nearest = min(
                circular_hue_distance(other, main + 150.0),
                circular_hue_distance(other, main + 210.0),
            )
            if nearest <= HUE_TOLERANCE:
                return _match(SPLIT_COMPLEMENTARY, 0.75)
    return no_match()


# Evaluation order doubles as tie-break priority
DETECTORS: List[Callable[[Sequence[float]], HarmonyResult]] = [
    detect_monochromatic,
    detect_analogous,
    detect_complementary,
    detect_triadic,
    detect_tetradic,
    detect_split_complementary,
]
