"""
Swatch Rendering Module

Renders extracted garment colors as a PNG strip so API clients can show the
palette without re-drawing it themselves.
"""

import base64
from typing import List, Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from .convert import parse_color

UNPARSEABLE_CHIP_BGR = (128, 128, 128)


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """Convert a color string to a BGR tuple for OpenCV."""
    r, g, b = parse_color(hex_color)
    return (b, g, r)


def validate_swatch_params(hex_colors: List[str], chip_size: int,
                           highlight_index: Optional[int] = None) -> None:
    """
    Validate swatch rendering parameters.

    Raises:
        ValueError: On an empty palette, non-positive chip size or an
            out-of-range highlight index
    """
    if not hex_colors:
        raise ValueError("hex_colors cannot be empty")

    if chip_size <= 0:
        raise ValueError("chip_size must be positive")

    if highlight_index is not None and not 0 <= highlight_index < len(hex_colors):
        raise ValueError(f"highlight_index {highlight_index} out of range [0, {len(hex_colors)})")


def render_swatch_strip(hex_colors: List[str],
                        chip_size: int = 40,
                        highlight_index: Optional[int] = None,
                        border_color: Tuple[int, int, int] = (0, 0, 0),
                        border_width: int = 2) -> str:
    """
    Render a horizontal strip of color chips.

    Colors that do not parse are drawn as mid gray rather than failing the
    whole strip.

    Args:
        hex_colors: Palette, most dominant first
        chip_size: Edge length of each square chip in pixels
        highlight_index: Chip to outline, usually the primary color
        border_color: BGR color of the outline
        border_width: Outline thickness in pixels

    Returns:
        Base64-encoded PNG image string

    Raises:
        ValueError: If the parameters are invalid
        RuntimeError: If PNG encoding fails
    """
    validate_swatch_params(hex_colors, chip_size, highlight_index)

    img = np.zeros((chip_size, chip_size * len(hex_colors), 3), dtype=np.uint8)

    for i, hex_color in enumerate(hex_colors):
        x_start = i * chip_size
        try:
            img[:, x_start:x_start + chip_size, :] = hex_to_bgr(hex_color)
        except ValueError as e:
            logger.warning(f"Failed to render color {hex_color!r}: {e}")
            img[:, x_start:x_start + chip_size, :] = UNPARSEABLE_CHIP_BGR

    if highlight_index is not None:
        x_start = highlight_index * chip_size
        cv2.rectangle(
            img,
            (x_start, 0),
            (x_start + chip_size - 1, chip_size - 1),
            border_color,
            border_width
        )

    success, buffer = cv2.imencode('.png', img)
    if not success:
        raise RuntimeError("Failed to encode swatch strip as PNG")

    b64_string = base64.b64encode(buffer.tobytes()).decode('ascii')
    logger.debug(f"Encoded swatch strip of {len(hex_colors)} chips -> {len(b64_string)} chars")
    return b64_string
