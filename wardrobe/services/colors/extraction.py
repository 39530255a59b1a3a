"""
Dominant color extraction for garment images.

Pipeline: estimate the background from pixels sampled along the image
borders, keep opaque pixels that are far enough from that background,
quantize them into 32-step buckets and rank the buckets by pixel count.

All functions are pure over their inputs; nothing here does I/O or keeps
state between calls.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from loguru import logger

from .convert import parse_color, rgb_to_hex
from .errors import CoordinateOutOfBoundsError

PixelBuffer = Union[np.ndarray, bytes, bytearray, memoryview, Sequence[int]]

BORDER_STRIDE = 10
ALPHA_THRESHOLD = 128
BUCKET_SIZE = 32
# Fixed cut-off, independent of sensitivity: foreground pixels closer than
# this to the background are dropped even when sensitivity would keep them.
MIN_BACKGROUND_DISTANCE = 30
DEFAULT_SENSITIVITY = 50
DEFAULT_TOP_N = 5


@dataclass
class ExtractionResult:
    """Outcome of one extraction call, with enough context to explain it."""
    colors: List[str]
    background: Optional[str]
    width: int
    height: int
    opaque_pixels: int = 0
    foreground_pixels: int = 0
    counted_pixels: int = 0
    fallback_used: bool = False
    fallback_method: Optional[str] = None
    bucket_counts: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def as_rgba_array(pixels: PixelBuffer, width: int, height: int) -> np.ndarray:
    """
    Normalize pixel input into an (H, W, 4) uint8 RGBA array.

    Accepts a flat row-major RGBA buffer (bytes, list or 1-D array), an
    (H, W, 4) array, or an (H, W, 3) array which is treated as fully opaque.

    Raises:
        ValueError: If the buffer does not match width x height x 4
    """
    if isinstance(pixels, np.ndarray) and pixels.ndim == 3:
        if pixels.shape[:2] != (height, width):
            raise ValueError(
                f"Pixel array shape {pixels.shape[:2]} does not match {height}x{width}"
            )
        if pixels.shape[2] == 3:
            alpha = np.full((height, width, 1), 255, dtype=np.uint8)
            return np.concatenate([pixels.astype(np.uint8), alpha], axis=2)
        if pixels.shape[2] != 4:
            raise ValueError(f"Expected 3 or 4 channels, got {pixels.shape[2]}")
        return pixels.astype(np.uint8, copy=False)

    if isinstance(pixels, (bytes, bytearray, memoryview)):
        flat = np.frombuffer(pixels, dtype=np.uint8)
    else:
        flat = np.asarray(pixels).astype(np.uint8, copy=False).reshape(-1)

    expected = width * height * 4
    if flat.size != expected:
        raise ValueError(f"RGBA buffer holds {flat.size} values, expected {expected}")

    return flat.reshape(height, width, 4)


class BorderSampleEstimator:
    """
    Background estimate from pixels sampled along the four image borders.

    Every ``stride``-th pixel of the top row, bottom row, left column and
    right column is sampled; transparent samples are ignored and the rest
    are averaged per channel with half-up integer rounding.
    """

    name = "border_sample"

    def __init__(self, stride: int = BORDER_STRIDE, alpha_threshold: int = ALPHA_THRESHOLD):
        if stride < 1:
            raise ValueError("stride must be >= 1")
        self.stride = stride
        self.alpha_threshold = alpha_threshold

    def border_samples(self, rgba: np.ndarray) -> np.ndarray:
        """Return the sampled border pixels as an (N, 4) array."""
        height, width = rgba.shape[:2]
        xs = np.arange(0, width, self.stride)
        ys = np.arange(0, height, self.stride)

        return np.vstack([
            rgba[0, xs],
            rgba[height - 1, xs],
            rgba[ys, 0],
            rgba[ys, width - 1],
        ])

    def estimate(self, rgba: np.ndarray) -> Optional[np.ndarray]:
        """
        Estimate the background color of an RGBA image.

        Returns:
            int64 array [R, G, B], or None when every border sample is transparent
        """
        if rgba.shape[0] == 0 or rgba.shape[1] == 0:
            return None

        samples = self.border_samples(rgba)
        opaque = samples[samples[:, 3] >= self.alpha_threshold]
        if len(opaque) == 0:
            return None

        mean = opaque[:, :3].astype(np.float64).mean(axis=0)
        return np.floor(mean + 0.5).astype(np.int64)


# Default strategy shared by callers that do not bring their own
_default_estimator = BorderSampleEstimator()


def estimate_background(pixels: PixelBuffer, width: int, height: int,
                        estimator: Optional[BorderSampleEstimator] = None) -> Optional[str]:
    """
    Estimate the background color of an image.

    Args:
        pixels: RGBA pixel data (see as_rgba_array)
        width: Image width in pixels
        height: Image height in pixels
        estimator: Background strategy exposing ``estimate(rgba)``

    Returns:
        Background hex color, or None if the image is empty or its border
        is fully transparent
    """
    if width <= 0 or height <= 0:
        return None

    rgba = as_rgba_array(pixels, width, height)
    background = (estimator or _default_estimator).estimate(rgba)
    return rgb_to_hex(background) if background is not None else None


def _background_distances(rgba: np.ndarray, background: Optional[np.ndarray]) -> np.ndarray:
    """Euclidean RGB distance of every pixel (row-major) to the background."""
    flat_rgb = rgba.reshape(-1, 4)[:, :3].astype(np.float64)
    if background is None:
        return np.full(len(flat_rgb), np.inf)
    return np.linalg.norm(flat_rgb - background.astype(np.float64), axis=1)


def _foreground_mask(rgba: np.ndarray, distances: np.ndarray, sensitivity: float) -> np.ndarray:
    opaque = rgba.reshape(-1, 4)[:, 3] >= ALPHA_THRESHOLD
    return opaque & (distances > sensitivity)


def segment_foreground(pixels: PixelBuffer, width: int, height: int,
                       background: Optional[Union[str, Sequence[int]]],
                       sensitivity: float = DEFAULT_SENSITIVITY) -> np.ndarray:
    """
    Select the pixels that belong to the garment rather than the backdrop.

    A pixel is foreground when it is opaque (alpha >= 128) and its RGB
    distance to the background is strictly greater than ``sensitivity``.
    A HIGHER sensitivity therefore demands a bigger difference, which keeps
    fewer pixels as foreground. UI sliders already expose the value with
    this meaning, so it is kept as is.

    Args:
        pixels: RGBA pixel data
        width: Image width
        height: Image height
        background: Background hex string or RGB triple; None keeps every
            opaque pixel
        sensitivity: Distance threshold, normally 10-100

    Returns:
        Sorted array of flat (row-major) pixel indices
    """
    if width <= 0 or height <= 0:
        return np.empty(0, dtype=np.int64)

    rgba = as_rgba_array(pixels, width, height)
    if isinstance(background, str):
        background = parse_color(background)
    bg = np.asarray(background, dtype=np.int64) if background is not None else None

    distances = _background_distances(rgba, bg)
    return np.flatnonzero(_foreground_mask(rgba, distances, sensitivity))


def rank_color_buckets(rgb_pixels: np.ndarray, top_n: int = DEFAULT_TOP_N) -> List[Tuple[str, int]]:
    """
    Quantize pixels into 32-step buckets and rank them by frequency.

    Ties keep the bucket that appeared first in the pixel order.

    Args:
        rgb_pixels: (N, 3) array in scan order
        top_n: Number of buckets to return

    Returns:
        List of (hex, count) tuples, most frequent first
    """
    if top_n <= 0 or len(rgb_pixels) == 0:
        return []

    quantized = (rgb_pixels.astype(np.int64) // BUCKET_SIZE) * BUCKET_SIZE
    keys = (quantized[:, 0] << 16) | (quantized[:, 1] << 8) | quantized[:, 2]

    unique_keys, first_seen, counts = np.unique(keys, return_index=True, return_counts=True)
    # lexsort: last key is primary -> count descending, then first appearance
    order = np.lexsort((first_seen, -counts))[:top_n]

    ranked = []
    for idx in order:
        key = int(unique_keys[idx])
        rgb = ((key >> 16) & 0xFF, (key >> 8) & 0xFF, key & 0xFF)
        ranked.append((rgb_to_hex(rgb), int(counts[idx])))
    return ranked


def analyze_garment_pixels(pixels: PixelBuffer, width: int, height: int,
                           sensitivity: float = DEFAULT_SENSITIVITY,
                           top_n: int = DEFAULT_TOP_N,
                           estimator: Optional[BorderSampleEstimator] = None) -> ExtractionResult:
    """
    Run the full extraction and keep the intermediate statistics.

    Zero-area images and unreadable buffers yield an empty color list
    instead of raising.
    """
    if width <= 0 or height <= 0:
        logger.debug(f"Empty image {width}x{height}, nothing to extract")
        return ExtractionResult(colors=[], background=None, width=max(width, 0), height=max(height, 0))

    try:
        rgba = as_rgba_array(pixels, width, height)
    except (ValueError, TypeError) as e:
        logger.warning(f"Unreadable pixel data for {width}x{height} image: {e}")
        return ExtractionResult(colors=[], background=None, width=width, height=height)

    background = (estimator or _default_estimator).estimate(rgba)
    distances = _background_distances(rgba, background)

    foreground = _foreground_mask(rgba, distances, sensitivity)
    counted = foreground & (distances >= MIN_BACKGROUND_DISTANCE)

    flat_rgb = rgba.reshape(-1, 4)[:, :3]
    ranked = rank_color_buckets(flat_rgb[counted], top_n)

    result = ExtractionResult(
        colors=[hex_color for hex_color, _ in ranked],
        background=rgb_to_hex(background) if background is not None else None,
        width=width,
        height=height,
        opaque_pixels=int(np.count_nonzero(rgba[:, :, 3] >= ALPHA_THRESHOLD)),
        foreground_pixels=int(np.count_nonzero(foreground)),
        counted_pixels=int(np.count_nonzero(counted)),
        bucket_counts=[count for _, count in ranked],
    )

    logger.debug(
        f"Extracted {len(result.colors)} colors from {width}x{height} "
        f"(background={result.background}, foreground={result.foreground_pixels}, "
        f"counted={result.counted_pixels}, sensitivity={sensitivity})"
    )
    return result


def extract_dominant_colors(pixels: PixelBuffer, width: int, height: int,
                            sensitivity: float = DEFAULT_SENSITIVITY,
                            top_n: int = DEFAULT_TOP_N,
                            estimator: Optional[BorderSampleEstimator] = None) -> List[str]:
    """
    Extract up to ``top_n`` representative garment colors.

    Single-color images come back empty because every pixel is within the
    fixed 30-unit distance of the estimated background. Callers that need a
    color regardless should go through ``fallback.extract_with_fallback``.

    Args:
        pixels: RGBA pixel data (flat buffer or array)
        width: Image width
        height: Image height
        sensitivity: Foreground distance threshold (higher keeps fewer pixels)
        top_n: Maximum number of colors to return

    Returns:
        Hex colors ordered by descending pixel count
    """
    return analyze_garment_pixels(pixels, width, height, sensitivity, top_n, estimator).colors


def pick_color_at_point(pixels: PixelBuffer, width: int, height: int, x: int, y: int) -> str:
    """
    Read the color of a single pixel.

    Raises:
        CoordinateOutOfBoundsError: If (x, y) is outside [0, width) x [0, height)
    """
    if x < 0 or y < 0 or x >= width or y >= height:
        raise CoordinateOutOfBoundsError(x, y, width, height)

    rgba = as_rgba_array(pixels, width, height)
    return rgb_to_hex(rgba[int(y), int(x), :3])
