"""
Color Extraction API Orchestrator

Runs the extraction pipeline for one decoded upload: optional downscale,
dominant color extraction with fallback, optional swatch, metrics.
"""

import time
from typing import Optional

import numpy as np

from wardrobe.config import config
from wardrobe.schemas import ColorExtractResponse, ExtractionDebug
from wardrobe.services.colors.fallback import extract_with_fallback
from wardrobe.services.colors.swatches import render_swatch_strip
from wardrobe.services.imaging import resize_long_edge
from wardrobe.utils.ids import generate_request_id
from wardrobe.utils.logging import get_logger
from wardrobe.utils.metrics import get_metrics

logger = get_logger()


def handle_extract(rgba: np.ndarray,
                   sensitivity: int,
                   top_n: int,
                   include_swatch: bool = False,
                   max_edge: Optional[int] = None,
                   request_id: Optional[str] = None) -> ColorExtractResponse:
    """
    Extract dominant colors from a decoded RGBA image.

    Synchronous and CPU-bound; the route runs it in a worker thread.

    Args:
        rgba: (H, W, 4) uint8 image
        sensitivity: Background distance threshold
        top_n: Maximum number of colors
        include_swatch: Render the colors as a PNG strip
        max_edge: Long-edge limit before extraction (default from config)
        request_id: Id to log under; generated when missing

    Returns:
        ColorExtractResponse

    Raises:
        ValueError: If sensitivity or top_n is outside the configured range
    """
    if not config.validate_sensitivity(sensitivity):
        raise ValueError(f"sensitivity must be within {config.MIN_SENSITIVITY}-{config.MAX_SENSITIVITY}")
    if not config.validate_top_n(top_n):
        raise ValueError(f"top_n must be within 1-{config.MAX_TOP_N}")

    request_id = request_id or generate_request_id("extract")
    metrics = get_metrics()
    start_time = time.time()

    original_height, original_width = rgba.shape[:2]
    rgba = resize_long_edge(rgba, max_edge)
    height, width = rgba.shape[:2]
    resized = (height, width) != (original_height, original_width)
    if resized:
        logger.info(f"Downscaled {original_width}x{original_height} -> {width}x{height}",
                    extra={"request_id": request_id})

    extract_start = time.time()
    result = extract_with_fallback(
        rgba, width, height,
        sensitivity=sensitivity,
        top_n=top_n,
        max_samples=config.FALLBACK_MAX_SAMPLES,
        rng_seed=42
    )
    extract_ms = (time.time() - extract_start) * 1000
    metrics.record_timing("extract", extract_ms)

    logger.info(f"Extracted {len(result.colors)} colors",
                extra={"request_id": request_id, "ms_extract": extract_ms,
                       "background": result.background, "fallback": result.fallback_method})

    if result.fallback_used:
        metrics.increment_fallback_count(result.fallback_method)

    swatch_b64 = None
    if include_swatch and result.colors:
        try:
            swatch_b64 = render_swatch_strip(result.colors, highlight_index=0)
        except (ValueError, RuntimeError) as e:
            # A broken swatch never fails the extraction
            logger.warning(f"Swatch generation failed: {e}", extra={"request_id": request_id})

    metrics.increment_extract_count()
    metrics.record_palette_size(len(result.colors))
    metrics.record_timing("extract_total", (time.time() - start_time) * 1000)

    return ColorExtractResponse(
        width=width,
        height=height,
        sensitivity=sensitivity,
        colors=result.colors,
        fallback_used=result.fallback_used,
        fallback_method=result.fallback_method,
        swatch_png_b64=swatch_b64,
        debug=ExtractionDebug(
            background=result.background,
            opaque_pixels=result.opaque_pixels,
            foreground_pixels=result.foreground_pixels,
            counted_pixels=result.counted_pixels,
            bucket_counts=result.bucket_counts,
            resized=resized,
        ),
    )
