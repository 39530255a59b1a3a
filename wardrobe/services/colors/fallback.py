"""
Fallbacks for extractions that come back without any color.

Border-sampled background removal drops every pixel of a solid-color photo,
and garments shot against a backdrop of nearly the same tone lose most of
their pixels too. When that happens the opaque pixels are clustered with
MiniBatchKMeans instead; if clustering cannot run, the center pixel is used.
"""

from collections import Counter
from typing import Dict, List, Optional

import numpy as np
from loguru import logger
from sklearn.cluster import MiniBatchKMeans

from .convert import rgb_to_hex
from .extraction import (
    ALPHA_THRESHOLD, DEFAULT_SENSITIVITY, DEFAULT_TOP_N,
    ExtractionResult, PixelBuffer, BorderSampleEstimator,
    analyze_garment_pixels, as_rgba_array,
)

FALLBACK_KMEANS = "kmeans"
FALLBACK_CENTER_PIXEL = "center_pixel"


def cluster_palette(pixels_rgb_u8: np.ndarray, k: int = 5, rng_seed: int = 42) -> List[Dict]:
    """
    Cluster pixels into a color palette using MiniBatchKMeans.

    ``k`` is lowered to the number of distinct colors present, so a
    single-color input yields exactly that color.

    Args:
        pixels_rgb_u8: RGB pixels (N, 3) uint8
        k: Maximum number of clusters
        rng_seed: Random seed for deterministic clustering

    Returns:
        List of {"hex": str, "ratio": float} ordered by dominance

    Raises:
        RuntimeError: If there are no pixels or clustering fails
    """
    if len(pixels_rgb_u8) == 0 or k <= 0:
        raise RuntimeError("No pixels to cluster")

    n_unique = len(np.unique(pixels_rgb_u8.reshape(-1, 3), axis=0))
    n_clusters = min(k, n_unique)
    logger.info(f"Fallback clustering with k={n_clusters}, {len(pixels_rgb_u8)} pixels")

    try:
        kmeans = MiniBatchKMeans(
            n_clusters=n_clusters,
            random_state=rng_seed,
            batch_size=min(2048, len(pixels_rgb_u8)),
            n_init=3,
            max_iter=100
        )
        labels = kmeans.fit_predict(pixels_rgb_u8.astype(np.float32))
    except ValueError as e:
        logger.error(f"Clustering failed: {e}")
        raise RuntimeError(f"K-means clustering failed: {e}") from e

    centers = np.clip(np.rint(kmeans.cluster_centers_), 0, 255).astype(np.uint8)
    label_counts = Counter(labels.tolist())
    total = len(labels)

    # Dominance descending; equal counts keep cluster index order
    order = sorted(range(n_clusters), key=lambda i: -label_counts.get(i, 0))

    palette = []
    seen = set()
    for i in order:
        hex_color = rgb_to_hex(centers[i])
        if hex_color in seen or label_counts.get(i, 0) == 0:
            continue
        seen.add(hex_color)
        palette.append({"hex": hex_color, "ratio": label_counts[i] / total})
    return palette


def sample_center_pixel(rgba: np.ndarray) -> Optional[str]:
    """Color of the center pixel, or None if it is transparent."""
    height, width = rgba.shape[:2]
    pixel = rgba[height // 2, width // 2]
    if pixel[3] < ALPHA_THRESHOLD:
        return None
    return rgb_to_hex(pixel[:3])


def extract_with_fallback(pixels: PixelBuffer, width: int, height: int,
                          sensitivity: float = DEFAULT_SENSITIVITY,
                          top_n: int = DEFAULT_TOP_N,
                          estimator: Optional[BorderSampleEstimator] = None,
                          max_samples: int = 20000,
                          rng_seed: int = 42) -> ExtractionResult:
    """
    Extract dominant colors, falling back when background removal leaves nothing.

    Empty, unreadable and fully transparent images stay empty; the fallback
    only runs when opaque pixels exist.
    """
    result = analyze_garment_pixels(pixels, width, height, sensitivity, top_n, estimator)
    if result.colors or top_n <= 0 or width <= 0 or height <= 0:
        return result

    try:
        rgba = as_rgba_array(pixels, width, height)
    except (ValueError, TypeError):
        return result

    opaque = rgba[rgba[:, :, 3] >= ALPHA_THRESHOLD][:, :3]
    if len(opaque) == 0:
        return result

    if len(opaque) > max_samples:
        rng = np.random.default_rng(rng_seed)
        opaque = opaque[rng.choice(len(opaque), size=max_samples, replace=False)]

    try:
        palette = cluster_palette(opaque, k=top_n, rng_seed=rng_seed)
        result.colors = [entry["hex"] for entry in palette][:top_n]
        result.fallback_method = FALLBACK_KMEANS
    except RuntimeError as e:
        logger.warning(f"K-means fallback failed, sampling center pixel: {e}")
        center = sample_center_pixel(rgba)
        result.colors = [center] if center else []
        result.fallback_method = FALLBACK_CENTER_PIXEL

    result.fallback_used = True
    logger.info(f"Extraction fallback '{result.fallback_method}' produced {result.colors}")
    return result
