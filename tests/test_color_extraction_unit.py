"""
Unit tests for dominant color extraction.

Covers the border-sampled background estimate, foreground segmentation,
bucket ranking, color picking and the empty-result fallbacks.
"""

from unittest.mock import patch

import numpy as np
import pytest

from conftest import solid_rgba
from wardrobe.services.colors.errors import CoordinateOutOfBoundsError
from wardrobe.services.colors.extraction import (
    BorderSampleEstimator, analyze_garment_pixels, as_rgba_array, estimate_background,
    extract_dominant_colors, pick_color_at_point, rank_color_buckets, segment_foreground,
)
from wardrobe.services.colors.fallback import (
    FALLBACK_CENTER_PIXEL, FALLBACK_KMEANS, cluster_palette, extract_with_fallback,
)


class TestAsRgbaArray:

    def test_flat_bytes_match_array(self):
        img = solid_rgba(2, 3, (1, 2, 3))
        flat = img.tobytes()
        np.testing.assert_array_equal(as_rgba_array(flat, 3, 2), img)

    def test_rgb_array_becomes_opaque(self):
        rgb = np.full((2, 2, 3), 7, dtype=np.uint8)
        rgba = as_rgba_array(rgb, 2, 2)
        assert rgba.shape == (2, 2, 4)
        assert np.all(rgba[:, :, 3] == 255)

    def test_size_mismatch_raises(self):
        with pytest.raises(ValueError):
            as_rgba_array(bytes(10), 2, 2)


class TestEstimateBackground:

    def test_uniform_border(self):
        img = solid_rgba(20, 20, (255, 255, 255))
        img[5:15, 5:15, :3] = (0, 0, 0)
        assert estimate_background(img, 20, 20) == "#ffffff"

    def test_single_pixel_image(self):
        img = solid_rgba(1, 1, (12, 34, 56))
        assert estimate_background(img, 1, 1) == "#0c2238"

    def test_rounds_half_up(self):
        # Samples for a 1x2 image: (0,0), (1,0), (0,0), (0,0)
        img = solid_rgba(2, 1, (0, 0, 0))
        img[1, 0, :3] = (2, 2, 2)
        assert estimate_background(img, 1, 2) == "#010101"

    def test_transparent_border_has_no_estimate(self):
        img = solid_rgba(10, 10, (255, 255, 255), alpha=0)
        img[4:6, 4:6] = (200, 0, 0, 255)
        assert estimate_background(img, 10, 10) is None

    def test_transparent_samples_are_skipped(self):
        img = solid_rgba(10, 10, (0, 0, 0), alpha=0)
        img[0, :] = (100, 100, 100, 255)
        assert estimate_background(img, 10, 10) == "#646464"

    def test_empty_image(self):
        assert estimate_background(b"", 0, 0) is None

    def test_stride_is_configurable(self):
        estimator = BorderSampleEstimator(stride=1)
        img = solid_rgba(5, 5, (10, 10, 10))
        assert list(estimator.estimate(img)) == [10, 10, 10]

    def test_invalid_stride(self):
        with pytest.raises(ValueError):
            BorderSampleEstimator(stride=0)


class TestSegmentForeground:

    def test_higher_sensitivity_keeps_fewer_pixels(self):
        img = solid_rgba(10, 10, (255, 255, 255))
        img[5, 5, :3] = (200, 200, 200)  # ~95 away from white

        assert list(segment_foreground(img, 10, 10, "#ffffff", sensitivity=50)) == [55]
        assert len(segment_foreground(img, 10, 10, "#ffffff", sensitivity=100)) == 0

    def test_distance_must_exceed_sensitivity(self):
        img = solid_rgba(1, 2, (255, 255, 255))
        img[0, 1, :3] = (255, 255, 205)  # exactly 50 away
        assert len(segment_foreground(img, 2, 1, (255, 255, 255), sensitivity=50)) == 0
        assert list(segment_foreground(img, 2, 1, (255, 255, 255), sensitivity=49)) == [1]

    def test_transparent_pixels_excluded(self):
        img = solid_rgba(3, 3, (0, 0, 0))
        img[1, 1, 3] = 0
        indices = segment_foreground(img, 3, 3, "#ffffff", sensitivity=50)
        assert 4 not in indices
        assert len(indices) == 8

    def test_no_background_keeps_all_opaque(self):
        img = solid_rgba(2, 2, (10, 20, 30))
        img[0, 0, 3] = 10
        assert list(segment_foreground(img, 2, 2, None)) == [1, 2, 3]


class TestRankColorBuckets:

    def test_quantizes_to_multiples_of_32(self):
        pixels = np.array([[255, 0, 0], [250, 10, 31]], dtype=np.uint8)
        assert rank_color_buckets(pixels, 5) == [("#e00000", 2)]

    def test_ties_keep_first_seen(self):
        pixels = np.array([[0, 0, 255], [255, 0, 0]], dtype=np.uint8)
        assert [hex_ for hex_, _ in rank_color_buckets(pixels, 5)] == ["#0000e0", "#e00000"]

    def test_top_n_limits(self):
        pixels = np.array([[0, 0, 0], [64, 0, 0], [64, 0, 0], [128, 0, 0]], dtype=np.uint8)
        assert rank_color_buckets(pixels, 1) == [("#400000", 2)]
        assert rank_color_buckets(pixels, 0) == []


class TestExtractDominantColors:

    def test_single_red_pixel_on_white(self):
        img = solid_rgba(4, 4, (255, 255, 255))
        img[1, 1, :3] = (255, 0, 0)
        assert extract_dominant_colors(img, 4, 4, sensitivity=50, top_n=5) == ["#e00000"]

    def test_flat_buffer_input(self):
        img = solid_rgba(4, 4, (255, 255, 255))
        img[1, 1, :3] = (255, 0, 0)
        assert extract_dominant_colors(img.tobytes(), 4, 4) == ["#e00000"]

    def test_orders_by_frequency(self, garment_on_white):
        colors = extract_dominant_colors(garment_on_white, 40, 40)
        assert colors == ["#002060", "#e00000"]

    def test_equal_counts_follow_scan_order(self):
        img = solid_rgba(10, 10, (255, 255, 255))
        img[2, 2, :3] = (255, 0, 0)
        img[2, 3, :3] = (0, 0, 255)
        assert extract_dominant_colors(img, 10, 10) == ["#e00000", "#0000e0"]

        img[2, 2, :3] = (0, 0, 255)
        img[2, 3, :3] = (255, 0, 0)
        assert extract_dominant_colors(img, 10, 10) == ["#0000e0", "#e00000"]

    def test_results_are_distinct(self, garment_on_white):
        colors = extract_dominant_colors(garment_on_white, 40, 40, top_n=10)
        assert len(colors) == len(set(colors))

    def test_near_background_pixels_are_dropped(self):
        img = solid_rgba(10, 10, (255, 255, 255))
        img[5, 5, :3] = (235, 235, 255)  # ~28 away: above sensitivity 10, below 30
        result = analyze_garment_pixels(img, 10, 10, sensitivity=10)
        assert result.foreground_pixels == 1
        assert result.counted_pixels == 0
        assert result.colors == []

    def test_single_color_image_is_empty(self):
        img = solid_rgba(8, 8, (20, 40, 120))
        assert extract_dominant_colors(img, 8, 8) == []

    def test_fully_transparent_image_is_empty(self):
        img = solid_rgba(8, 8, (20, 40, 120), alpha=0)
        assert extract_dominant_colors(img, 8, 8) == []

    def test_zero_area_image_is_empty(self):
        assert extract_dominant_colors(b"", 0, 0) == []
        assert extract_dominant_colors(b"", 0, 5) == []

    def test_unreadable_buffer_is_empty(self):
        assert extract_dominant_colors(bytes(7), 2, 2) == []

    def test_deterministic(self, garment_on_white):
        first = analyze_garment_pixels(garment_on_white, 40, 40)
        second = analyze_garment_pixels(garment_on_white, 40, 40)
        assert first == second
        assert first.bucket_counts == [384, 16]

    def test_sensitivity_changes_result(self):
        img = solid_rgba(10, 10, (255, 255, 255))
        img[3:5, 3:5, :3] = (0, 0, 0)
        img[6, 6, :3] = (200, 200, 200)
        assert extract_dominant_colors(img, 10, 10, sensitivity=50) == ["#000000", "#c0c0c0"]
        assert extract_dominant_colors(img, 10, 10, sensitivity=100) == ["#000000"]


class TestPickColorAtPoint:

    def test_reads_pixel(self, garment_on_white):
        assert pick_color_at_point(garment_on_white, 40, 40, 13, 13) == "#e60a0a"
        assert pick_color_at_point(garment_on_white, 40, 40, 0, 0) == "#ffffff"

    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (40, 0), (0, 40)])
    def test_out_of_bounds(self, garment_on_white, x, y):
        with pytest.raises(CoordinateOutOfBoundsError):
            pick_color_at_point(garment_on_white, 40, 40, x, y)


class TestFallback:

    def test_cluster_palette_two_colors(self):
        pixels = np.array([[255, 0, 0]] * 30 + [[0, 0, 255]] * 10, dtype=np.uint8)
        palette = cluster_palette(pixels, k=5)
        assert [entry["hex"] for entry in palette] == ["#ff0000", "#0000ff"]
        assert palette[0]["ratio"] == pytest.approx(0.75)

    def test_cluster_palette_empty(self):
        with pytest.raises(RuntimeError):
            cluster_palette(np.empty((0, 3), dtype=np.uint8))

    def test_single_color_uses_kmeans(self):
        img = solid_rgba(8, 8, (20, 40, 120))
        result = extract_with_fallback(img, 8, 8)
        assert result.colors == ["#142878"]
        assert result.fallback_used
        assert result.fallback_method == FALLBACK_KMEANS

    def test_center_pixel_when_clustering_fails(self):
        img = solid_rgba(8, 8, (20, 40, 120))
        with patch("wardrobe.services.colors.fallback.cluster_palette",
                   side_effect=RuntimeError("clustering unavailable")):
            result = extract_with_fallback(img, 8, 8)
        assert result.colors == ["#142878"]
        assert result.fallback_method == FALLBACK_CENTER_PIXEL

    def test_no_fallback_when_colors_found(self, garment_on_white):
        result = extract_with_fallback(garment_on_white, 40, 40)
        assert result.colors == ["#002060", "#e00000"]
        assert not result.fallback_used

    def test_transparent_image_stays_empty(self):
        img = solid_rgba(8, 8, (20, 40, 120), alpha=0)
        result = extract_with_fallback(img, 8, 8)
        assert result.colors == []
        assert not result.fallback_used
