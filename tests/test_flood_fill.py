# noqa: D104
"""Tests for border-seeded flood-fill background removal."""

from __future__ import annotations

import numpy as np
import pytest

from mockup_service.errors import BackgroundRemovalError
from mockup_service.flood_fill import (
    ColorCluster,
    FloodFillRemover,
    cluster_colors,
    sample_border,
    select_background_colors,
)
from mockup_service.imaging import RasterImage, solid_image

from .conftest import BLUE, WHITE, framed_image


class TestBorderSampling:
    def test_stride_follows_image_size(self) -> None:
        image = solid_image(100, 60, WHITE)
        samples = sample_border(image, divisions=50)
        # 50 columns on top + bottom, 60 rows on left + right
        assert samples.shape == (2 * 50 + 2 * 60, 3)

    def test_transparent_samples_skipped(self) -> None:
        image = solid_image(10, 10, (255, 255, 255, 0))
        image.pixels[0, :] = WHITE
        samples = sample_border(image)
        assert len(samples) == 10 + 2  # top row plus its two corners seen by the side columns
        assert np.all(samples == 255)


class TestClustering:
    def test_near_colors_share_a_cluster(self) -> None:
        samples = np.array([[255, 255, 255], [245, 245, 245], [255, 0, 0]], dtype=np.float64)
        clusters = cluster_colors(samples, max_distance=25.0)
        assert [c.count for c in clusters] == [2, 1]
        np.testing.assert_allclose(clusters[0].color, [250, 250, 250])

    def test_running_mean(self) -> None:
        cluster = ColorCluster()
        for value in (10, 20, 30):
            cluster.add(np.array([value, value, value], dtype=np.float64))
        assert cluster.count == 3
        assert cluster.brightness == pytest.approx(20.0)

    def test_selection_orders_by_count_and_caps(self) -> None:
        clusters = [
            ColorCluster(np.array([250.0, 250.0, 250.0]), 5),
            ColorCluster(np.array([10.0, 10.0, 10.0]), 9),
            ColorCluster(np.array([200.0, 200.0, 200.0]), 7),
            ColorCluster(np.array([220.0, 220.0, 220.0]), 1),
        ]
        colors = select_background_colors(clusters, max_clusters=3)
        np.testing.assert_allclose(colors[:, 0], [10, 200, 250])

    def test_brightness_filter_drops_dark_clusters(self) -> None:
        clusters = [
            ColorCluster(np.array([10.0, 10.0, 10.0]), 9),
            ColorCluster(np.array([250.0, 250.0, 250.0]), 5),
        ]
        colors = select_background_colors(clusters, max_clusters=3, min_brightness=180.0)
        np.testing.assert_allclose(colors, [[250, 250, 250]])

    def test_no_cluster_passes_filter(self) -> None:
        clusters = [ColorCluster(np.array([10.0, 10.0, 10.0]), 9)]
        assert select_background_colors(clusters, min_brightness=180.0).shape == (0, 3)


class TestFloodFillRemover:
    def test_border_connected_background_cleared(self, framed_artwork: RasterImage) -> None:
        out = FloodFillRemover().remove(framed_artwork)

        assert (out.width, out.height) == (500, 500)
        assert np.all(out.alpha[:20, :] == 0)
        assert np.all(out.alpha[-20:, :] == 0)
        assert np.all(out.alpha[:, :20] == 0)
        assert np.all(out.alpha[:, -20:] == 0)
        assert np.all(out.alpha[20:480, 20:480] == 255)
        # colour channels are untouched, even where alpha was cleared
        np.testing.assert_array_equal(out.rgb, framed_artwork.rgb)

    def test_input_not_mutated(self, framed_artwork: RasterImage) -> None:
        before = framed_artwork.pixels.copy()
        FloodFillRemover().remove(framed_artwork)
        np.testing.assert_array_equal(framed_artwork.pixels, before)

    def test_enclosed_white_region_preserved(self) -> None:
        image = framed_image(size=100, frame=10)
        image.pixels[40:60, 40:60] = WHITE  # white "text" inside the blue design
        out = FloodFillRemover().remove(image)

        assert np.all(out.alpha[:10, :] == 0)
        assert np.all(out.alpha[40:60, 40:60] == 255)
        assert np.all(out.alpha[10:90, 10:90] == 255)

    def test_soft_edge_bridged_by_grow_tolerance(self) -> None:
        image = framed_image(size=60, frame=10)
        # anti-aliased ring: farther than the start tolerance, within the grow tolerance
        image.pixels[10, 10:50] = (238, 238, 238, 255)
        out = FloodFillRemover(start_tolerance=26.0, grow_tolerance=30.0).remove(image)

        assert np.all(out.alpha[10, 10:50] == 0)
        assert np.all(out.alpha[11:50, 11:50] == 255)

    def test_off_white_border_cleared(self) -> None:
        image = framed_image(size=60, frame=10, frame_color=(238, 238, 238, 255))
        out = FloodFillRemover().remove(image)
        assert np.all(out.alpha[:10, :] == 0)
        assert np.all(out.alpha[10:50, 10:50] == 255)

    def test_noise_without_background_unchanged(self, dark_noise: RasterImage) -> None:
        out = FloodFillRemover().remove(dark_noise)
        np.testing.assert_array_equal(out.pixels, dark_noise.pixels)

    def test_dark_frame_kept_with_brightness_filter(self) -> None:
        image = framed_image(size=50, frame=5, frame_color=(0, 0, 0, 255), center_color=BLUE)
        out = FloodFillRemover(min_brightness=180.0).remove(image)
        np.testing.assert_array_equal(out.pixels, image.pixels)

    def test_dark_frame_removed_without_brightness_filter(self) -> None:
        image = framed_image(size=50, frame=5, frame_color=(0, 0, 0, 255), center_color=(255, 255, 0, 255))
        out = FloodFillRemover(min_brightness=None).remove(image)
        assert np.all(out.alpha[:5, :] == 0)
        assert np.all(out.alpha[5:45, 5:45] == 255)

    def test_degenerate_image_unchanged(self) -> None:
        image = solid_image(1, 40, WHITE)
        out = FloodFillRemover().remove(image)
        np.testing.assert_array_equal(out.pixels, image.pixels)

    def test_fully_transparent_border_unchanged(self) -> None:
        image = framed_image(size=30, frame=3, frame_color=(255, 255, 255, 0), center_color=WHITE)
        out = FloodFillRemover().remove(image)
        np.testing.assert_array_equal(out.pixels, image.pixels)

    def test_empty_image_is_a_removal_failure(self) -> None:
        image = RasterImage(np.zeros((0, 0, 4), dtype=np.uint8))
        with pytest.raises(BackgroundRemovalError):
            FloodFillRemover().remove(image)

    def test_debug_mask_written(self, tmp_path, framed_artwork: RasterImage) -> None:
        FloodFillRemover(debug_dir=tmp_path).remove(framed_artwork)
        assert (tmp_path / "flood-fill_mask.png").exists()
