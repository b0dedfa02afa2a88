import numpy as np
import pytest

from coloring_book.errors import ImageProcessingError
from coloring_book.models.bitmap import Bitmap
from coloring_book.models.color import hex_to_rgb
from coloring_book.models.processing_options import ProcessingOptions
from coloring_book.services.quantization_service import (
    QuantizationService,
    nearest_indices,
)


@pytest.fixture
def service():
    return QuantizationService()


def _used_colors(bitmap):
    return {tuple(int(c) for c in px) for px in bitmap.rgb.reshape(-1, 3)}


@pytest.mark.parametrize("k", [1, 2, 5, 8, 12])
def test_palette_has_exactly_k_entries_and_covers_every_pixel(service, gradient_photo, k):
    result = service.quantize(gradient_photo, k, ProcessingOptions(seed=7))
    assert len(result.palette) == k
    assert len(result.counts) == k
    assert sum(result.counts) == gradient_photo.width * gradient_photo.height
    assert _used_colors(result.image) <= set(result.colors)
    assert (result.image.width, result.image.height, result.image.channels) == (64, 48, 3)


def test_four_extreme_colors_are_recovered(service, four_color_bitmap):
    result = service.quantize(four_color_bitmap, 4, ProcessingOptions(seed=3))
    assert set(result.palette) == {"#000000", "#ffffff", "#ff0000", "#0000ff"}
    np.testing.assert_array_equal(result.image.pixels, four_color_bitmap.pixels)


def test_more_colors_than_distinct_pixels_is_not_an_error(service, solid):
    result = service.quantize(solid(5, 5, (10, 200, 30)), 6, ProcessingOptions(seed=0))
    assert result.palette == ["#0ac81e"] * 6
    assert result.counts[0] == 25


def test_palette_is_ordered_by_pixel_count(service, monkeypatch):
    fixed = np.array([[255.0, 255.0, 0.0], [0.0, 0.0, 255.0]])
    monkeypatch.setattr(QuantizationService, "seed_centroids",
                        staticmethod(lambda sample, k, rng: fixed.copy()))
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    pixels[:, :] = (0, 0, 255)
    pixels[:2, :] = (255, 255, 0)
    result = service.quantize(Bitmap(pixels), 2, ProcessingOptions(seed=11))
    assert result.palette == ["#0000ff", "#ffff00"]
    assert result.counts == [80, 20]


def test_seeded_runs_are_reproducible(service, gradient_photo):
    a = service.quantize(gradient_photo, 5, rng=np.random.default_rng(99))
    b = service.quantize(gradient_photo, 5, rng=np.random.default_rng(99))
    assert a.palette == b.palette
    np.testing.assert_array_equal(a.image.pixels, b.image.pixels)


def test_alpha_is_ignored(service, solid):
    result = service.quantize(solid(4, 4, (40, 50, 60), channels=4), 1, ProcessingOptions(seed=1))
    assert result.image.channels == 3
    assert result.palette == ["#28323c"]


def test_large_input_is_resized_before_quantizing(service, solid):
    result = service.quantize(solid(2000, 1000, (1, 2, 3)), 2, ProcessingOptions(seed=1, max_dimension=200))
    assert (result.image.width, result.image.height) == (200, 100)


def test_k_below_one_is_rejected(service, solid):
    with pytest.raises(ValueError):
        service.quantize(solid(2, 2, (0, 0, 0)), 0)


def test_invalid_input_is_a_typed_failure(service):
    with pytest.raises(ImageProcessingError) as info:
        service.quantize("not a bitmap", 4)
    assert info.value.stage == "quantize"


def test_sample_pixels_uses_even_stride():
    pixels = np.arange(25_000 * 3).reshape(-1, 3)
    sample = QuantizationService.sample_pixels(pixels, 10_000)
    np.testing.assert_array_equal(sample, pixels[::2])
    assert len(QuantizationService.sample_pixels(pixels[:500], 10_000)) == 500


def test_nearest_indices_breaks_ties_by_lowest_index():
    centroids = np.array([[10, 0, 0], [0, 0, 0], [20, 0, 0]])
    pixels = np.array([[5, 0, 0], [15, 0, 0], [0, 0, 0], [11, 0, 0]])
    np.testing.assert_array_equal(nearest_indices(pixels, centroids, chunk=3), [0, 0, 1, 0])


def test_empty_cluster_keeps_previous_value():
    sample = np.array([[0, 0, 0], [2, 2, 2], [255, 255, 255]])
    labels = np.array([0, 0, 0])
    centroids = np.array([[1.0, 1.0, 1.0], [50.0, 60.0, 70.0]])
    updated = QuantizationService.update_centroids(sample, labels, centroids)
    # mean 85.67 → 86; cluster 1 untouched
    np.testing.assert_array_equal(updated, [[86, 86, 86], [50, 60, 70]])


def test_centroid_mean_rounds_half_up():
    sample = np.array([[0, 1, 2], [1, 2, 3]])
    updated = QuantizationService.update_centroids(sample, np.array([0, 0]), np.zeros((1, 3)))
    np.testing.assert_array_equal(updated, [[1, 2, 3]])


def test_palette_hex_values_are_valid(service, gradient_photo):
    result = service.quantize(gradient_photo, 8, ProcessingOptions(seed=5))
    for h in result.palette:
        r, g, b = hex_to_rgb(h)
        assert h == h.lower()
        assert 0 <= min(r, g, b) and max(r, g, b) <= 255
