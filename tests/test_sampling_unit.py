"""
Unit tests for the working-set reducer.
"""

import numpy as np
import pytest

from dominant_colours.services.colors.errors import InvalidInputError
from dominant_colours.services.colors.sampling import reduce, validate_samples


@pytest.fixture
def unique_pixels():
    """1000 distinct rows whose first channel increases with position."""
    return np.arange(3000, dtype=np.int64).reshape(1000, 3)


class TestReduceBelowCap:
    """Inputs within the cap pass through untouched"""

    def test_returns_all_pixels_in_order(self, unique_pixels):
        out = reduce(unique_pixels, cap=1000)

        np.testing.assert_array_equal(out, unique_pixels)

    def test_accepts_plain_sequences(self):
        pixels = [(255, 0, 0), (0, 255, 0), (255, 0, 0)]

        out = reduce(pixels, cap=10)

        assert out.tolist() == [[255, 0, 0], [0, 255, 0], [255, 0, 0]]

    def test_duplicates_are_kept(self):
        pixels = np.full((5, 3), 7, dtype=np.uint8)

        assert len(reduce(pixels, cap=5)) == 5


class TestReduceAboveCap:
    """Inputs above the cap are subsampled deterministically"""

    def test_random_selection_size_and_membership(self, unique_pixels):
        out = reduce(unique_pixels, cap=100, seed=42)

        assert out.shape == (100, 3)
        assert len(np.unique(out, axis=0)) == 100
        # Rows come from the input and keep their relative order
        assert np.all(out[:, 0] % 3 == 0)
        assert np.all(np.diff(out[:, 0]) > 0)

    def test_random_selection_is_reproducible(self, unique_pixels):
        first = reduce(unique_pixels, cap=50, seed=7)
        second = reduce(unique_pixels, cap=50, seed=7)

        np.testing.assert_array_equal(first, second)

    def test_stride_selection(self):
        pixels = np.arange(300).reshape(100, 3)

        out = reduce(pixels, cap=10, method="stride")

        assert out[:, 0].tolist() == [0, 30, 60, 90, 120, 150, 180, 210, 240, 270]

    def test_stride_selection_with_uneven_ratio(self, unique_pixels):
        out = reduce(unique_pixels, cap=300, method="stride")

        assert len(out) == 300
        assert np.all(np.diff(out[:, 0]) > 0)

    def test_preserves_dtype(self):
        pixels = np.random.default_rng(0).integers(0, 256, size=(500, 3), dtype=np.uint8)

        assert reduce(pixels, cap=10).dtype == np.uint8


class TestReduceErrors:
    """Invalid inputs fail before any work is done"""

    def test_empty_pixels(self):
        with pytest.raises(InvalidInputError):
            reduce([], cap=10)

    def test_zero_cap(self, unique_pixels):
        with pytest.raises(InvalidInputError):
            reduce(unique_pixels, cap=0)

    def test_unknown_method(self, unique_pixels):
        with pytest.raises(InvalidInputError):
            reduce(unique_pixels, cap=10, method="median")

    def test_wrong_channel_count(self):
        with pytest.raises(InvalidInputError):
            reduce(np.zeros((10, 4)), cap=5)

    def test_non_finite_values(self):
        with pytest.raises(InvalidInputError):
            validate_samples([[0.0, np.inf, 0.0]])

    def test_non_numeric_values(self):
        with pytest.raises(InvalidInputError):
            validate_samples([["red", "green", "blue"]])

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            reduce([], cap=1)

    def test_ragged_rows(self):
        with pytest.raises(InvalidInputError):
            reduce([[1, 2, 3], [1, 2]], cap=10)
