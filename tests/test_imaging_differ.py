"""Tests for the pixelmatch-backed differ."""

import pytest

from visual_parity.imaging.differ import PROD_TINT, STAGING_TINT, PixelmatchDiffer

from conftest import make_image

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
BOX = (10, 10, 19, 19)  # 100 pixels
SIZE = (40, 30)


@pytest.fixture
def differ():
    return PixelmatchDiffer()


class TestPixelmatchDiffer:

    def test_identical_images_are_fully_similar(self, differ):
        img = make_image(*SIZE, box=BOX)
        outcome = differ.diff(img, img.copy())
        assert outcome.similarity == 100.0
        assert outcome.mismatched_pixels == 0
        assert outcome.total_pixels == 1200
        assert outcome.mask.size == SIZE

    def test_similarity_from_mismatched_pixels(self, differ):
        outcome = differ.diff(make_image(*SIZE, box=BOX), make_image(*SIZE))
        assert outcome.mismatched_pixels == 100
        assert outcome.similarity == pytest.approx(1100 / 1200 * 100)

    def test_completely_different_images(self, differ):
        outcome = differ.diff(make_image(*SIZE, color=BLACK), make_image(*SIZE, color=WHITE))
        assert outcome.similarity == 0.0

    def test_is_deterministic(self, differ):
        a = make_image(*SIZE, box=BOX)
        b = make_image(*SIZE, box=(12, 8, 25, 20), box_color=(200, 30, 30, 255))
        first = differ.diff(a, b)
        second = differ.diff(a, b)
        assert first.similarity == second.similarity
        assert first.mask.tobytes() == second.mask.tobytes()

    def test_staging_side_difference_is_orange(self, differ):
        outcome = differ.diff(make_image(*SIZE, box=BOX), make_image(*SIZE))
        assert outcome.mask.getpixel((15, 15)) == STAGING_TINT

    def test_prod_side_difference_is_blue(self, differ):
        outcome = differ.diff(make_image(*SIZE), make_image(*SIZE, box=BOX))
        assert outcome.mask.getpixel((15, 15)) == PROD_TINT

    def test_unchanged_pixels_are_not_tinted(self, differ):
        outcome = differ.diff(make_image(*SIZE, box=BOX), make_image(*SIZE))
        assert outcome.mask.getpixel((2, 2)) not in (STAGING_TINT, PROD_TINT)

    def test_transparent_padding_matches_white(self, differ):
        padded = make_image(*SIZE, color=(255, 255, 255, 0))
        outcome = differ.diff(padded, make_image(*SIZE))
        assert outcome.similarity == 100.0

    def test_size_mismatch_raises(self, differ):
        with pytest.raises(ValueError, match="different sizes"):
            differ.diff(make_image(40, 30), make_image(40, 31))

    def test_custom_tints(self):
        differ = PixelmatchDiffer(a_tint=(0, 255, 0, 255), b_tint=(255, 0, 255, 255))
        outcome = differ.diff(make_image(*SIZE, box=BOX), make_image(*SIZE))
        assert outcome.mask.getpixel((15, 15)) == (0, 255, 0, 255)
