"""Unit tests for size tokens and numeric clamping."""

import logging

import pytest

from genmedia.core.sizes import (
    ASPECT_RATIOS,
    SIZE_TOKENS,
    aspect_ratio_for,
    clamp_guidance,
    clamp_num_images,
    clamp_range,
    clamp_steps,
    dimensions_for,
)

_SIZES = {
    "square_hd": (1024, 1024),
    "portrait_4_3": (768, 1024),
    "portrait_16_9": (576, 1024),
    "landscape_4_3": (1024, 768),
    "landscape_16_9": (1024, 576),
}


@pytest.mark.unit
class TestAspectRatio:
    @pytest.mark.parametrize(
        "token, ratio",
        [
            ("square_hd", "1:1"),
            ("portrait_4_3", "3:4"),
            ("portrait_16_9", "9:16"),
            ("landscape_4_3", "4:3"),
            ("landscape_16_9", "16:9"),
        ],
    )
    def test_known_tokens(self, token, ratio):
        assert aspect_ratio_for(token) == ratio

    @pytest.mark.parametrize("token", [None, "", "huge", "SQUARE_HD"])
    def test_unknown_falls_back_to_square(self, token):
        assert aspect_ratio_for(token) == "1:1"

    def test_every_token_has_a_ratio(self):
        assert set(SIZE_TOKENS) == set(ASPECT_RATIOS)
        assert len(SIZE_TOKENS) == 5


@pytest.mark.unit
class TestDimensions:
    def test_known_token(self):
        assert dimensions_for("landscape_16_9", _SIZES) == (1024, 576)

    def test_unknown_token_uses_square(self):
        assert dimensions_for("panorama", _SIZES) == (1024, 1024)
        assert dimensions_for(None, _SIZES) == (1024, 1024)


@pytest.mark.unit
class TestClamping:
    @pytest.mark.parametrize("value, expected", [(None, 1), (0, 1), (-3, 1), (2, 2), (4, 4), (9, 4)])
    def test_num_images(self, value, expected):
        assert clamp_num_images(value) == expected

    @pytest.mark.parametrize("value, expected", [(None, 25), (0, 1), (30, 30), (500, 50)])
    def test_steps(self, value, expected):
        assert clamp_steps(value, 25) == expected

    @pytest.mark.parametrize(
        "value, expected", [(None, 7.5), (0.2, 1.0), (3.5, 3.5), (99.0, 20.0)]
    )
    def test_guidance(self, value, expected):
        assert clamp_guidance(value, 7.5) == expected

    def test_range(self):
        assert clamp_range("fps", 120, 6, 1, 30) == 30
        assert clamp_range("fps", None, 6, 1, 30) == 6

    def test_clamping_logs_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="genmedia.core.sizes"):
            clamp_num_images(12)
        assert "Clamped num_images from 12 to 4" in caplog.text

    def test_in_range_does_not_log(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="genmedia.core.sizes"):
            clamp_steps(10, 25)
        assert "Clamped" not in caplog.text

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_uses_default(self, value):
        assert clamp_guidance(value, 7.5) == 7.5
        assert clamp_steps(value, 25) == 25
        assert clamp_num_images(value) == 1
        assert clamp_range("fps", value, 6, 1, 30) == 6
