"""Tests for colour normalisation."""

import pytest

from bragg.model.colour import normalise_colour


class TestNormaliseColour:
    def test_css_name(self):
        assert normalise_colour("red") == (1.0, 0.0, 0.0)

    def test_hex_string(self):
        assert normalise_colour("#00FF00") == pytest.approx((0.0, 1.0, 0.0))

    def test_grey_float_zero(self):
        assert normalise_colour(0.0) == (0.0, 0.0, 0.0)

    def test_grey_float(self):
        assert normalise_colour(0.7) == pytest.approx((0.7, 0.7, 0.7))

    def test_grey_int(self):
        assert normalise_colour(1) == (1.0, 1.0, 1.0)

    def test_rgb_tuple(self):
        assert normalise_colour((0.5, 0.3, 0.1)) == pytest.approx(
            (0.5, 0.3, 0.1)
        )

    def test_rgb_list_becomes_tuple(self):
        result = normalise_colour([0.5, 0.3, 0.1])
        assert isinstance(result, tuple)
        assert result == pytest.approx((0.5, 0.3, 0.1))

    def test_invalid_name_raises(self):
        with pytest.raises(ValueError, match="Unrecognised colour"):
            normalise_colour("notacolour")

    def test_grey_out_of_range_raises(self):
        with pytest.raises(ValueError, match="Grey value"):
            normalise_colour(1.5)

    def test_rgb_wrong_length_raises(self):
        with pytest.raises(ValueError, match="3 elements"):
            normalise_colour((0.5, 0.3))  # type: ignore[arg-type]

    def test_rgb_out_of_range_raises(self):
        with pytest.raises(ValueError, match="RGB component"):
            normalise_colour((0.5, 1.5, 0.0))

    def test_bool_rejected(self):
        with pytest.raises(ValueError, match="Cannot interpret"):
            normalise_colour(True)  # type: ignore[arg-type]

    def test_none_rejected(self):
        with pytest.raises(ValueError, match="Cannot interpret"):
            normalise_colour(None)  # type: ignore[arg-type]
