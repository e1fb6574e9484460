"""Tests for the element tables and their lookups."""

import pytest

from bragg.defaults import (
    COVALENT_RADII,
    ELEMENT_COLOURS,
    ELEMENT_SIZES,
    FALLBACK_COLOUR,
    FALLBACK_SIZE,
    covalent_cutoff,
    covalent_radius,
    default_atom_style,
    element_colour,
    element_size,
    element_symbol,
)
from bragg.model import AtomStyle


class TestElementSymbol:
    @pytest.mark.parametrize("label, symbol", [
        ("O", "O"),
        ("o", "O"),
        ("fe", "Fe"),
        ("Fe2+", "Fe"),
        ("O2-", "O"),
        ("O1", "O"),
        ("Ox", "O"),
        (" Na ", "Na"),
    ])
    def test_reduces_label(self, label, symbol):
        assert element_symbol(label) == symbol

    def test_no_leading_letter_unchanged(self):
        assert element_symbol("1A") == "1A"


class TestLookups:
    def test_known_colour(self):
        assert element_colour("O") == (1.0, 0.0, 0.0)

    def test_lowercase_matches(self):
        assert element_colour("cl") == ELEMENT_COLOURS["Cl"]

    def test_unknown_colour_grey(self):
        assert element_colour("Qq") == FALLBACK_COLOUR

    def test_known_size(self):
        assert element_size("H") == 0.30

    def test_unknown_size(self):
        assert element_size("Na") == FALLBACK_SIZE

    def test_covalent_radius(self):
        assert covalent_radius("C") == 0.76
        assert covalent_radius("Qq") is None

    def test_covalent_cutoff(self):
        assert covalent_cutoff("C", "H", 1.2) == pytest.approx((0.76 + 0.31) * 1.2)

    def test_covalent_cutoff_unknown(self):
        assert covalent_cutoff("C", "Qq", 1.2) is None


class TestTables:
    def test_colours_valid(self):
        for sp, rgb in ELEMENT_COLOURS.items():
            assert len(rgb) == 3, sp
            assert all(0.0 <= c <= 1.0 for c in rgb), sp

    def test_sizes_positive(self):
        assert all(r > 0 for r in ELEMENT_SIZES.values())

    def test_radii_cover_coloured_elements(self):
        assert set(ELEMENT_COLOURS) <= set(COVALENT_RADII)


class TestDefaultAtomStyle:
    def test_returns_style(self):
        style = default_atom_style("O")
        assert isinstance(style, AtomStyle)
        assert style.radius == 0.32
        assert style.colour == (1.0, 0.0, 0.0)

    def test_unknown_species(self):
        style = default_atom_style("Dummy")
        assert style.radius == FALLBACK_SIZE
        assert style.colour == FALLBACK_COLOUR
