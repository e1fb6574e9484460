"""Tests for LatticeVectors, AtomSite, and CrystalStructure."""

import numpy as np
import pytest

from bragg.model import AtomSite, CrystalStructure, LatticeVectors


class TestLatticeVectors:
    def test_from_matrix_rows_are_vectors(self):
        lattice = LatticeVectors.from_matrix([[1, 0, 0], [0, 2, 0], [0, 0, 3]])
        assert lattice.a == (1.0, 0.0, 0.0)
        assert lattice.b == (0.0, 2.0, 0.0)
        assert lattice.c == (0.0, 0.0, 3.0)

    def test_matrix(self):
        lattice = LatticeVectors.cubic(2.0)
        np.testing.assert_allclose(lattice.matrix, 2.0 * np.eye(3))

    def test_determinant_and_volume(self):
        lattice = LatticeVectors.from_matrix([[1, 0, 0], [0, 2, 0], [0, 0, 3]])
        assert lattice.determinant == pytest.approx(6.0)
        assert lattice.volume == pytest.approx(6.0)

    def test_left_handed_has_negative_determinant(self):
        lattice = LatticeVectors.from_matrix([[0, 1, 0], [1, 0, 0], [0, 0, 1]])
        assert lattice.determinant == pytest.approx(-1.0)
        assert lattice.volume == pytest.approx(1.0)

    def test_wrong_shape_raises(self):
        with pytest.raises(ValueError, match="shape"):
            LatticeVectors.from_matrix([[1, 0], [0, 1]])

    def test_non_finite_raises(self):
        with pytest.raises(ValueError, match="finite"):
            LatticeVectors((np.nan, 0, 0), (0, 1, 0), (0, 0, 1))

    def test_degenerate_lattice_constructs(self):
        """Degeneracy is a geometry-time error, not a construction error."""
        lattice = LatticeVectors.from_matrix(np.zeros((3, 3)))
        assert lattice.determinant == 0.0

    def test_equal_by_value(self):
        assert LatticeVectors.cubic(3.0) == LatticeVectors.from_matrix(3.0 * np.eye(3))

    def test_round_trip(self):
        lattice = LatticeVectors.from_matrix([[3, 0, 0], [1, 3, 0], [0, 0, 4]])
        assert LatticeVectors.from_dict(lattice.to_dict()) == lattice


class TestAtomSite:
    def test_frac_stored_as_float_tuple(self):
        site = AtomSite("O", np.array([0, 0.5, 1]))
        assert site.frac == (0.0, 0.5, 1.0)
        assert all(isinstance(x, float) for x in site.frac)

    def test_empty_species_raises(self):
        with pytest.raises(ValueError, match="species"):
            AtomSite("", (0, 0, 0))

    def test_frac_wrong_length_raises(self):
        with pytest.raises(ValueError, match="frac"):
            AtomSite("O", (0, 0))

    def test_frac_outside_cell_allowed(self):
        assert AtomSite("O", (1.2, -0.1, 0)).frac == (1.2, -0.1, 0.0)

    def test_non_positive_radius_raises(self):
        with pytest.raises(ValueError, match="radius"):
            AtomSite("O", (0, 0, 0), radius=0.0)

    def test_colour_normalised(self):
        assert AtomSite("O", (0, 0, 0), colour="red").colour == (1.0, 0.0, 0.0)

    def test_round_trip(self):
        site = AtomSite("Fe", (0.1, 0.2, 0.3), radius=0.9, colour=(0.5, 0.1, 0.0))
        assert AtomSite.from_dict(site.to_dict()) == site

    def test_to_dict_omits_unset_overrides(self):
        assert AtomSite("O", (0, 0, 0)).to_dict() == {
            "species": "O", "frac": [0.0, 0.0, 0.0],
        }


class TestCrystalStructure:
    def test_lattice_matrix_coerced(self):
        structure = CrystalStructure(np.eye(3), [AtomSite("O", (0, 0, 0))])
        assert structure.lattice == LatticeVectors.cubic(1.0)
        assert isinstance(structure.sites, tuple)

    def test_non_site_raises(self):
        with pytest.raises(TypeError, match="AtomSite"):
            CrystalStructure(LatticeVectors.cubic(), [("O", (0, 0, 0))])

    def test_len_and_species(self):
        structure = CrystalStructure.from_arrays(
            np.eye(3), ["Na", "Cl"], [[0, 0, 0], [0.5, 0.5, 0.5]],
        )
        assert len(structure) == 2
        assert structure.species == ["Na", "Cl"]

    def test_frac_coords(self):
        structure = CrystalStructure.from_arrays(
            np.eye(3), ["Na", "Cl"], [[0, 0, 0], [0.5, 0.5, 0.5]],
        )
        np.testing.assert_allclose(
            structure.frac_coords, [[0, 0, 0], [0.5, 0.5, 0.5]],
        )

    def test_empty_frac_coords_shape(self):
        assert CrystalStructure(LatticeVectors.cubic()).frac_coords.shape == (0, 3)

    def test_from_arrays_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="species has 1 entries"):
            CrystalStructure.from_arrays(np.eye(3), ["O"], [[0, 0, 0], [0.5, 0, 0]])

    def test_with_sites_returns_new_value(self):
        structure = CrystalStructure(LatticeVectors.cubic(), [AtomSite("O", (0, 0, 0))])
        edited = structure.with_sites([AtomSite("S", (0, 0, 0))])
        assert structure.species == ["O"]
        assert edited.species == ["S"]
        assert edited.lattice == structure.lattice

    def test_with_lattice(self):
        structure = CrystalStructure(LatticeVectors.cubic(), [AtomSite("O", (0, 0, 0))])
        edited = structure.with_lattice(LatticeVectors.cubic(2.0))
        assert edited.sites == structure.sites
        assert edited.lattice.a == (2.0, 0.0, 0.0)

    def test_equal_by_value(self):
        a = CrystalStructure.from_arrays(np.eye(3), ["O"], [[0, 0, 0]])
        b = CrystalStructure.from_arrays(np.eye(3), ["O"], [[0, 0, 0]])
        assert a == b

    def test_round_trip(self):
        structure = CrystalStructure.from_arrays(
            [[3, 0, 0], [0, 3, 0], [0, 0, 3]],
            ["Na", "Cl"],
            [[0, 0, 0], [0.5, 0.5, 0.5]],
            title="NaCl",
        )
        assert CrystalStructure.from_dict(structure.to_dict()) == structure
