"""Tests for lattice validation and periodic image expansion."""

import numpy as np
import pytest

from bragg.exceptions import InvalidLattice, InvalidViewParameters
from bragg.geometry import (
    cartesian_to_fractional,
    compute_positions,
    fractional_to_cartesian,
    lattice_plane_spacings,
    scene_extent,
    structure_centroid,
    unit_cell_edges,
    validate_lattice,
)
from bragg.model import (
    AtomId,
    AtomSite,
    AtomStyle,
    CartesianCutoff,
    CellRadius,
    CrystalStructure,
    EdgeId,
    LatticeVectors,
)

TRICLINIC = [[3.0, 0.0, 0.0], [0.8, 2.9, 0.0], [0.4, 0.6, 3.3]]


class TestValidateLattice:
    def test_cubic_ok(self):
        validate_lattice(LatticeVectors.cubic(4.0))

    def test_coplanar_raises(self, degenerate):
        with pytest.raises(InvalidLattice, match="linearly dependent"):
            validate_lattice(degenerate.lattice)

    def test_zero_vector_raises(self):
        lattice = LatticeVectors.from_matrix([[1, 0, 0], [0, 0, 0], [0, 0, 1]])
        with pytest.raises(InvalidLattice, match="zero-length"):
            validate_lattice(lattice)

    def test_left_handed_raises(self):
        lattice = LatticeVectors.from_matrix([[0, 1, 0], [1, 0, 0], [0, 0, 1]])
        with pytest.raises(InvalidLattice, match="left-handed"):
            validate_lattice(lattice)

    def test_scale_independent(self):
        """A tiny but well-shaped cell is not degenerate."""
        validate_lattice(LatticeVectors.cubic(1e-4))

    def test_is_value_error(self, degenerate):
        with pytest.raises(ValueError):
            validate_lattice(degenerate.lattice)


class TestCoordinateConversion:
    def test_fractional_to_cartesian(self):
        lattice = LatticeVectors.from_matrix(TRICLINIC)
        cart = fractional_to_cartesian(np.array([0.5, 0.5, 0.5]), lattice)
        np.testing.assert_allclose(cart, 0.5 * np.sum(TRICLINIC, axis=0))

    def test_cartesian_to_fractional_inverts(self):
        lattice = LatticeVectors.from_matrix(TRICLINIC)
        frac = np.array([[0.1, 0.2, 0.3], [0.9, 0.5, 0.0]])
        cart = fractional_to_cartesian(frac, lattice)
        np.testing.assert_allclose(cartesian_to_fractional(cart, lattice), frac, atol=1e-12)

    def test_cartesian_to_fractional_degenerate_raises(self, degenerate):
        with pytest.raises(InvalidLattice):
            cartesian_to_fractional(np.zeros(3), degenerate.lattice)

    def test_plane_spacings_orthorhombic(self):
        lattice = LatticeVectors.from_matrix(np.diag([2.0, 3.0, 4.0]))
        np.testing.assert_allclose(lattice_plane_spacings(lattice), [2.0, 3.0, 4.0])


class TestCellRadius:
    def test_radius_zero_one_atom_per_site(self):
        structure = CrystalStructure.from_arrays(
            TRICLINIC, ["Si", "O"], [[0.1, 0.2, 0.3], [0.5, 0.5, 0.5]],
        )
        atoms = compute_positions(structure, CellRadius(0))
        assert [a.identity for a in atoms] == [AtomId(0), AtomId(1)]
        expected = structure.frac_coords @ np.array(TRICLINIC)
        np.testing.assert_allclose([a.position for a in atoms], expected)

    def test_radius_one_cubic_gives_27_integer_offsets(self, cubic_single):
        atoms = compute_positions(cubic_single, CellRadius(1))
        assert len(atoms) == 27
        positions = np.array([a.position for a in atoms])
        offsets = np.array([a.identity.offset for a in atoms])
        np.testing.assert_allclose(positions, offsets)
        assert {tuple(o) for o in offsets.tolist()} == {
            (i, j, k) for i in (-1, 0, 1) for j in (-1, 0, 1) for k in (-1, 0, 1)
        }

    def test_radius_two_count(self, cubic_single):
        assert len(compute_positions(cubic_single, CellRadius(2))) == 125

    def test_site_major_lexicographic_order(self):
        structure = CrystalStructure.from_arrays(
            np.eye(3), ["A", "B"], [[0, 0, 0], [0.5, 0.5, 0.5]],
        )
        ids = [a.identity for a in compute_positions(structure, CellRadius(1))]
        assert ids == sorted(ids)
        assert ids[0] == AtomId(0, -1, -1, -1)
        assert ids[26] == AtomId(0, 1, 1, 1)
        assert ids[27] == AtomId(1, -1, -1, -1)

    def test_identities_stable_across_calls(self, rocksalt):
        first = compute_positions(rocksalt, CellRadius(1))
        second = compute_positions(rocksalt, CellRadius(1))
        assert first == second

    def test_empty_structure(self):
        assert compute_positions(CrystalStructure(LatticeVectors.cubic()), CellRadius(2)) == []

    def test_degenerate_raises(self, degenerate):
        with pytest.raises(InvalidLattice):
            compute_positions(degenerate, CellRadius(0))

    def test_negative_radius_raises(self, cubic_single):
        with pytest.raises(InvalidViewParameters):
            compute_positions(cubic_single, CellRadius(-1))


class TestCartesianCutoff:
    def test_zero_cutoff_keeps_base_images(self, rocksalt):
        atoms = compute_positions(rocksalt, CartesianCutoff(0.0))
        assert [a.identity for a in atoms] == [AtomId(i) for i in range(8)]

    def test_corner_atom_fills_cube_corners(self, cubic_single):
        # Every corner lies sqrt(3)/2 from the cell centre.
        atoms = compute_positions(cubic_single, CartesianCutoff(0.9))
        offsets = sorted(a.identity.offset for a in atoms)
        assert offsets == [
            (i, j, k) for i in (0, 1) for j in (0, 1) for k in (0, 1)
        ]

    def test_centred_atom_face_neighbours(self):
        structure = CrystalStructure.from_arrays(np.eye(3), ["A"], [[0.5, 0.5, 0.5]])
        assert len(compute_positions(structure, CartesianCutoff(0.99))) == 1
        atoms = compute_positions(structure, CartesianCutoff(1.0))
        assert len(atoms) == 7

    def test_all_images_within_cutoff(self):
        structure = CrystalStructure.from_arrays(
            TRICLINIC, ["Si", "O"], [[0.1, 0.2, 0.3], [0.7, 0.4, 0.9]],
        )
        cutoff = 6.0
        atoms = compute_positions(structure, CartesianCutoff(cutoff))
        centre = 0.5 * np.sum(TRICLINIC, axis=0)
        for atom in atoms:
            if atom.identity.offset != (0, 0, 0):
                assert np.linalg.norm(np.subtract(atom.position, centre)) <= cutoff + 1e-9

    def test_matches_brute_enumeration(self):
        lattice = np.array(TRICLINIC)
        structure = CrystalStructure.from_arrays(lattice, ["Si"], [[0.1, 0.2, 0.3]])
        cutoff = 5.0
        centre = 0.5 * lattice.sum(axis=0)
        expected = set()
        for i in range(-5, 6):
            for j in range(-5, 6):
                for k in range(-5, 6):
                    pos = (np.array([0.1, 0.2, 0.3]) + [i, j, k]) @ lattice
                    if np.linalg.norm(pos - centre) <= cutoff or (i, j, k) == (0, 0, 0):
                        expected.add((i, j, k))
        atoms = compute_positions(structure, CartesianCutoff(cutoff))
        assert {a.identity.offset for a in atoms} == expected


class TestAppearance:
    def test_element_defaults(self):
        structure = CrystalStructure.from_arrays(np.eye(3), ["O"], [[0, 0, 0]])
        atom = compute_positions(structure, CellRadius(0))[0]
        assert atom.colour == (1.0, 0.0, 0.0)
        assert atom.radius == pytest.approx(0.32)

    def test_unknown_species_grey(self, cubic_single):
        atom = compute_positions(cubic_single, CellRadius(0))[0]
        assert atom.colour == (0.5, 0.5, 0.5)
        assert atom.radius == pytest.approx(0.35)

    def test_species_style_override(self):
        structure = CrystalStructure.from_arrays(np.eye(3), ["O"], [[0, 0, 0]])
        atom = compute_positions(
            structure, CellRadius(0),
            atom_styles={"O": AtomStyle(0.9, "blue")},
        )[0]
        assert atom.radius == 0.9
        assert atom.colour == (0.0, 0.0, 1.0)

    def test_site_override_wins(self):
        structure = CrystalStructure(
            LatticeVectors.cubic(),
            [AtomSite("O", (0, 0, 0), radius=0.2, colour=(0.0, 1.0, 0.0))],
        )
        atom = compute_positions(
            structure, CellRadius(0),
            atom_styles={"O": AtomStyle(0.9, "blue")},
        )[0]
        assert atom.radius == 0.2
        assert atom.colour == (0.0, 1.0, 0.0)


class TestUnitCellEdges:
    def test_twelve_edges_of_cell_length(self):
        edges = unit_cell_edges(LatticeVectors.cubic(2.0))
        assert len(edges) == 12
        assert len({e.identity for e in edges}) == 12
        lengths = [np.linalg.norm(np.subtract(e.end, e.start)) for e in edges]
        np.testing.assert_allclose(lengths, 2.0)

    def test_edge_ids_follow_corner_bits(self):
        edges = unit_cell_edges(LatticeVectors.cubic(1.0))
        by_id = {e.identity: e for e in edges}
        edge = by_id[EdgeId(0, 4)]
        assert edge.start == (0.0, 0.0, 0.0)
        assert edge.end == (0.0, 0.0, 1.0)

    def test_colour_normalised(self):
        edges = unit_cell_edges(LatticeVectors.cubic(), colour="black")
        assert edges[0].colour == (0.0, 0.0, 0.0)

    def test_degenerate_raises(self, degenerate):
        with pytest.raises(InvalidLattice):
            unit_cell_edges(degenerate.lattice)


class TestFraming:
    def test_centroid(self, dimer):
        np.testing.assert_allclose(structure_centroid(dimer), [0.5, 0.0, 0.0])

    def test_centroid_empty_is_cell_centre(self):
        structure = CrystalStructure(LatticeVectors.cubic(4.0))
        np.testing.assert_allclose(structure_centroid(structure), [2.0, 2.0, 2.0])

    def test_extent_includes_radius(self, dimer):
        atoms = compute_positions(dimer, CellRadius(0))
        assert scene_extent(atoms, np.array([0.5, 0.0, 0.0])) == pytest.approx(0.5 + 0.32)

    def test_extent_empty(self):
        assert scene_extent([], np.zeros(3)) == 0.0
