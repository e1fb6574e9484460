"""Lattice geometry: fractional to Cartesian conversion and periodic images."""

from __future__ import annotations

import itertools
from collections.abc import Mapping

import numpy as np

from bragg._constants import DEFAULT_CELL_COLOUR, LATTICE_DET_TOLERANCE
from bragg.defaults import default_atom_style
from bragg.exceptions import InvalidLattice
from bragg.model import (
    AtomId,
    AtomSite,
    AtomStyle,
    CartesianCutoff,
    CellRadius,
    CrystalStructure,
    EdgeId,
    LatticeVectors,
    RenderAtom,
    ReplicationRadius,
    UnitCellEdge,
    normalise_colour,
)
from bragg.model.colour import RGB, Colour
from bragg.model.view_parameters import validate_replication

# The 12 edges of a unit cube, as pairs of vertex indices.
# Vertices are the 8 corners at fractional coordinates {0,1}^3.
_CUBE_EDGES: list[tuple[int, int]] = [
    (v, v ^ (1 << bit))
    for v in range(8)
    for bit in range(3)
    if v ^ (1 << bit) > v
]

# Fractional coordinates of the 8 cube corners (row-order matches
# the bit-pattern vertex indexing: 0->(0,0,0), 1->(1,0,0), ..., 7->(1,1,1)).
_FRAC_CORNERS = np.array([
    [(v >> 0) & 1, (v >> 1) & 1, (v >> 2) & 1]
    for v in range(8)
], dtype=float)

_CELL_CENTRE_FRAC = np.array([0.5, 0.5, 0.5])


def validate_lattice(lattice: LatticeVectors) -> None:
    """Reject degenerate or left-handed lattice vectors.

    The determinant is compared relative to the product of the vector
    lengths, so the check does not depend on the length unit.

    Raises:
        InvalidLattice: If any vector has zero length, the vectors are
            (nearly) coplanar, or they form a left-handed set.
    """
    m = lattice.matrix
    lengths = np.linalg.norm(m, axis=1)
    if np.any(lengths == 0.0):
        raise InvalidLattice(f"lattice has a zero-length vector: {m.tolist()}")
    det = float(np.linalg.det(m))
    scaled = det / float(np.prod(lengths))
    if abs(scaled) < LATTICE_DET_TOLERANCE:
        raise InvalidLattice(
            f"lattice vectors are linearly dependent (det={det:.3g})"
        )
    if scaled < 0:
        raise InvalidLattice(
            f"lattice vectors are left-handed (det={det:.3g})"
        )


def fractional_to_cartesian(
    frac: np.ndarray,
    lattice: LatticeVectors,
) -> np.ndarray:
    """Convert fractional coordinates to Cartesian.

    Args:
        frac: Array of shape ``(3,)`` or ``(n, 3)``.
        lattice: The unit cell.

    Returns:
        Cartesian coordinates with the same shape as *frac*.
    """
    return np.asarray(frac, dtype=float) @ lattice.matrix


def cartesian_to_fractional(
    cart: np.ndarray,
    lattice: LatticeVectors,
) -> np.ndarray:
    """Convert Cartesian coordinates to fractional.

    Raises:
        InvalidLattice: If the lattice cannot be inverted.
    """
    validate_lattice(lattice)
    return np.asarray(cart, dtype=float) @ np.linalg.inv(lattice.matrix)


def lattice_plane_spacings(lattice: LatticeVectors) -> np.ndarray:
    """Perpendicular distances between opposite faces of the cell.

    Element *i* is the spacing of the planes spanned by the two lattice
    vectors other than vector *i*.
    """
    a, b, c = lattice.matrix
    volume = lattice.volume
    return np.array([
        volume / np.linalg.norm(np.cross(b, c)),
        volume / np.linalg.norm(np.cross(a, c)),
        volume / np.linalg.norm(np.cross(a, b)),
    ])


def _cell_offsets(n: int) -> np.ndarray:
    """All integer offsets in ``[-n, n]^3`` in lexicographic order."""
    rng = range(-n, n + 1)
    return np.array(list(itertools.product(rng, rng, rng)), dtype=int)


def _cutoff_offsets(
    frac: np.ndarray,
    lattice: LatticeVectors,
    distance: float,
) -> list[np.ndarray]:
    """Per-site image offsets whose position is within *distance* of the cell centre.

    The search box along axis *i* is bounded by ``distance / h_i``
    fractional units either side of the centre, where ``h_i`` is the
    plane spacing; every image inside the sphere lies inside that box.
    The zero offset is always included.
    """
    reach = distance / lattice_plane_spacings(lattice)
    centre = fractional_to_cartesian(_CELL_CENTRE_FRAC, lattice)
    m = lattice.matrix
    result = []
    for f in frac:
        lo = np.ceil(0.5 - f - reach).astype(int)
        hi = np.floor(0.5 - f + reach).astype(int)
        ranges = [range(min(lo[d], 0), max(hi[d], 0) + 1) for d in range(3)]
        offsets = np.array(list(itertools.product(*ranges)), dtype=int)
        positions = (f + offsets) @ m
        dist = np.linalg.norm(positions - centre, axis=1)
        keep = (dist <= distance) | ~offsets.any(axis=1)
        result.append(offsets[keep])
    return result


def _resolve_appearance(
    site: AtomSite,
    atom_styles: Mapping[str, AtomStyle],
    cache: dict[str, tuple[float, RGB]],
) -> tuple[float, RGB]:
    """Site override, then species style, then element default."""
    if site.species not in cache:
        style = atom_styles.get(site.species) or default_atom_style(site.species)
        cache[site.species] = (float(style.radius), normalise_colour(style.colour))
    radius, colour = cache[site.species]
    if site.radius is not None:
        radius = float(site.radius)
    if site.colour is not None:
        colour = site.colour  # type: ignore[assignment]
    return radius, colour


def compute_positions(
    structure: CrystalStructure,
    radius: ReplicationRadius,
    *,
    atom_styles: Mapping[str, AtomStyle] | None = None,
) -> list[RenderAtom]:
    """Expand a structure into positioned render atoms.

    For each site, in order, every periodic image selected by *radius*
    is placed at ``(frac + offset) @ lattice``.  Images of one site are
    emitted in lexicographic offset order.  The identity of each atom is
    ``(site index, i, j, k)``, which is stable across calls with the
    same structure and replication policy.

    Args:
        structure: The crystal structure.
        radius: ``CellRadius(n)`` for offsets in ``[-n, n]^3``, or
            ``CartesianCutoff(r)`` for images within *r* of the base
            cell centre.  ``CellRadius(0)`` yields one atom per site.
        atom_styles: Optional per-species display overrides.

    Returns:
        List of RenderAtom objects.

    Raises:
        InvalidLattice: If the lattice is degenerate or left-handed.
        InvalidViewParameters: If *radius* is negative, non-integer
            (for a cell radius), or of an unknown type.
    """
    validate_lattice(structure.lattice)
    validate_replication(radius)
    styles = atom_styles if atom_styles is not None else {}

    if not structure.sites:
        return []

    frac = structure.frac_coords
    if isinstance(radius, CellRadius):
        shared = _cell_offsets(radius.cells)
        per_site = [shared] * len(frac)
    else:
        assert isinstance(radius, CartesianCutoff)
        per_site = _cutoff_offsets(frac, structure.lattice, float(radius.distance))

    m = structure.lattice.matrix
    appearance_cache: dict[str, tuple[float, RGB]] = {}
    atoms: list[RenderAtom] = []
    for index, (site, f, offsets) in enumerate(zip(structure.sites, frac, per_site)):
        display_radius, colour = _resolve_appearance(site, styles, appearance_cache)
        positions = (f + offsets) @ m
        for (i, j, k), pos in zip(offsets.tolist(), positions.tolist()):
            atoms.append(RenderAtom(
                identity=AtomId(index, i, j, k),
                position=(pos[0], pos[1], pos[2]),
                species=site.species,
                radius=display_radius,
                colour=colour,
            ))
    return atoms


def unit_cell_edges(
    lattice: LatticeVectors,
    colour: Colour = DEFAULT_CELL_COLOUR,
) -> list[UnitCellEdge]:
    """The 12 edges of the base unit cell as render entities.

    Raises:
        InvalidLattice: If the lattice is degenerate or left-handed.
    """
    validate_lattice(lattice)
    rgb = normalise_colour(colour)
    corners = fractional_to_cartesian(_FRAC_CORNERS, lattice).tolist()
    return [
        UnitCellEdge(
            identity=EdgeId(s, e),
            start=tuple(corners[s]),
            end=tuple(corners[e]),
            colour=rgb,
        )
        for s, e in _CUBE_EDGES
    ]


def structure_centroid(structure: CrystalStructure) -> np.ndarray:
    """Mean Cartesian position of the base-cell sites.

    Falls back to the cell centre for a structure with no sites.
    """
    if not structure.sites:
        return fractional_to_cartesian(_CELL_CENTRE_FRAC, structure.lattice)
    return fractional_to_cartesian(structure.frac_coords, structure.lattice).mean(axis=0)


def scene_extent(atoms: list[RenderAtom], centre: np.ndarray) -> float:
    """Radius of the sphere about *centre* enclosing every atom's ball.

    Returns ``0.0`` for an empty atom list.
    """
    if not atoms:
        return 0.0
    coords = np.array([a.position for a in atoms])
    radii = np.array([a.radius for a in atoms])
    dists = np.linalg.norm(coords - np.asarray(centre, dtype=float), axis=1)
    return float(np.max(dists + radii))
