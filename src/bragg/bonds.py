"""Bond inference from interatomic distances.

Bonds are found between every unordered pair of render atoms whose
separation falls inside the cutoff window for their species pair.
Cutoffs come from a :class:`BondCutoffTable`, built from
:class:`~bragg.model.ViewParameters` or directly from a
:class:`~bragg.model.BondMode`.

Up to :data:`~bragg._constants.BRUTE_FORCE_MAX_ATOMS` atoms the search
is a vectorised all-pairs distance matrix.  Above that, atoms are
binned into a uniform grid whose cell edge equals the largest cutoff,
and only neighbouring cells are compared, keeping the work close to
linear in the number of atoms.  Both paths produce identical output.
"""

from __future__ import annotations

import itertools
import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from bragg._constants import (
    BRUTE_FORCE_MAX_ATOMS,
    COINCIDENT_DISTANCE,
    DEFAULT_BOND_COLOUR,
    DEFAULT_BOND_CUTOFF,
    DEFAULT_BOND_TOLERANCE,
)
from bragg.defaults import covalent_cutoff
from bragg.exceptions import InvalidViewParameters
from bragg.model import (
    BondId,
    BondMode,
    BondSpec,
    RenderAtom,
    RenderBond,
    ViewParameters,
)

logger = logging.getLogger(__name__)

# Neighbour cells visited from each grid cell.  Only the 13
# lexicographically positive offsets (plus the cell itself) are needed:
# the negative half is covered when the neighbour visits this cell.
_HALF_NEIGHBOURS: list[tuple[int, int, int]] = [
    off for off in itertools.product((-1, 0, 1), repeat=3)
    if off > (0, 0, 0)
]


@dataclass(frozen=True)
class BondCutoffTable:
    """Resolved cutoff policy for bond inference.

    Attributes:
        mode: The bond inference mode.
        tolerance: Multiplier on the covalent-radius sum.
        default_cutoff: Cutoff in fixed mode, and the fallback for
            species pairs without a spec or tabulated radii.
        specs: Explicit per-pair rules, first match wins.
        site_images: Whether periodic images of one site may bond to
            each other.  Off by default, so a site never bonds to its
            own images.
    """

    mode: BondMode = BondMode.COVALENT
    tolerance: float = DEFAULT_BOND_TOLERANCE
    default_cutoff: float = DEFAULT_BOND_CUTOFF
    specs: tuple[BondSpec, ...] = ()
    site_images: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "mode", BondMode(self.mode))
        except ValueError:
            raise InvalidViewParameters(
                f"unknown bond mode {self.mode!r}"
            ) from None
        object.__setattr__(self, "specs", tuple(self.specs))

    @classmethod
    def from_view_parameters(cls, params: ViewParameters) -> BondCutoffTable:
        return cls(
            mode=params.bond_mode,
            tolerance=params.bond_tolerance,
            default_cutoff=params.bond_cutoff,
            specs=tuple(params.bond_specs),
            site_images=params.bond_site_images,
        )

    def window(self, species_a: str, species_b: str) -> tuple[float, float]:
        """``(min_length, max_length)`` for a species pair.

        Never fails: an unknown pair gets ``(0, default_cutoff)``.
        A ``(0, 0)`` window means the pair never bonds.
        """
        if self.mode is BondMode.NONE:
            return (0.0, 0.0)
        if self.mode is BondMode.FIXED:
            return (0.0, self.default_cutoff)
        for spec in self.specs:
            if spec.matches(species_a, species_b):
                return (spec.min_length, spec.max_length)
        cutoff = covalent_cutoff(species_a, species_b, self.tolerance)
        if cutoff is None:
            return (0.0, self.default_cutoff)
        return (0.0, cutoff)

    def window_matrices(
        self, species: Sequence[str],
    ) -> tuple[np.ndarray, np.ndarray]:
        """Per-unique-species ``(min, max)`` matrices.

        Index both with the codes from :func:`_species_codes`.
        """
        n = len(species)
        lo = np.zeros((n, n))
        hi = np.zeros((n, n))
        for p, q in itertools.combinations_with_replacement(range(n), 2):
            lo[p, q], hi[p, q] = self.window(species[p], species[q])
            lo[q, p], hi[q, p] = lo[p, q], hi[p, q]
        return lo, hi


def _species_codes(atoms: Sequence[RenderAtom]) -> tuple[list[str], np.ndarray]:
    """Sorted unique species and an integer code per atom."""
    unique = sorted({a.species for a in atoms})
    index = {sp: i for i, sp in enumerate(unique)}
    return unique, np.array([index[a.species] for a in atoms], dtype=int)


def _pair_hits(
    ii: np.ndarray,
    jj: np.ndarray,
    dist: np.ndarray,
    codes: np.ndarray,
    lo: np.ndarray,
    hi: np.ndarray,
    sites: np.ndarray | None,
) -> np.ndarray:
    """Boolean mask of candidate pairs inside their cutoff window.

    With *sites* given, pairs of images of the same site are dropped.
    """
    ci, cj = codes[ii], codes[jj]
    hits = (
        (dist >= COINCIDENT_DISTANCE)
        & (dist >= lo[ci, cj])
        & (dist <= hi[ci, cj])
    )
    if sites is not None:
        hits &= sites[ii] != sites[jj]
    return hits


def _pairs_brute_force(
    coords: np.ndarray,
    codes: np.ndarray,
    lo: np.ndarray,
    hi: np.ndarray,
    sites: np.ndarray | None,
) -> np.ndarray:
    """All-pairs search over the upper triangle.  Returns ``(m, 2)`` indices."""
    ii, jj = np.triu_indices(len(coords), k=1)
    dist = np.linalg.norm(coords[ii] - coords[jj], axis=1)
    hits = _pair_hits(ii, jj, dist, codes, lo, hi, sites)
    return np.column_stack([ii[hits], jj[hits]])


def _pairs_grid(
    coords: np.ndarray,
    codes: np.ndarray,
    lo: np.ndarray,
    hi: np.ndarray,
    sites: np.ndarray | None,
) -> np.ndarray:
    """Uniform-grid search.  Returns ``(m, 2)`` indices with ``i != j``.

    The cell edge equals the largest cutoff, so every bonded pair lies
    in the same or adjacent cells.
    """
    cell = float(hi.max())
    keys = np.floor((coords - coords.min(axis=0)) / cell).astype(int)
    bins: dict[tuple[int, int, int], list[int]] = defaultdict(list)
    for idx, key in enumerate(map(tuple, keys.tolist())):
        bins[key].append(idx)
    members = {key: np.array(idx, dtype=int) for key, idx in bins.items()}

    found: list[np.ndarray] = []
    for key, here in members.items():
        # Pairs within the cell itself.
        if len(here) > 1:
            a, b = np.triu_indices(len(here), k=1)
            ii, jj = here[a], here[b]
            dist = np.linalg.norm(coords[ii] - coords[jj], axis=1)
            hits = _pair_hits(ii, jj, dist, codes, lo, hi, sites)
            found.append(np.column_stack([ii[hits], jj[hits]]))
        # Pairs with each forward neighbour.
        for off in _HALF_NEIGHBOURS:
            there = members.get((key[0] + off[0], key[1] + off[1], key[2] + off[2]))
            if there is None:
                continue
            ii = np.repeat(here, len(there))
            jj = np.tile(there, len(here))
            dist = np.linalg.norm(coords[ii] - coords[jj], axis=1)
            hits = _pair_hits(ii, jj, dist, codes, lo, hi, sites)
            found.append(np.column_stack([ii[hits], jj[hits]]))

    if not found:
        return np.zeros((0, 2), dtype=int)
    return np.concatenate(found)


def compute_bonds(
    atoms: Sequence[RenderAtom],
    mode: BondCutoffTable | BondMode | str | ViewParameters = BondMode.COVALENT,
    *,
    brute_force_limit: int = BRUTE_FORCE_MAX_ATOMS,
) -> list[RenderBond]:
    """Infer bonds between render atoms from their separations.

    A pair bonds when ``min_length <= d <= max_length`` for its species
    window (see :meth:`BondCutoffTable.window`).  An atom never bonds
    to itself, coincident atoms (e.g. a duplicated site) never bond to
    each other, and periodic images of one site never bond to each
    other unless the table sets ``site_images``.

    The result is independent of the order of *atoms*: each bond runs
    from the smaller atom identity to the larger, and bonds are sorted
    by identity.

    Args:
        atoms: Render atoms, typically from
            :func:`~bragg.geometry.compute_positions`.
        mode: A full cutoff table, a bare mode (default thresholds),
            or view parameters to build the table from.
        brute_force_limit: Atom count above which the grid search is
            used.

    Returns:
        List of RenderBond objects sorted by identity.

    Raises:
        InvalidViewParameters: If *mode* names an unknown bond mode.
    """
    if isinstance(mode, BondCutoffTable):
        table = mode
    elif isinstance(mode, ViewParameters):
        table = BondCutoffTable.from_view_parameters(mode)
    else:
        table = BondCutoffTable(mode=mode)

    if len(atoms) < 2 or table.mode is BondMode.NONE:
        return []

    unique, codes = _species_codes(atoms)
    lo, hi = table.window_matrices(unique)
    if hi.max() <= 0.0:
        return []

    coords = np.array([a.position for a in atoms], dtype=float)
    sites = (
        None if table.site_images
        else np.array([a.identity.site for a in atoms], dtype=int)
    )
    if len(atoms) <= brute_force_limit:
        pairs = _pairs_brute_force(coords, codes, lo, hi, sites)
        method = "brute-force"
    else:
        pairs = _pairs_grid(coords, codes, lo, hi, sites)
        method = "grid"

    bonds = []
    for i, j in pairs.tolist():
        a, b = atoms[i], atoms[j]
        if b.identity < a.identity:
            a, b = b, a
        length = float(np.linalg.norm(np.subtract(b.position, a.position)))
        bonds.append(RenderBond(
            identity=BondId(a.identity, b.identity),
            start=a.position,
            end=b.position,
            length=length,
            colour=DEFAULT_BOND_COLOUR,
        ))
    bonds.sort(key=lambda bond: bond.identity)
    logger.debug(
        "found %d bonds among %d atoms (%s)", len(bonds), len(atoms), method,
    )
    return bonds
