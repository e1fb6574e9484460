from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

import numpy as np

from bragg.model.colour import Colour, normalise_colour

Vec3 = tuple[float, float, float]


def _as_vec3(value: Sequence[float], name: str) -> Vec3:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr.tolist()}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


@dataclass(frozen=True)
class LatticeVectors:
    """The three vectors spanning the periodic unit cell.

    Vectors are stored as plain float tuples so that lattices compare
    and hash by value.  Use :attr:`matrix` for a ``(3, 3)`` numpy array
    with the vectors as rows.

    Construction only checks shapes.  Degenerate and left-handed cells
    are rejected by :func:`bragg.geometry.validate_lattice` when the
    structure is turned into geometry, raising
    :class:`~bragg.exceptions.InvalidLattice`.

    Attributes:
        a: First lattice vector.
        b: Second lattice vector.
        c: Third lattice vector.
    """

    a: Vec3
    b: Vec3
    c: Vec3

    def __post_init__(self) -> None:
        for name in ("a", "b", "c"):
            object.__setattr__(self, name, _as_vec3(getattr(self, name), name))

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[float]] | np.ndarray) -> LatticeVectors:
        """Build from a ``(3, 3)`` array whose rows are the vectors."""
        m = np.asarray(matrix, dtype=float)
        if m.shape != (3, 3):
            raise ValueError(f"lattice must have shape (3, 3), got {m.shape}")
        return cls(m[0], m[1], m[2])

    @classmethod
    def cubic(cls, a: float = 1.0) -> LatticeVectors:
        """A cubic cell with edge length *a*."""
        return cls((a, 0.0, 0.0), (0.0, a, 0.0), (0.0, 0.0, a))

    @property
    def matrix(self) -> np.ndarray:
        """Lattice matrix of shape ``(3, 3)``, one vector per row."""
        return np.array([self.a, self.b, self.c], dtype=float)

    @property
    def determinant(self) -> float:
        """Signed triple product ``a . (b x c)``."""
        return float(np.linalg.det(self.matrix))

    @property
    def volume(self) -> float:
        return abs(self.determinant)

    def to_dict(self) -> list[list[float]]:
        return [list(self.a), list(self.b), list(self.c)]

    @classmethod
    def from_dict(cls, d: Sequence[Sequence[float]]) -> LatticeVectors:
        return cls.from_matrix(d)


@dataclass(frozen=True)
class AtomSite:
    """One atom of the crystal basis.

    Fractional coordinates are conventionally in ``[0, 1)`` but are
    neither wrapped nor range-checked: a site at ``(1.2, 0, 0)`` simply
    sits outside the canonical cell.

    Attributes:
        species: Species label, usually an element symbol.
        frac: Fractional coordinates along the lattice vectors.
        radius: Optional display radius override for this site.
        colour: Optional colour override for this site.
    """

    species: str
    frac: Vec3
    radius: float | None = None
    colour: Colour | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.species, str) or not self.species:
            raise ValueError(f"species must be a non-empty string, got {self.species!r}")
        object.__setattr__(self, "frac", _as_vec3(self.frac, "frac"))
        if self.radius is not None and self.radius <= 0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if self.colour is not None:
            object.__setattr__(self, "colour", normalise_colour(self.colour))

    def to_dict(self) -> dict:
        d: dict = {"species": self.species, "frac": list(self.frac)}
        if self.radius is not None:
            d["radius"] = self.radius
        if self.colour is not None:
            d["colour"] = list(self.colour)  # type: ignore[arg-type]
        return d

    @classmethod
    def from_dict(cls, d: dict) -> AtomSite:
        return cls(
            species=d["species"],
            frac=tuple(d["frac"]),
            radius=d.get("radius"),
            colour=d.get("colour"),
        )


@dataclass(frozen=True)
class CrystalStructure:
    """Lattice plus ordered atomic basis: the sole input to the pipeline.

    Structures are immutable.  An edit produces a new value (see
    :meth:`with_sites` and :meth:`with_lattice`), so two revisions can
    be compared by value and the engine can hand one to a worker thread
    without copying.

    Attributes:
        lattice: The unit cell vectors.
        sites: Atom sites in a fixed order.  The position of a site in
            this tuple is part of every render atom identity derived
            from it.
        title: Optional display title.
    """

    lattice: LatticeVectors
    sites: tuple[AtomSite, ...] = field(default_factory=tuple)
    title: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.lattice, LatticeVectors):
            object.__setattr__(
                self, "lattice", LatticeVectors.from_matrix(self.lattice)
            )
        sites = tuple(self.sites)
        for i, site in enumerate(sites):
            if not isinstance(site, AtomSite):
                raise TypeError(
                    f"sites[{i}] must be an AtomSite, got {type(site).__name__}"
                )
        object.__setattr__(self, "sites", sites)

    def __len__(self) -> int:
        return len(self.sites)

    @property
    def species(self) -> list[str]:
        return [site.species for site in self.sites]

    @property
    def frac_coords(self) -> np.ndarray:
        """Fractional coordinates, shape ``(n_sites, 3)``."""
        if not self.sites:
            return np.zeros((0, 3))
        return np.array([site.frac for site in self.sites], dtype=float)

    def with_sites(self, sites: Iterable[AtomSite]) -> CrystalStructure:
        """Return a copy with a new basis."""
        return replace(self, sites=tuple(sites))

    def with_lattice(self, lattice: LatticeVectors) -> CrystalStructure:
        """Return a copy with new lattice vectors and the same basis."""
        return replace(self, lattice=lattice)

    @classmethod
    def from_arrays(
        cls,
        lattice: Sequence[Sequence[float]] | np.ndarray,
        species: Sequence[str],
        frac_coords: Sequence[Sequence[float]] | np.ndarray,
        *,
        title: str = "",
    ) -> CrystalStructure:
        """Build a structure from a lattice matrix and parallel arrays.

        Raises:
            ValueError: If *species* and *frac_coords* differ in length.
        """
        frac = np.asarray(frac_coords, dtype=float).reshape(-1, 3)
        if len(species) != len(frac):
            raise ValueError(
                f"species has {len(species)} entries but frac_coords has "
                f"{len(frac)} rows"
            )
        return cls(
            lattice=LatticeVectors.from_matrix(lattice),
            sites=tuple(AtomSite(sp, tuple(f)) for sp, f in zip(species, frac)),
            title=title,
        )

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary."""
        d: dict = {
            "lattice": self.lattice.to_dict(),
            "sites": [site.to_dict() for site in self.sites],
        }
        if self.title:
            d["title"] = self.title
        return d

    @classmethod
    def from_dict(cls, d: dict) -> CrystalStructure:
        return cls(
            lattice=LatticeVectors.from_dict(d["lattice"]),
            sites=tuple(AtomSite.from_dict(s) for s in d.get("sites", [])),
            title=d.get("title", ""),
        )
