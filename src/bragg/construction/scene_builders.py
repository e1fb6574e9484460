"""Convenience constructors for CrystalStructure."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING

import numpy as np

from bragg.geometry import cartesian_to_fractional
from bragg.model import AtomSite, CrystalStructure, LatticeVectors

if TYPE_CHECKING:
    from pymatgen.core import Structure


def _decode(payload: str | bytes | Mapping) -> Mapping:
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(f"structure message is not valid JSON: {exc}") from None
    if not isinstance(payload, Mapping):
        raise ValueError(
            f"structure message must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def _fractional_sites(entries: list) -> list[AtomSite]:
    sites = []
    for i, entry in enumerate(entries):
        try:
            sites.append(AtomSite.from_dict(entry))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"invalid site {i}: {exc}") from None
    return sites


def _cartesian_sites(entries: list, lattice: LatticeVectors) -> list[AtomSite]:
    species = []
    cart = []
    for i, entry in enumerate(entries):
        try:
            species.append(str(entry["element"]))
            cart.append([float(entry[axis]) for axis in ("x", "y", "z")])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"invalid atom {i}: {exc!r}") from None
    if not cart:
        return []
    frac = cartesian_to_fractional(np.array(cart), lattice)
    return [AtomSite(sp, tuple(f)) for sp, f in zip(species, frac.tolist())]


def structure_from_message(payload: str | bytes | Mapping) -> CrystalStructure:
    """Decode a structure update message pushed by a server.

    Two forms are accepted.  The native form lists sites in fractional
    coordinates::

        {"lattice": [[a], [b], [c]],
         "sites": [{"species": "O", "frac": [0.0, 0.0, 0.0]}, ...],
         "title": "optional"}

    The atom-list form gives Cartesian positions, which are converted
    to fractional coordinates with the supplied lattice::

        {"lattice": [[a], [b], [c]],
         "atoms": [{"element": "O", "x": 0.0, "y": 0.0, "z": 0.0}, ...]}

    Args:
        payload: The message as JSON text or an already-decoded mapping.

    Returns:
        The decoded structure.

    Raises:
        ValueError: If the message is malformed.
        InvalidLattice: If the atom-list form carries a lattice that
            cannot be inverted.
    """
    data = _decode(payload)
    if "lattice" not in data:
        raise ValueError("structure message has no 'lattice'")
    if "sites" in data and "atoms" in data:
        raise ValueError("structure message must have 'sites' or 'atoms', not both")
    try:
        lattice = LatticeVectors.from_dict(data["lattice"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid lattice: {exc}") from None

    if "atoms" in data:
        sites = _cartesian_sites(list(data["atoms"]), lattice)
    else:
        sites = _fractional_sites(list(data.get("sites", [])))
    return CrystalStructure(
        lattice=lattice, sites=tuple(sites), title=str(data.get("title", "")),
    )


def from_pymatgen(
    structure: Structure,
    *,
    title: str = "",
    wrap: bool = True,
) -> CrystalStructure:
    """Create a CrystalStructure from a pymatgen Structure.

    Args:
        structure: A pymatgen ``Structure``.
        title: Display title.  Defaults to the reduced formula.
        wrap: Wrap fractional coordinates into ``[0, 1)``.

    Returns:
        A CrystalStructure with one site per pymatgen site.

    Raises:
        ImportError: If pymatgen is not installed.
        TypeError: If *structure* is not a pymatgen ``Structure``.
    """
    try:
        from pymatgen.core import Structure
    except ImportError:
        raise ImportError(
            "pymatgen is required for from_pymatgen(). "
            "Install it with: pip install pymatgen"
        )

    if not isinstance(structure, Structure):
        raise TypeError(
            f"expected a pymatgen Structure, got {type(structure).__name__}"
        )

    # Element symbols, not species strings like "Li+" or "O2-".
    species = [site.specie.symbol for site in structure]
    frac = structure.frac_coords % 1.0 if wrap else structure.frac_coords
    return CrystalStructure.from_arrays(
        structure.lattice.matrix,
        species,
        frac,
        title=title or structure.composition.reduced_formula,
    )
