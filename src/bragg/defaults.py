"""Default element colours, display radii, and covalent radii.

Colours follow the familiar CPK convention (white hydrogen, red oxygen,
blue nitrogen).  Display radii are scaled van der Waals sizes chosen so
that a ball-and-stick scene stays readable at typical bond lengths.
Covalent radii (Cordero et al., Dalton Trans. 2008) drive the default
bond cutoffs.

All three tables are plain dictionaries so callers can patch or extend
them; every lookup falls back to a neutral value for unknown species.
"""

from __future__ import annotations

import re

from bragg.model.atom_style import AtomStyle

FALLBACK_COLOUR: tuple[float, float, float] = (0.5, 0.5, 0.5)
FALLBACK_SIZE: float = 0.35

ELEMENT_COLOURS: dict[str, tuple[float, float, float]] = {
    "H":  (1.00, 1.00, 1.00),
    "He": (0.85, 1.00, 1.00),
    "Li": (0.80, 0.50, 1.00),
    "B":  (1.00, 0.71, 0.71),
    "C":  (0.00, 0.00, 0.00),
    "N":  (0.00, 0.00, 1.00),
    "O":  (1.00, 0.00, 0.00),
    "F":  (0.56, 0.88, 0.31),
    "Na": (0.67, 0.36, 0.95),
    "Mg": (0.54, 1.00, 0.00),
    "Al": (0.75, 0.65, 0.65),
    "Si": (0.94, 0.78, 0.63),
    "P":  (1.00, 0.65, 0.00),
    "S":  (1.00, 1.00, 0.00),
    "Cl": (0.00, 1.00, 0.00),
    "K":  (0.56, 0.25, 0.83),
    "Ca": (0.24, 1.00, 0.00),
    "Ti": (0.75, 0.76, 0.78),
    "Mn": (0.61, 0.48, 0.78),
    "Fe": (1.00, 0.65, 0.00),
    "Co": (0.94, 0.56, 0.63),
    "Ni": (0.31, 0.82, 0.31),
    "Cu": (0.78, 0.50, 0.20),
    "Zn": (0.49, 0.50, 0.69),
    "Br": (0.65, 0.16, 0.16),
    "Sr": (0.00, 1.00, 0.00),
    "Zr": (0.58, 0.88, 0.88),
    "Ag": (0.75, 0.75, 0.75),
    "I":  (0.58, 0.00, 0.58),
    "Ba": (0.00, 0.79, 0.00),
    "Pt": (0.82, 0.82, 0.88),
    "Au": (1.00, 0.82, 0.14),
    "Pb": (0.34, 0.35, 0.38),
}

ELEMENT_SIZES: dict[str, float] = {
    "H": 0.30, "C": 0.40, "N": 0.35, "O": 0.32, "S": 0.45, "P": 0.42,
    "Cl": 0.40, "Br": 0.45, "I": 0.50, "Fe": 0.40, "Zn": 0.35,
}

# Covalent radii in angstroms, periods 1-6 (Cordero 2008).
COVALENT_RADII: dict[str, float] = {
    "H": 0.31, "He": 0.28,
    "Li": 1.28, "Be": 0.96, "B": 0.84, "C": 0.76, "N": 0.71, "O": 0.66,
    "F": 0.57, "Ne": 0.58,
    "Na": 1.66, "Mg": 1.41, "Al": 1.21, "Si": 1.11, "P": 1.07, "S": 1.05,
    "Cl": 1.02, "Ar": 1.06,
    "K": 2.03, "Ca": 1.76, "Sc": 1.70, "Ti": 1.60, "V": 1.53, "Cr": 1.39,
    "Mn": 1.39, "Fe": 1.32, "Co": 1.26, "Ni": 1.24, "Cu": 1.32, "Zn": 1.22,
    "Ga": 1.22, "Ge": 1.20, "As": 1.19, "Se": 1.20, "Br": 1.20, "Kr": 1.16,
    "Rb": 2.20, "Sr": 1.95, "Y": 1.90, "Zr": 1.75, "Nb": 1.64, "Mo": 1.54,
    "Tc": 1.47, "Ru": 1.46, "Rh": 1.42, "Pd": 1.39, "Ag": 1.45, "Cd": 1.44,
    "In": 1.42, "Sn": 1.39, "Sb": 1.39, "Te": 1.38, "I": 1.39, "Xe": 1.40,
    "Cs": 2.44, "Ba": 2.15, "La": 2.07, "Hf": 1.75, "Ta": 1.70, "W": 1.62,
    "Re": 1.51, "Os": 1.44, "Ir": 1.41, "Pt": 1.36, "Au": 1.36, "Hg": 1.32,
    "Tl": 1.45, "Pb": 1.46, "Bi": 1.48,
}

_SYMBOL_RE = re.compile(r"^([A-Za-z]{1,2})")


def element_symbol(species: str) -> str:
    """Reduce a species label to a capitalised element symbol.

    Strips site numbering and oxidation states so that ``"Fe2+"``,
    ``"fe"`` and ``"O1"`` map to ``"Fe"``, ``"Fe"`` and ``"O"``.  Two
    letter prefixes that are not a known element fall back to their
    first letter (``"Ox"`` -> ``"O"``).  Labels without a leading
    letter are returned unchanged.
    """
    match = _SYMBOL_RE.match(species.strip())
    if match is None:
        return species
    letters = match.group(1)
    candidate = letters.capitalize()
    if len(candidate) == 2 and candidate not in COVALENT_RADII:
        single = candidate[0]
        if single in COVALENT_RADII:
            return single
    return candidate


def element_colour(species: str) -> tuple[float, float, float]:
    """Default colour for *species*, grey when unknown."""
    return ELEMENT_COLOURS.get(element_symbol(species), FALLBACK_COLOUR)


def element_size(species: str) -> float:
    """Default display radius for *species*."""
    return ELEMENT_SIZES.get(element_symbol(species), FALLBACK_SIZE)


def covalent_radius(species: str) -> float | None:
    """Covalent radius for *species*, or ``None`` if not tabulated."""
    return COVALENT_RADII.get(element_symbol(species))


def covalent_cutoff(
    species_a: str,
    species_b: str,
    tolerance: float,
) -> float | None:
    """Bond cutoff from the covalent-radius sum scaled by *tolerance*.

    Returns ``None`` when either species has no tabulated radius, so
    the caller can fall back to a global cutoff.
    """
    r_a = covalent_radius(species_a)
    r_b = covalent_radius(species_b)
    if r_a is None or r_b is None:
        return None
    return (r_a + r_b) * tolerance


def default_atom_style(species: str) -> AtomStyle:
    """Return the default :class:`AtomStyle` for *species*.

    Args:
        species: Species label (e.g. ``"C"``, ``"Fe2+"``).

    Returns:
        An AtomStyle with the tabulated display radius and colour.
    """
    return AtomStyle(radius=element_size(species), colour=element_colour(species))
