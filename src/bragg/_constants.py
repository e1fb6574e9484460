"""Shared numeric constants used across the model and pipeline."""

LATTICE_DET_TOLERANCE: float = 1e-8
"""Minimum ``det / (|a| |b| |c|)`` for a lattice to count as non-degenerate."""

COINCIDENT_DISTANCE: float = 1e-8
"""Atoms closer than this are treated as the same point and never bonded."""

SCENE_EPSILON: float = 1e-6
"""Absolute tolerance for floating-point field comparison when diffing."""

BRUTE_FORCE_MAX_ATOMS: int = 2000
"""Largest atom count for which bonds are found by all-pairs search.

Above this, bond inference switches to a uniform spatial grid so the
work stays close to linear in the number of atoms.
"""

DEFAULT_BOND_TOLERANCE: float = 1.2
"""Multiplier applied to the covalent-radius sum to get a bond cutoff."""

DEFAULT_BOND_CUTOFF: float = 1.2
"""Cutoff used in fixed mode and for species pairs with no known radii."""

DEFAULT_BOND_COLOUR: tuple[float, float, float] = (0.5, 0.5, 0.5)
DEFAULT_CELL_COLOUR: tuple[float, float, float] = (0.2, 0.2, 0.2)
