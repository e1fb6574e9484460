"""Shared test fixtures for bragg."""

import numpy as np
import pytest

from bragg.model import AtomSite, CrystalStructure, LatticeVectors


@pytest.fixture
def cubic_single():
    """One atom at the origin of a unit cubic cell."""
    return CrystalStructure(LatticeVectors.cubic(1.0), [AtomSite("X", (0, 0, 0))])


@pytest.fixture
def dimer():
    """Two oxygen atoms 1.0 apart inside a large cubic cell."""
    return CrystalStructure.from_arrays(
        10.0 * np.eye(3), ["O", "O"], [[0.0, 0.0, 0.0], [0.1, 0.0, 0.0]],
    )


@pytest.fixture
def rocksalt():
    """Conventional NaCl cell, a = 5.64."""
    a = 5.64
    return CrystalStructure.from_arrays(
        a * np.eye(3),
        ["Na"] * 4 + ["Cl"] * 4,
        [
            [0.0, 0.0, 0.0], [0.0, 0.5, 0.5], [0.5, 0.0, 0.5], [0.5, 0.5, 0.0],
            [0.5, 0.5, 0.5], [0.5, 0.0, 0.0], [0.0, 0.5, 0.0], [0.0, 0.0, 0.5],
        ],
        title="NaCl",
    )


@pytest.fixture
def degenerate():
    """A structure whose third lattice vector lies in the ab plane."""
    return CrystalStructure.from_arrays(
        [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]],
        ["O"],
        [[0.0, 0.0, 0.0]],
    )
