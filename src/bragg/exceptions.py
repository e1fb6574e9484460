"""Exception types raised by the structure-to-scene pipeline."""

from __future__ import annotations


class BraggError(Exception):
    """Base class for all errors raised by bragg."""


class InvalidLattice(BraggError, ValueError):
    """Lattice vectors are degenerate or left-handed.

    Raised before any geometry is produced, so a caller never sees a
    partial set of positions for a rejected structure.
    """


class InvalidViewParameters(BraggError, ValueError):
    """View parameters cannot be used for a recompute.

    Covers negative or non-integer replication radii, negative
    Cartesian cutoffs, unknown bond modes, and non-positive bond
    tolerances.
    """


class RecomputeCancelled(BraggError):
    """A background recompute was superseded by a newer edit.

    This is not a user-visible failure.  The engine raises it
    internally when a stale result finishes and handles it by logging
    and discarding the result.

    Attributes:
        generation: Generation number of the discarded result.
        current: Generation number that superseded it.
    """

    def __init__(self, generation: int, current: int) -> None:
        super().__init__(
            f"recompute {generation} superseded by {current}"
        )
        self.generation = generation
        self.current = current
