from __future__ import annotations

from dataclasses import dataclass

from bragg.model.colour import Colour, normalise_colour


@dataclass(frozen=True)
class AtomStyle:
    """Per-species display override for render atoms.

    Styles sit between per-site overrides and the element tables in
    :mod:`bragg.defaults`: a site's own radius or colour wins, then the
    style for its species, then the element default.

    Attributes:
        radius: Display radius in the same length unit as the lattice.
        colour: Fill colour specification (see :data:`Colour`).
    """

    radius: float
    colour: Colour

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        normalise_colour(self.colour)

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary."""
        return {
            "radius": self.radius,
            "colour": list(normalise_colour(self.colour)),
        }

    @classmethod
    def from_dict(cls, d: dict) -> AtomStyle:
        """Deserialise from a dictionary."""
        colour = d["colour"]
        if isinstance(colour, list):
            colour = tuple(colour)
        return cls(radius=d["radius"], colour=colour)
