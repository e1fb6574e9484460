from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import StrEnum

from bragg._constants import DEFAULT_BOND_CUTOFF, DEFAULT_BOND_TOLERANCE
from bragg.exceptions import InvalidViewParameters
from bragg.model.atom_style import AtomStyle
from bragg.model.bond_spec import BondSpec


class BondMode(StrEnum):
    """How bonds are inferred from interatomic distances.

    Attributes:
        COVALENT: Per-species-pair cutoffs.  Explicit
            :class:`BondSpec` rules win; otherwise the covalent-radius
            sum times the tolerance; otherwise the global cutoff.
        FIXED: One global cutoff for every pair.
        NONE: No bonds are inferred.
    """

    COVALENT = "covalent"
    FIXED = "fixed"
    NONE = "none"


@dataclass(frozen=True)
class CellRadius:
    """Replicate over integer cell offsets in ``[-cells, cells]^3``."""

    cells: int = 0

    def to_dict(self) -> dict:
        return {"cells": self.cells}


@dataclass(frozen=True)
class CartesianCutoff:
    """Replicate images lying within *distance* of the base cell centre.

    The base image of every site is always kept.
    """

    distance: float

    def to_dict(self) -> dict:
        return {"cutoff": self.distance}


ReplicationRadius = CellRadius | CartesianCutoff


def replication_from_dict(d: dict) -> ReplicationRadius:
    """Inverse of ``CellRadius.to_dict`` / ``CartesianCutoff.to_dict``."""
    if set(d) == {"cells"}:
        return CellRadius(d["cells"])
    if set(d) == {"cutoff"}:
        return CartesianCutoff(d["cutoff"])
    raise InvalidViewParameters(
        f"replication must have exactly one of 'cells' or 'cutoff', got {sorted(d)}"
    )


def validate_replication(radius: object) -> None:
    """Raise :class:`InvalidViewParameters` for an unusable radius."""
    if isinstance(radius, CellRadius):
        cells = radius.cells
        if isinstance(cells, bool) or not isinstance(cells, int):
            raise InvalidViewParameters(
                f"cell radius must be an integer, got {cells!r}"
            )
        if cells < 0:
            raise InvalidViewParameters(
                f"cell radius must be non-negative, got {cells}"
            )
    elif isinstance(radius, CartesianCutoff):
        distance = radius.distance
        if isinstance(distance, bool) or not isinstance(distance, (int, float)):
            raise InvalidViewParameters(
                f"cutoff must be a number, got {distance!r}"
            )
        if not math.isfinite(distance) or distance < 0:
            raise InvalidViewParameters(
                f"cutoff must be finite and non-negative, got {distance}"
            )
    else:
        raise InvalidViewParameters(
            "replication must be a CellRadius or CartesianCutoff, "
            f"got {type(radius).__name__}"
        )


@dataclass
class ViewParameters:
    """Caller-owned settings that shape the derived scene.

    The engine copies these on every call, so mutating an instance
    after handing it over has no effect until it is passed in again.

    Attributes:
        replication: Periodic image range, either a
            :class:`CellRadius` or a :class:`CartesianCutoff`.
        bond_mode: Bond inference mode.  Strings are accepted and
            converted to :class:`BondMode`.
        bond_tolerance: Multiplier on the covalent-radius sum in
            covalent mode.
        bond_cutoff: Cutoff for every pair in fixed mode, and the
            fallback for unknown species pairs in covalent mode.
        bond_specs: Explicit per-species-pair cutoffs, checked in order
            before the covalent default.
        bond_site_images: Whether periodic images of one site may bond
            to each other.
        atom_styles: Per-species display overrides.
        show_unit_cell: Whether the 12 cell edges are part of the scene.
        show_bonds: Whether bonds are part of the scene.

    Raises:
        InvalidViewParameters: From :meth:`validate`, which also runs
            on construction.
    """

    replication: ReplicationRadius = field(default_factory=CellRadius)
    bond_mode: BondMode = BondMode.COVALENT
    bond_tolerance: float = DEFAULT_BOND_TOLERANCE
    bond_cutoff: float = DEFAULT_BOND_CUTOFF
    bond_specs: list[BondSpec] = field(default_factory=list)
    bond_site_images: bool = False
    atom_styles: dict[str, AtomStyle] = field(default_factory=dict)
    show_unit_cell: bool = True
    show_bonds: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check every field, normalising ``bond_mode`` to the enum.

        Raises:
            InvalidViewParameters: On the first invalid field.
        """
        validate_replication(self.replication)
        try:
            self.bond_mode = BondMode(self.bond_mode)
        except ValueError:
            raise InvalidViewParameters(
                f"unknown bond mode {self.bond_mode!r}; expected one of "
                f"{[m.value for m in BondMode]}"
            ) from None
        if not math.isfinite(self.bond_tolerance) or self.bond_tolerance <= 0:
            raise InvalidViewParameters(
                f"bond_tolerance must be positive, got {self.bond_tolerance}"
            )
        if not math.isfinite(self.bond_cutoff) or self.bond_cutoff < 0:
            raise InvalidViewParameters(
                f"bond_cutoff must be non-negative, got {self.bond_cutoff}"
            )
        for i, spec in enumerate(self.bond_specs):
            if not isinstance(spec, BondSpec):
                raise InvalidViewParameters(
                    f"bond_specs[{i}] must be a BondSpec, got {type(spec).__name__}"
                )
        for sp, style in self.atom_styles.items():
            if not isinstance(style, AtomStyle):
                raise InvalidViewParameters(
                    f"atom_styles[{sp!r}] must be an AtomStyle, "
                    f"got {type(style).__name__}"
                )

    def copy(self) -> ViewParameters:
        """Return an independent copy (containers are copied too)."""
        return dataclasses.replace(
            self,
            bond_specs=list(self.bond_specs),
            atom_styles=dict(self.atom_styles),
        )

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dictionary.

        Scalar fields still at their defaults are omitted; empty
        ``bond_specs`` and ``atom_styles`` are omitted too.
        """
        defaults = _scalar_defaults()
        d: dict = {}
        if self.replication != CellRadius():
            d["replication"] = self.replication.to_dict()
        for name, default in defaults.items():
            value = getattr(self, name)
            if value != default:
                d[name] = str(value) if name == "bond_mode" else value
        if self.bond_specs:
            d["bond_specs"] = [spec.to_dict() for spec in self.bond_specs]
        if self.atom_styles:
            d["atom_styles"] = {
                sp: style.to_dict() for sp, style in self.atom_styles.items()
            }
        return d

    @classmethod
    def from_dict(cls, d: dict) -> ViewParameters:
        """Deserialise from a dictionary.

        Raises:
            InvalidViewParameters: On unknown keys or invalid values.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise InvalidViewParameters(
                f"unknown view parameter keys: {sorted(unknown)}"
            )
        kwargs = {k: v for k, v in d.items() if k in _scalar_defaults()}
        if "replication" in d:
            kwargs["replication"] = replication_from_dict(d["replication"])
        if "bond_specs" in d:
            kwargs["bond_specs"] = [BondSpec.from_dict(s) for s in d["bond_specs"]]
        if "atom_styles" in d:
            kwargs["atom_styles"] = {
                sp: AtomStyle.from_dict(s) for sp, s in d["atom_styles"].items()
            }
        return cls(**kwargs)


def _scalar_defaults() -> dict:
    """``{name: default}`` for fields with a plain (non-factory) default."""
    return {
        f.name: f.default
        for f in dataclasses.fields(ViewParameters)
        if f.default is not dataclasses.MISSING
    }
