from __future__ import annotations

#: A colour specification accepted throughout bragg.
#:
#: Can be any of:
#:
#: - A CSS colour name or hex string (e.g. ``"red"``, ``"#ff0000"``).
#: - A single float for grey (``0.0`` = black, ``1.0`` = white).
#: - An RGB tuple or list with values in ``[0, 1]``.
#:
#: Render entities always carry the normalised ``(r, g, b)`` form so
#: that scene diffs compare plain floats.
Colour = str | float | tuple[float, float, float] | list[float]

RGB = tuple[float, float, float]


def normalise_colour(colour: Colour) -> RGB:
    """Convert a colour specification to a normalised (r, g, b) tuple.

    Args:
        colour: The colour to normalise.

    Returns:
        A tuple of three floats in [0, 1].

    Raises:
        ValueError: If the colour cannot be interpreted.
    """
    if isinstance(colour, (int, float)) and not isinstance(colour, bool):
        grey = float(colour)
        if not 0.0 <= grey <= 1.0:
            raise ValueError(f"Grey value must be in [0, 1], got {grey}")
        return (grey, grey, grey)

    if isinstance(colour, (tuple, list)):
        if len(colour) != 3:
            raise ValueError(
                f"RGB sequence must have 3 elements, got {len(colour)}"
            )
        rgb = tuple(float(c) for c in colour)
        for name, val in zip("rgb", rgb):
            if not 0.0 <= val <= 1.0:
                raise ValueError(
                    f"RGB component {name} must be in [0, 1], got {val}"
                )
        return rgb  # type: ignore[return-value]

    if isinstance(colour, str):
        from matplotlib.colors import to_rgb

        try:
            return tuple(float(c) for c in to_rgb(colour))  # type: ignore[return-value]
        except ValueError:
            raise ValueError(f"Unrecognised colour name: {colour!r}") from None

    raise ValueError(f"Cannot interpret colour: {colour!r}")
