"""Consistency checks between linked entities."""
from __future__ import annotations

from typing import Any, Sequence, Union

from ..errors import DimensionMismatchError
from .ndsize import NDSize

ShapeOrShaped = Union[Sequence[int], Any]


def shape_of(obj: ShapeOrShaped) -> NDSize:
    """Return shape of an object with a `data_extent`/`shape`, or of a shape itself."""
    if isinstance(obj, (NDSize, tuple, list)):
        return NDSize.of(obj)
    for attr in ("data_extent", "shape"):
        shape = getattr(obj, attr, None)
        if shape is not None:
            return NDSize.of(shape() if callable(shape) else shape)
    raise TypeError(f"Cannot determine shape of {type(obj).__name__}")


def check_shapes_compatible(a: ShapeOrShaped, b: ShapeOrShaped) -> bool:
    """Return whether two arrays agree in rank and in every extent."""
    sa, sb = shape_of(a), shape_of(b)
    if sa.rank != sb.rank:
        return False
    return all(x == y for x, y in zip(sa, sb))


def require_shapes_compatible(a: ShapeOrShaped, b: ShapeOrShaped, what: str = "arrays"):
    """Like `check_shapes_compatible`, but raises if the check fails.

    Raises:
        DimensionMismatchError: if ranks or extents differ.
    """
    if not check_shapes_compatible(a, b):
        msg = f"Dimensionality of {what} does not match: {shape_of(a)} vs. {shape_of(b)}"
        raise DimensionMismatchError(msg)
