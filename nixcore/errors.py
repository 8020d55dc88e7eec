"""Exceptions raised by the storage layer.

`UnsupportedTypeError` and `InvalidDimensionTypeError` indicate a programming
error or a corrupted store. All other errors are ordinary outcomes that callers
are expected to handle (or to avoid by asking the matching `has_*` method first).
"""


class NixError(Exception):
    """Base class of all errors raised by nixcore."""


class NotFoundError(NixError, KeyError):
    """A requested attribute, dataset, group or referenced entity does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument, we want the plain message
        return str(self.args[0]) if self.args else ""


class AlreadyExistsError(NixError, ValueError):
    """Target name of a rename or creation is already taken."""


class ShapeMismatchError(NixError, ValueError):
    """Rank or extents of a value do not fit the existing storage object."""


class DimensionMismatchError(ShapeMismatchError):
    """Two linked entities disagree in rank or extents."""


class InvalidResizeError(NixError, ValueError):
    """Extending a dataset would shrink it or exceed its maximal shape."""


class InvalidDimensionTypeError(NixError, RuntimeError):
    """Stored dimension discriminator is not one of the known variants."""


class UnsupportedTypeError(NixError, TypeError):
    """Value is not of a supported element type or shape."""


class ReadOnlyError(NixError, AttributeError):
    """Mutating method called on a handle restricted to read-only access."""


__all__ = [
    "NixError",
    "NotFoundError",
    "AlreadyExistsError",
    "ShapeMismatchError",
    "DimensionMismatchError",
    "InvalidResizeError",
    "InvalidDimensionTypeError",
    "UnsupportedTypeError",
    "ReadOnlyError",
]
