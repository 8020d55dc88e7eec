"""N-dimensional extents with row-major stride arithmetic."""
from __future__ import annotations

import operator
from functools import cached_property, reduce
from typing import Iterable, Iterator, Sequence, Tuple, Union, overload

from ..errors import ShapeMismatchError

ShapeLike = Union["NDSize", Sequence[int]]


class NDSize(Sequence[int]):
    """Ordered sequence of non-negative extents, one per axis.

    A rank 0 size describes a scalar (one element).
    Instances are immutable, "resizing" returns a new instance.
    """

    def __init__(self, extents: Iterable[int] = ()):
        ext = tuple(int(x) for x in extents)
        if any(x < 0 for x in ext):
            raise ValueError(f"Extents must be non-negative: {ext}")
        self._extents: Tuple[int, ...] = ext

    @classmethod
    def of(cls, shape: ShapeLike) -> NDSize:
        """Return shape as NDSize (no copy if it already is one)."""
        return shape if isinstance(shape, NDSize) else cls(shape)

    # sequence protocol

    @overload
    def __getitem__(self, idx: int) -> int:
        ...

    @overload
    def __getitem__(self, idx: slice) -> Tuple[int, ...]:
        ...

    def __getitem__(self, idx):
        return self._extents[idx]

    def __len__(self) -> int:
        return len(self._extents)

    def __iter__(self) -> Iterator[int]:
        return iter(self._extents)

    def __eq__(self, other) -> bool:
        if isinstance(other, NDSize):
            return self._extents == other._extents
        if isinstance(other, (tuple, list)):
            return self._extents == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._extents)

    def __repr__(self) -> str:
        return f"NDSize({list(self._extents)})"

    # arithmetic

    def _binop(self, other, op) -> NDSize:
        if isinstance(other, int):
            return NDSize(op(x, other) for x in self._extents)
        other = NDSize.of(other)
        if other.rank != self.rank:
            raise ShapeMismatchError(f"Rank mismatch: {self} vs. {other}")
        return NDSize(op(x, y) for x, y in zip(self._extents, other))

    def __add__(self, other) -> NDSize:
        return self._binop(other, operator.add)

    def __sub__(self, other) -> NDSize:
        return self._binop(other, operator.sub)

    # derived quantities

    @property
    def rank(self) -> int:
        return len(self._extents)

    @property
    def nelms(self) -> int:
        """Number of elements (product of extents, 1 for rank 0)."""
        return reduce(operator.mul, self._extents, 1)

    @cached_property
    def strides(self) -> Tuple[int, ...]:
        """Row-major strides, i.e. the last axis varies fastest."""
        strides = [1] * self.rank
        for cur in reversed(range(self.rank - 1)):
            strides[cur] = strides[cur + 1] * self._extents[cur + 1]
        return tuple(strides)

    def dot(self, other: Sequence[int]) -> int:
        if len(other) != self.rank:
            raise ShapeMismatchError(f"Rank mismatch: {self} vs. {list(other)}")
        return sum(x * y for x, y in zip(self._extents, other))

    def sub2index(self, sub: Sequence[int]) -> int:
        """Return linear (row-major) index of a subscript vector."""
        if len(sub) != self.rank:
            raise ShapeMismatchError(f"Subscript {list(sub)} does not match {self}")
        if any(not (0 <= s < e) for s, e in zip(sub, self._extents)):
            raise IndexError(f"Subscript {list(sub)} out of bounds for {self}")
        return NDSize(self.strides).dot(sub)

    def resized(self, axis: int, extent: int) -> NDSize:
        """Return a copy with the extent of one axis replaced."""
        ext = list(self._extents)
        ext[axis] = extent
        return NDSize(ext)

    def to_tuple(self) -> Tuple[int, ...]:
        return self._extents
