"""Wrapper for chunked, growable HDF5 datasets."""
from __future__ import annotations

import logging
import math
from typing import Any, Optional, Sequence, Tuple

import h5py
import numpy as np
import wrapt

from ..errors import (
    AlreadyExistsError,
    InvalidResizeError,
    ReadOnlyError,
    ShapeMismatchError,
    UnsupportedTypeError,
)
from .datatype import DataType, ElementType, element_type_of, encoding_of
from .marshal import pack, unpack
from .ndsize import NDSize, ShapeLike
from .utils import CHUNK_BASE, CHUNK_MAX, CHUNK_MIN

logger = logging.getLogger(__name__)

MaxShape = Optional[Sequence[Optional[int]]]
"""Per-axis maximal extents, `None` meaning unbounded (for an axis or all axes)."""


def _selection(offset: NDSize, count: NDSize) -> Tuple[slice, ...]:
    return tuple(slice(o, o + c) for o, c in zip(offset, count))


class DataSet(wrapt.ObjectProxy):
    """Named, chunked, extensible typed array (wraps a `h5py.Dataset`)."""

    __wrapped__: h5py.Dataset

    def __init__(self, h5dataset: Any, *, read_only: bool = False):
        if isinstance(h5dataset, DataSet):
            read_only = read_only or h5dataset.read_only
            h5dataset = h5dataset.__wrapped__
        if not isinstance(h5dataset, h5py.Dataset):
            msg = f"Expected a h5py.Dataset, got: {type(h5dataset).__name__}"
            raise TypeError(msg)
        super().__init__(h5dataset)
        self._self_read_only: bool = read_only

    def __copy__(self) -> DataSet:
        return DataSet(self.__wrapped__, read_only=self._self_read_only)

    def __deepcopy__(self, memo) -> DataSet:
        return self.__copy__()

    def __repr__(self) -> str:
        return repr(self.__wrapped__)

    @property
    def read_only(self) -> bool:
        return self._self_read_only

    def _guard_read_only(self, method: str):
        if self._self_read_only:
            raise ReadOnlyError(f"Cannot use {method}, the dataset is marked as read_only!")

    # creation

    @classmethod
    def create(
        cls,
        parent: Any,
        name: str,
        dtype: ElementType,
        shape: ShapeLike,
        maxshape: MaxShape = None,
        chunks: Optional[Sequence[int]] = None,
    ) -> DataSet:
        """Create a new dataset in given group.

        Args:
            parent: group to create the dataset in (nixcore or h5py group)
            name: name of the new dataset
            dtype: element type of the dataset
            shape: initial shape
            maxshape: maximal shape (None = unbounded, also per axis)
            chunks: chunk shape (if not given, a guess is used)

        Rank 0 datasets are always contiguous and cannot be extended.
        """
        read_only = getattr(parent, "read_only", False)
        if read_only:
            raise ReadOnlyError("Cannot create dataset, the group is marked as read_only!")
        if isinstance(parent, wrapt.ObjectProxy):
            parent = parent.__wrapped__
        if name in parent:
            raise AlreadyExistsError(f"Name '{name}' already taken at {parent.name}")

        shape = NDSize.of(shape)
        kwargs = {}
        if shape.rank > 0:
            kwargs["maxshape"] = cls._check_maxshape(shape, maxshape)
            if chunks is None:
                chunks = cls.guess_chunking(shape, dtype)
            chunks = tuple(int(c) for c in chunks)
            if len(chunks) != shape.rank or any(c < 1 for c in chunks):
                raise ShapeMismatchError(f"Invalid chunk shape {chunks} for {shape}")
            kwargs["chunks"] = chunks

        logger.debug("create dataset %s in %s with shape %s", name, parent.name, shape)
        h5ds = parent.create_dataset(
            name, shape=shape.to_tuple(), dtype=encoding_of(dtype), **kwargs
        )
        return cls(h5ds)

    @staticmethod
    def _check_maxshape(shape: NDSize, maxshape: MaxShape) -> Tuple[Optional[int], ...]:
        if maxshape is None:
            return (None,) * shape.rank
        ret = tuple(None if m is None else int(m) for m in maxshape)
        if len(ret) != shape.rank:
            raise ShapeMismatchError(f"Maximal shape {ret} does not match {shape}")
        for ext, m in zip(shape, ret):
            if m is not None and ext > m:
                raise InvalidResizeError(f"Initial shape {shape} exceeds maximum {ret}")
        return ret

    @staticmethod
    def guess_chunking(shape: ShapeLike, dtype: ElementType) -> Tuple[int, ...]:
        """Guess a chunk shape for a dataset.

        Chunks are scaled with the size of the dataset and kept between
        `CHUNK_MIN` and `CHUNK_MAX` bytes, by halving the axes in turn.
        """
        shape = NDSize.of(shape)
        if shape.rank == 0:
            return ()
        type_size = encoding_of(dtype).itemsize
        chunks = [max(x, 1) for x in shape]
        dset_size = math.prod(chunks) * type_size
        target_size = CHUNK_BASE * (2 ** math.log10(dset_size / (1024.0 * 1024)))
        target_size = min(max(target_size, CHUNK_MIN), CHUNK_MAX)

        idx = 0
        while True:
            chunk_bytes = math.prod(chunks) * type_size
            close_enough = abs(chunk_bytes - target_size) / target_size < 0.5
            if (chunk_bytes < target_size or close_enough) and chunk_bytes < CHUNK_MAX:
                break
            if math.prod(chunks) == 1:
                break
            axis = idx % shape.rank
            chunks[axis] = math.ceil(chunks[axis] / 2.0)
            idx += 1
        return tuple(chunks)

    # introspection

    def size(self) -> NDSize:
        """Current extents of the dataset."""
        return NDSize(self.__wrapped__.shape)

    @property
    def max_shape(self) -> Tuple[Optional[int], ...]:
        return tuple(self.__wrapped__.maxshape or ())

    @property
    def chunk_shape(self) -> Optional[Tuple[int, ...]]:
        return self.__wrapped__.chunks

    @property
    def data_type(self) -> ElementType:
        return element_type_of(self.__wrapped__.dtype)

    def require_type(self, etype: ElementType):
        """Check that values of given element type can be stored here.

        Raises:
            UnsupportedTypeError: if the type differs from the stored element type.
        """
        if etype != self.data_type:
            msg = f"Cannot store {etype} values in {self.name} of type {self.data_type}"
            raise UnsupportedTypeError(msg)

    # resizing

    def extend(self, new_shape: ShapeLike):
        """Grow the dataset to a new shape.

        Raises:
            InvalidResizeError: if an axis would shrink, exceed its maximum,
                or if the rank differs.
        """
        self._guard_read_only("extend")
        new = NDSize.of(new_shape)
        cur = self.size()
        if new.rank != cur.rank:
            raise InvalidResizeError(f"Cannot change rank of {self.name}: {cur} -> {new}")
        for n, c, m in zip(new, cur, self.max_shape):
            if n < c:
                raise InvalidResizeError(f"Cannot shrink {self.name}: {cur} -> {new}")
            if m is not None and n > m:
                msg = f"Cannot extend {self.name} beyond {self.max_shape}: {new}"
                raise InvalidResizeError(msg)
        if new == cur:
            return
        logger.debug("extend dataset %s: %s -> %s", self.name, cur, new)
        self.__wrapped__.resize(new.to_tuple())

    # raw access

    def _write_raw(self, data: np.ndarray, sel: Tuple[slice, ...] = ()):
        if data.size == 0:
            return
        self.__wrapped__[sel] = data

    def _read_raw(self, sel: Tuple[slice, ...] = ()) -> Any:
        if self.data_type is DataType.Text:
            return self.__wrapped__.asstr()[sel]
        return self.__wrapped__[sel]

    # whole dataset transfers

    def write(self, value: Any):
        """Overwrite the whole content (value must have the current shape)."""
        self._guard_read_only("write")
        etype, shape, data = pack(value)
        self.require_type(etype)
        if shape != self.size():
            msg = f"Value of shape {shape} does not match {self.name} of shape {self.size()}"
            raise ShapeMismatchError(msg)
        self._write_raw(data)

    def read(self, into: Any = None) -> Any:
        """Return the whole content (a destination can be passed in `into`)."""
        return unpack(self._read_raw(), self.data_type, into=into)

    def set(self, value: Any):
        """Extend the dataset to the shape of the value and write it."""
        etype, shape, _ = pack(value)
        self.require_type(etype)
        self.extend(shape)
        self.write(value)

    # partial transfers

    def _check_region(self, offset: NDSize, count: NDSize):
        cur = self.size()
        if offset.rank != cur.rank or count.rank != cur.rank:
            raise ShapeMismatchError(f"Selection rank does not match {self.name} {cur}")
        if any(o + c > e for o, c, e in zip(offset, count, cur)):
            msg = f"Selection at {offset} of {count} exceeds {self.name} {cur}"
            raise ShapeMismatchError(msg)

    def write_at(self, value: Any, offset: ShapeLike):
        """Write value into the region starting at given offset."""
        self._guard_read_only("write_at")
        etype, count, data = pack(value)
        self.require_type(etype)
        offset = NDSize.of(offset)
        self._check_region(offset, count)
        self._write_raw(data, _selection(offset, count))

    def read_at(self, count: ShapeLike, offset: ShapeLike, into: Any = None) -> Any:
        """Read region of given extents starting at given offset."""
        count, offset = NDSize.of(count), NDSize.of(offset)
        self._check_region(offset, count)
        raw = self._read_raw(_selection(offset, count))
        return unpack(raw, self.data_type, into=into)

    def append(self, row: Any) -> int:
        """Append a single row along the first axis, return its index."""
        self._guard_read_only("append")
        etype, shape, data = pack(row)
        self.require_type(etype)
        cur = self.size()
        if cur.rank == 0 or shape.to_tuple() != cur[1:]:
            msg = f"Row of shape {shape} cannot be appended to {self.name} {cur}"
            raise ShapeMismatchError(msg)
        idx = cur[0]
        self.extend(cur.resized(0, idx + 1))
        offset = NDSize((idx,) + (0,) * shape.rank)
        count = NDSize((1,) + shape.to_tuple())
        self._write_raw(data.reshape(count.to_tuple()), _selection(offset, count))
        return idx
