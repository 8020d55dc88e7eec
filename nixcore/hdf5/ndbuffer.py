"""Resizable typed buffer that receives elements in row-major order."""
from __future__ import annotations

import numbers
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from ..errors import ShapeMismatchError, UnsupportedTypeError
from .datatype import CompoundType, DataType, ElementType, encoding_of
from .ndsize import NDSize, ShapeLike


def _memory_dtype(etype: ElementType) -> np.dtype:
    # text lives in memory as python str objects
    if etype is DataType.Text:
        return np.dtype(object)
    if isinstance(etype, CompoundType):
        return np.dtype(
            [
                (n, object if t is DataType.Text else encoding_of(t))
                for n, t in etype.fields
            ]
        )
    return encoding_of(etype)


def _decode(x):
    if isinstance(x, bytes):
        return x.decode("utf-8")
    if isinstance(x, str):
        return str(x)  # drop numpy.str_
    return x


class NDBuffer:
    """Typed N-dimensional buffer, the destination of a read.

    Elements are written in row-major order (see `NDSize.strides`).
    Calling `finish` produces the final value and detaches the buffer,
    afterwards it cannot be written to anymore.

    If a destination object is passed as `into`, it is refilled in place:
    a numpy array is resized (numeric values are cast to its dtype),
    a list is cleared and extended.
    """

    def __init__(self, etype: ElementType, shape: ShapeLike, into: Any = None):
        self._etype: ElementType = etype
        self._into = into
        self._data: Optional[np.ndarray] = None
        self._pos: int = 0
        self._shape = NDSize.of(shape)
        if isinstance(into, np.ndarray):
            self._check_destination(into)
        self._allocate()

    def _allocate(self):
        self._data = np.empty(self._shape.nelms, dtype=_memory_dtype(self._etype))
        self._pos = 0

    # shape management

    @property
    def data_type(self) -> ElementType:
        return self._etype

    @property
    def shape(self) -> NDSize:
        return self._shape

    @property
    def rank(self) -> int:
        return self._shape.rank

    @property
    def strides(self) -> Tuple[int, ...]:
        return self._shape.strides

    def resize(self, shape: ShapeLike):
        """Reallocate for a new shape, discarding written elements."""
        self._guard_attached()
        self._shape = NDSize.of(shape)
        self._allocate()

    def sub2index(self, sub: Sequence[int]) -> int:
        return self._shape.sub2index(sub)

    def __getitem__(self, sub: Union[int, Sequence[int]]):
        self._guard_attached()
        if isinstance(sub, numbers.Integral):
            sub = (sub,)
        return self._data[self.sub2index(sub)]  # type: ignore

    # filling

    @property
    def detached(self) -> bool:
        return self._data is None

    def _guard_attached(self):
        if self._data is None:
            raise ValueError("Buffer is already finished!")

    def _coerce(self, elements: Iterable) -> np.ndarray:
        dt = self._data.dtype  # type: ignore
        if isinstance(elements, np.ndarray) and dt.names is None and dt != object:
            return elements.reshape(-1).astype(dt, copy=False)
        if dt.names is not None:
            vals = [tuple(x) for x in elements]
            arr = np.empty(len(vals), dtype=dt)
            for i, v in enumerate(vals):
                arr[i] = tuple(_decode(x) for x in v)
            return arr
        if dt == object:
            vals = [_decode(x) for x in elements]
            if any(not isinstance(x, str) for x in vals):
                raise UnsupportedTypeError("Text buffer can only hold strings!")
            arr = np.empty(len(vals), dtype=object)
            arr[:] = vals
            return arr
        return np.fromiter(elements, dtype=dt)

    def write(self, elements: Iterable) -> int:
        """Append elements (in row-major order) and return the new fill level."""
        self._guard_attached()
        chunk = self._coerce(elements)
        end = self._pos + len(chunk)
        if end > self._shape.nelms:
            msg = f"Too many elements for buffer of shape {self._shape}!"
            raise ShapeMismatchError(msg)
        self._data[self._pos : end] = chunk  # type: ignore
        self._pos = end
        return end

    def finish(self) -> Any:
        """Return the filled value and detach the buffer.

        Rank 0 buffers turn into scalars (`str` for text, numpy scalars else),
        all others into numpy arrays (unless a destination was given).
        """
        self._guard_attached()
        if self._pos != self._shape.nelms:
            msg = f"Buffer incomplete: got {self._pos} of {self._shape.nelms} elements"
            raise ShapeMismatchError(msg)
        arr = self._data.reshape(self._shape.to_tuple())  # type: ignore
        self._data = None
        return self._deliver(arr)

    def _check_destination(self, into: np.ndarray):
        is_text = self._etype is DataType.Text
        is_record = isinstance(self._etype, CompoundType)
        if (into.dtype.kind in "OU") != is_text or (into.dtype.names is not None) != is_record:
            msg = f"Cannot read {self._etype} values into array of dtype {into.dtype}"
            raise UnsupportedTypeError(msg)

    def _deliver(self, arr: np.ndarray) -> Any:
        into = self._into
        if isinstance(into, list):
            into.clear()
            vals = arr.tolist()
            into.extend(vals if isinstance(vals, list) else [vals])
            return into
        if isinstance(into, np.ndarray):
            # numeric values are cast to the dtype of the destination
            into.resize(arr.shape, refcheck=False)
            into[...] = arr
            return into
        if arr.ndim == 0:
            return arr[()]
        return arr
