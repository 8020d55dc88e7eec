"""
Generic bridge between native values and storage.

Every supported value can be described as a triple of element type, shape
and the row-major sequence of its elements. Writing uses `describe` and
`linearize` (or `pack`, which produces both at once as a numpy array in the
storage encoding), reading allocates a sink with `materialize` and feeds it
the stored elements (`unpack` does both).

Supported kinds of values:

* scalars (python `int`/`float` and numpy integer/float scalars),
* text (`str`),
* homogeneous rank-N arrays of either (numpy arrays, nested lists/tuples),
* arrays of fixed-width records (numpy structured arrays and `numpy.void`).
"""
from __future__ import annotations

import numbers
from typing import Any, Iterator, List, Optional, Protocol, Tuple

import numpy as np

from ..errors import UnsupportedTypeError
from .datatype import (
    CompoundType,
    DataType,
    ElementType,
    data_type_of,
    element_type_of,
    encoding_of,
)
from .ndbuffer import NDBuffer
from .ndsize import NDSize, ShapeLike


class Marshaller(Protocol):
    """Capability to describe a kind of native value as typed element sequence."""

    def accepts(self, value: Any) -> bool:
        ...

    def describe(self, value: Any) -> Tuple[ElementType, NDSize]:
        ...

    def flatten(self, value: Any) -> np.ndarray:
        """Return 1-D array of elements in row-major order and storage encoding."""


def _text_array(vals) -> np.ndarray:
    ret = np.empty(len(vals), dtype=encoding_of(DataType.Text))
    ret[:] = vals
    return ret


class ScalarMarshaller:
    def accepts(self, value) -> bool:
        if isinstance(value, (bool, np.bool_)):
            return False  # bool is not a storable element type
        return isinstance(value, (numbers.Integral, numbers.Real, np.number))

    def describe(self, value):
        return data_type_of(np.asarray(value).dtype), NDSize()

    def flatten(self, value):
        dtype, _ = self.describe(value)
        return np.asarray(value).astype(encoding_of(dtype)).reshape(1)


class TextMarshaller:
    def accepts(self, value) -> bool:
        return isinstance(value, str)

    def describe(self, value):
        return DataType.Text, NDSize()

    def flatten(self, value):
        return _text_array([value])


def _leaves(value) -> Iterator:
    if isinstance(value, (list, tuple)):
        for x in value:
            yield from _leaves(x)
    elif isinstance(value, np.ndarray):
        yield from value.flat
    else:
        yield value


def _check_homogeneous(value):
    """Reject nested sequences mixing text and numbers (or holding bools)."""
    is_text = None
    for x in _leaves(value):
        if isinstance(x, (bool, np.bool_)):
            raise UnsupportedTypeError("bool is not a storable element type!")
        if is_text is None:
            is_text = isinstance(x, str)
        elif is_text != isinstance(x, str):
            raise UnsupportedTypeError("Not a homogeneous array: mixes text and numbers")


class ArrayMarshaller:
    """Homogeneous arrays of scalars or strings, of any rank."""

    def accepts(self, value) -> bool:
        if isinstance(value, np.ndarray):
            return value.dtype.names is None
        return isinstance(value, (list, tuple))

    def _as_array(self, value) -> np.ndarray:
        if isinstance(value, np.ndarray):
            return value
        try:
            arr = np.asarray(value)
        except ValueError as e:  # ragged nested sequences
            raise UnsupportedTypeError(f"Not a homogeneous array: {e}") from e
        _check_homogeneous(value)
        return arr

    def _data_type(self, arr: np.ndarray) -> DataType:
        if arr.dtype == object:
            if all(isinstance(x, str) for x in arr.flat):
                return DataType.Text
            raise UnsupportedTypeError("Object arrays must only contain strings!")
        return data_type_of(arr.dtype)

    def describe(self, value):
        arr = self._as_array(value)
        return self._data_type(arr), NDSize(arr.shape)

    def flatten(self, value):
        arr = self._as_array(value)
        dtype = self._data_type(arr)
        if dtype is DataType.Text:
            return _text_array([str(x) for x in arr.flat])
        return np.ascontiguousarray(arr, dtype=encoding_of(dtype)).reshape(-1)


class RecordMarshaller:
    """Arrays of fixed-width records (one level of nesting)."""

    def accepts(self, value) -> bool:
        return isinstance(value, (np.ndarray, np.void)) and value.dtype.names is not None

    def describe(self, value):
        return CompoundType.from_numpy(value.dtype), NDSize(np.shape(value))

    def flatten(self, value):
        ctype = CompoundType.from_numpy(value.dtype)
        arr = np.asarray(value).reshape(-1)
        ret = np.empty(arr.shape[0], dtype=ctype.numpy_dtype)
        for name in ctype.names:
            if name in ctype.text_fields:
                ret[name] = [str(x) for x in arr[name]]
            else:
                ret[name] = arr[name]
        return ret


MARSHALLERS: List[Marshaller] = [
    TextMarshaller(),
    ScalarMarshaller(),
    RecordMarshaller(),
    ArrayMarshaller(),
]
"""Registered marshallers, the first one accepting a value is used."""


def marshaller_for(value: Any) -> Marshaller:
    """Return the marshaller responsible for given value.

    Raises:
        UnsupportedTypeError: if no marshaller accepts the value.
    """
    for m in MARSHALLERS:
        if m.accepts(value):
            return m
    raise UnsupportedTypeError(f"Cannot store value of type {type(value).__name__}")


def describe(value: Any) -> Tuple[ElementType, NDSize]:
    """Return element type and shape of a value without copying its data."""
    return marshaller_for(value).describe(value)


def linearize(value: Any) -> Iterator:
    """Return a one-pass iterator over the elements of a value (row-major order)."""
    return iter(marshaller_for(value).flatten(value))


def materialize(shape: ShapeLike, etype: ElementType, into: Any = None) -> NDBuffer:
    """Return a sink of given shape and type that accepts row-major elements."""
    return NDBuffer(etype, shape, into=into)


def pack(value: Any) -> Tuple[ElementType, NDSize, np.ndarray]:
    """Return element type, shape and the value as array in storage encoding."""
    m = marshaller_for(value)
    etype, shape = m.describe(value)
    return etype, shape, m.flatten(value).reshape(shape.to_tuple())


def unpack(raw: Any, etype: Optional[ElementType] = None, into: Any = None) -> Any:
    """Turn data read from storage back into a native value.

    If `etype` is not given, it is inferred from the dtype of the raw data.
    """
    arr = np.asarray(raw)
    if etype is None:
        etype = DataType.Text if arr.dtype == object else element_type_of(arr.dtype)
    sink = materialize(NDSize(arr.shape), etype, into=into)
    sink.write(arr.reshape(-1))
    return sink.finish()
