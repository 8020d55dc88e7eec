"""Closed catalog of element types and their storage encodings."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Tuple, Union

import h5py
import numpy as np

from ..errors import UnsupportedTypeError
from .utils import TEXT_ENCODING


class DataType(Enum):
    """Element types that can be stored."""

    Int8 = "int8"
    Int16 = "int16"
    Int32 = "int32"
    Int64 = "int64"
    UInt8 = "uint8"
    UInt16 = "uint16"
    UInt32 = "uint32"
    UInt64 = "uint64"
    Float32 = "float32"
    Float64 = "float64"
    Text = "text"

    @property
    def is_numeric(self) -> bool:
        return self is not DataType.Text

    @property
    def numpy_dtype(self) -> np.dtype:
        return storage_encoding_of(self)

    @property
    def byte_width(self) -> int:
        return byte_width_of(self)


_NUMERIC_ENCODINGS: Dict[DataType, np.dtype] = {
    DataType.Int8: np.dtype("<i1"),
    DataType.Int16: np.dtype("<i2"),
    DataType.Int32: np.dtype("<i4"),
    DataType.Int64: np.dtype("<i8"),
    DataType.UInt8: np.dtype("<u1"),
    DataType.UInt16: np.dtype("<u2"),
    DataType.UInt32: np.dtype("<u4"),
    DataType.UInt64: np.dtype("<u8"),
    DataType.Float32: np.dtype("<f4"),
    DataType.Float64: np.dtype("<f8"),
}

_TEXT_ENCODING = h5py.string_dtype(encoding=TEXT_ENCODING)

# (numpy kind, itemsize) -> DataType, for the inverse lookup
_BY_KIND: Dict[Tuple[str, int], DataType] = {
    (dt.kind, dt.itemsize): t for t, dt in _NUMERIC_ENCODINGS.items()
}


def storage_encoding_of(dtype: DataType) -> np.dtype:
    """Return the numpy/h5py dtype used to store elements of given type.

    Numeric types are fixed-width little-endian, text is variable-length UTF-8.
    """
    if dtype is DataType.Text:
        return _TEXT_ENCODING
    try:
        return _NUMERIC_ENCODINGS[dtype]
    except KeyError:
        raise UnsupportedTypeError(f"Unknown data type: {dtype!r}") from None


def byte_width_of(dtype: DataType) -> int:
    """Return width of a single stored element in bytes.

    Text is stored as variable-length strings, so its width is the width of
    the reference to the string data.
    """
    return storage_encoding_of(dtype).itemsize


def is_text_dtype(dt: np.dtype) -> bool:
    """Return whether a numpy dtype holds strings (fixed, unicode or h5py vlen)."""
    if dt.kind in ("U", "S"):
        return True
    return dt.kind == "O" and h5py.check_string_dtype(dt) is not None


def data_type_of(dt) -> DataType:
    """Return the element type matching a numpy dtype.

    Raises:
        UnsupportedTypeError: for bool, complex, object and other kinds.
    """
    dt = np.dtype(dt)
    if is_text_dtype(dt):
        return DataType.Text
    if dt.kind in ("i", "u", "f"):
        ret = _BY_KIND.get((dt.kind, dt.itemsize))
        if ret is not None:
            return ret
    raise UnsupportedTypeError(f"Unsupported element dtype: {dt}")


@dataclass(frozen=True)
class CompoundType:
    """Fixed-width record type made of named fields of simple element types."""

    fields: Tuple[Tuple[str, DataType], ...]

    def __post_init__(self):
        if not self.fields:
            raise UnsupportedTypeError("Compound type needs at least one field!")
        names = [n for n, _ in self.fields]
        if len(set(names)) != len(names):
            raise UnsupportedTypeError(f"Duplicate field names: {names}")

    @classmethod
    def of(cls, fields: Union[Dict[str, DataType], Iterable[Tuple[str, DataType]]]):
        items = fields.items() if isinstance(fields, dict) else fields
        return cls(tuple((str(n), DataType(t)) for n, t in items))

    @classmethod
    def from_numpy(cls, dt) -> CompoundType:
        dt = np.dtype(dt)
        if dt.names is None:
            raise UnsupportedTypeError(f"Not a structured dtype: {dt}")
        fields = []
        for name in dt.names:
            fdt = dt.fields[name][0]
            if fdt.names is not None or fdt.subdtype is not None:
                raise UnsupportedTypeError(f"Nested field '{name}' is not supported")
            if fdt.kind == "O" and h5py.check_string_dtype(fdt) is None:
                # plain object fields only come from in-memory records with str
                fields.append((name, DataType.Text))
            else:
                fields.append((name, data_type_of(fdt)))
        return cls(tuple(fields))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(n for n, _ in self.fields)

    @property
    def text_fields(self) -> Tuple[str, ...]:
        return tuple(n for n, t in self.fields if t is DataType.Text)

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype([(n, storage_encoding_of(t)) for n, t in self.fields])

    @property
    def byte_width(self) -> int:
        return self.numpy_dtype.itemsize


ElementType = Union[DataType, CompoundType]
"""Anything that can be the element type of a stored value."""


def element_type_of(dt) -> ElementType:
    """Like `data_type_of`, but also accepts structured dtypes."""
    dt = np.dtype(dt)
    if dt.names is not None:
        return CompoundType.from_numpy(dt)
    return data_type_of(dt)


def encoding_of(etype: ElementType) -> np.dtype:
    """Return storage dtype for a simple or compound element type."""
    if isinstance(etype, CompoundType):
        return etype.numpy_dtype
    return storage_encoding_of(etype)
