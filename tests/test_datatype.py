import h5py
import numpy as np
import pytest

from nixcore.errors import UnsupportedTypeError
from nixcore.hdf5.datatype import (
    CompoundType,
    DataType,
    byte_width_of,
    data_type_of,
    element_type_of,
    storage_encoding_of,
)

NUMERIC = [t for t in DataType if t.is_numeric]


@pytest.mark.parametrize("dtype", NUMERIC)
def test_numeric_encoding_roundtrip(dtype):
    enc = storage_encoding_of(dtype)
    assert enc.str[0] in ("<", "|")
    assert data_type_of(enc) is dtype
    assert byte_width_of(dtype) == enc.itemsize == dtype.byte_width


def test_byte_widths():
    assert byte_width_of(DataType.Int8) == 1
    assert byte_width_of(DataType.UInt16) == 2
    assert byte_width_of(DataType.Float32) == 4
    assert byte_width_of(DataType.Int64) == 8
    # text is stored by reference
    assert byte_width_of(DataType.Text) == np.dtype(object).itemsize


def test_text_encoding():
    enc = storage_encoding_of(DataType.Text)
    assert h5py.check_string_dtype(enc).encoding == "utf-8"
    assert data_type_of(enc) is DataType.Text
    assert data_type_of(np.dtype("U5")) is DataType.Text
    assert data_type_of(np.dtype("S5")) is DataType.Text


def test_big_endian_is_recognized():
    assert data_type_of(np.dtype(">i4")) is DataType.Int32
    assert data_type_of(np.dtype(">f8")) is DataType.Float64


@pytest.mark.parametrize("dt", [bool, np.complex128, object, "M8[s]"])
def test_unsupported_dtypes(dt):
    with pytest.raises(UnsupportedTypeError):
        data_type_of(dt)


def test_compound_type():
    ct = CompoundType.of({"x": DataType.Float64, "name": DataType.Text})
    assert ct.names == ("x", "name")
    assert ct.text_fields == ("name",)
    assert ct.byte_width == 8 + np.dtype(object).itemsize

    assert CompoundType.from_numpy(ct.numpy_dtype) == ct
    assert element_type_of(ct.numpy_dtype) == ct
    assert element_type_of(np.int16) is DataType.Int16


def test_compound_type_invalid():
    with pytest.raises(UnsupportedTypeError):
        CompoundType(())
    with pytest.raises(UnsupportedTypeError):
        CompoundType.of([("a", DataType.Int8), ("a", DataType.Int16)])
    nested = np.dtype([("a", [("b", np.int8)])])
    with pytest.raises(UnsupportedTypeError):
        CompoundType.from_numpy(nested)
    with pytest.raises(UnsupportedTypeError):
        CompoundType.from_numpy(np.int8)
