import numpy as np
import pytest

from nixcore.errors import ShapeMismatchError, UnsupportedTypeError
from nixcore.hdf5 import CompoundType, DataType, NDSize
from nixcore.hdf5.marshal import describe, linearize, materialize, pack, unpack


@pytest.mark.parametrize(
    "value,dtype,shape",
    [
        (5, DataType.Int64, []),
        (1.5, DataType.Float64, []),
        ("text", DataType.Text, []),
        (np.int16(3), DataType.Int16, []),
        (np.float32(2), DataType.Float32, []),
        (np.zeros((2, 3), dtype=np.uint8), DataType.UInt8, [2, 3]),
        ([[1.0, 2.0], [3.0, 4.0]], DataType.Float64, [2, 2]),
        (["a", "b", "c"], DataType.Text, [3]),
    ],
)
def test_describe(value, dtype, shape):
    assert describe(value) == (dtype, NDSize(shape))


@pytest.mark.parametrize("value", [True, np.bool_(False), 1j, None, {"a": 1}])
def test_describe_unsupported(value):
    with pytest.raises(UnsupportedTypeError):
        describe(value)


def test_describe_ragged():
    with pytest.raises(UnsupportedTypeError):
        describe([[1, 2], [3]])


@pytest.mark.parametrize(
    "value",
    [
        [1, "a"],
        [["a", "b"], [1.5, 2.5]],
        ("x", np.int8(1)),
        [True, 1],
        [np.arange(2), ["a", "b"]],
    ],
)
def test_describe_mixed(value):
    with pytest.raises(UnsupportedTypeError):
        describe(value)
    with pytest.raises(UnsupportedTypeError):
        pack(value)


def test_describe_record():
    rec = np.zeros(2, dtype=[("x", "<f8"), ("n", "<i4")])
    etype, shape = describe(rec)
    assert etype == CompoundType.of({"x": DataType.Float64, "n": DataType.Int32})
    assert shape == [2]


def test_linearize_row_major():
    arr = np.arange(6, dtype=np.int32).reshape(2, 3)
    assert list(linearize(arr)) == [0, 1, 2, 3, 4, 5]
    assert list(linearize(arr.T)) == [0, 3, 1, 4, 2, 5]
    assert list(linearize("x")) == ["x"]


def test_pack_storage_encoding():
    etype, shape, data = pack([[1, 2], [3, 4]])
    assert shape == [2, 2]
    assert data.shape == (2, 2)
    assert data.dtype == etype.numpy_dtype


def test_materialize_in_chunks():
    buf = materialize([2, 3], DataType.Int32)
    assert buf.strides == (3, 1)
    assert buf.write(range(4)) == 4
    assert buf.write(np.array([4, 5])) == 6
    assert buf[1, 2] == 5
    arr = buf.finish()
    assert arr.dtype == np.dtype("<i4")
    assert arr.tolist() == [[0, 1, 2], [3, 4, 5]]
    assert buf.detached
    with pytest.raises(ValueError):
        buf.finish()
    with pytest.raises(ValueError):
        buf.write([1])


def test_materialize_overflow_and_incomplete():
    buf = materialize([2], DataType.Float64)
    with pytest.raises(ShapeMismatchError):
        buf.write([1.0, 2.0, 3.0])
    buf.write([1.0])
    with pytest.raises(ShapeMismatchError):
        buf.finish()


def test_materialize_text_rejects_numbers():
    buf = materialize([2], DataType.Text)
    with pytest.raises(UnsupportedTypeError):
        buf.write([1, 2])


def test_materialize_resize():
    buf = materialize([1], DataType.Text)
    buf.resize([2, 2])
    assert buf.rank == 2
    buf.write(["a", "b", "c", "d"])
    assert buf.finish().tolist() == [["a", "b"], ["c", "d"]]


def test_unpack_into_list():
    dst = ["old"]
    ret = unpack(np.array([1, 2, 3]), into=dst)
    assert ret is dst
    assert dst == [1, 2, 3]


def test_unpack_into_array():
    dst = np.zeros(1, dtype="<f8")
    ret = unpack(np.array([[1.0, 2.0]]), DataType.Float64, into=dst)
    assert ret is dst
    assert dst.shape == (1, 2)


def test_unpack_scalar():
    assert unpack(np.array(b"abc", dtype=object), DataType.Text) == "abc"
    assert unpack(np.array(3, dtype="<i2")) == 3


def test_record_text_fields_decoded():
    etype = CompoundType.of([("x", DataType.Int8), ("s", DataType.Text)])
    raw = np.array([(1, b"one"), (2, b"two")], dtype=[("x", "<i1"), ("s", object)])
    ret = unpack(raw, etype)
    assert ret["x"].tolist() == [1, 2]
    assert ret["s"].tolist() == ["one", "two"]


def test_unpack_into_array_casts():
    dst = np.zeros(1, dtype=np.int32)
    ret = unpack(np.array([1.5, 2.5, 3.5]), DataType.Float64, into=dst)
    assert ret is dst
    assert dst.dtype == np.int32
    assert dst.tolist() == [1, 2, 3]


def test_unpack_into_array_of_other_kind():
    with pytest.raises(UnsupportedTypeError):
        unpack(np.array(["a"], dtype=object), DataType.Text, into=np.zeros(1))
    with pytest.raises(UnsupportedTypeError):
        unpack(np.array([1.0]), DataType.Float64, into=np.array([""], dtype=object))


def test_buffer_numpy_subscripts():
    buf = materialize([3], DataType.Int8)
    buf.write([4, 5, 6])
    assert buf[np.int64(2)] == 6
    assert buf[(np.int32(1),)] == 5
