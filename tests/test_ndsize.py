import pytest
from hypothesis import given
from hypothesis import strategies as st

from nixcore.errors import ShapeMismatchError
from nixcore.hdf5 import NDSize

shapes = st.lists(st.integers(min_value=1, max_value=6), min_size=0, max_size=4)


def test_strides_and_index():
    s = NDSize([2, 3, 4])
    assert s.rank == 3
    assert s.nelms == 24
    assert s.strides == (12, 4, 1)
    assert s.sub2index([1, 2, 3]) == 23
    assert s.sub2index([0, 0, 0]) == 0


def test_scalar_size():
    s = NDSize()
    assert s.rank == 0
    assert s.nelms == 1
    assert s.strides == ()
    assert s.sub2index([]) == 0


def test_sub2index_errors():
    s = NDSize([2, 3])
    with pytest.raises(ShapeMismatchError):
        s.sub2index([1])
    with pytest.raises(IndexError):
        s.sub2index([2, 0])
    with pytest.raises(IndexError):
        s.sub2index([0, -1])


def test_arithmetic():
    s = NDSize([2, 3])
    assert s + 1 == NDSize([3, 4])
    assert s - NDSize([1, 1]) == (1, 2)
    assert s.dot([1, 2]) == 8
    with pytest.raises(ShapeMismatchError):
        s + NDSize([1, 2, 3])
    with pytest.raises(ShapeMismatchError):
        s.dot([1])


def test_immutable_resize():
    s = NDSize([2, 3])
    t = s.resized(0, 5)
    assert s == [2, 3]
    assert t == [5, 3]
    assert hash(s) == hash(NDSize((2, 3)))


def test_negative_extent():
    with pytest.raises(ValueError):
        NDSize([1, -1])


@given(shapes)
def test_strides_enumerate_all_elements(shape):
    s = NDSize(shape)
    seen = set()

    def walk(prefix):
        if len(prefix) == s.rank:
            seen.add(s.sub2index(prefix))
            return
        for i in range(s[len(prefix)]):
            walk(prefix + [i])

    walk([])
    assert seen == set(range(s.nelms))
