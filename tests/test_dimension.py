import numpy as np
import pytest

from nixcore.errors import InvalidDimensionTypeError, NotFoundError
from nixcore.hdf5 import (
    DimensionRegistry,
    DimensionType,
    RangeDimension,
    SampledDimension,
    SetDimension,
)
from nixcore.hdf5.utils import DIMENSION_TYPE_ATTR


@pytest.fixture
def registry(group):
    return DimensionRegistry(group.open_group("dimensions"))


def test_dimension_type_from_str():
    assert DimensionType.from_str("set") is DimensionType.Set
    assert DimensionType.from_str("sample") is DimensionType.Sample
    with pytest.raises(InvalidDimensionTypeError):
        DimensionType.from_str("bogus")


def test_create_and_get(registry):
    assert registry.count() == 0
    d1 = registry.create(1, DimensionType.Set)
    d2 = registry.create_range([0.0, 1.0, 4.0])
    d3 = registry.create_sampled(0.5)
    assert (d1.id, d2.id, d3.id) == (1, 2, 3)
    assert len(registry) == 3

    assert isinstance(registry.get(1), SetDimension)
    assert isinstance(registry.get(2), RangeDimension)
    assert isinstance(registry.get(3), SampledDimension)
    assert [d.dimension_type for d in registry] == list(DimensionType)
    assert registry.get(3).index == 2
    with pytest.raises(NotFoundError):
        registry.get(4)
    with pytest.raises(NotFoundError):
        registry.get(0)


def test_ids_are_reassigned(registry):
    d = registry.create(5, DimensionType.Sample)
    assert d.id == 1
    assert registry.has(1) and not registry.has(5)


def test_remove_renumbers(registry):
    registry.create_set()
    registry.create_range([1.0, 2.0])
    registry.create_sampled(2.0)

    assert registry.remove(2)
    assert registry.count() == 2
    assert isinstance(registry.get(2), SampledDimension)
    assert registry.get(2).sampling_interval == 2.0
    assert not registry.remove(3)

    d = registry.create(1, DimensionType.Range)
    assert d.id == 3
    assert isinstance(registry.get(3), RangeDimension)


def test_invalid_stored_type(registry):
    registry.create_set()
    registry.group.open_group("1", False).set_attr(DIMENSION_TYPE_ATTR, "weird")
    with pytest.raises(InvalidDimensionTypeError):
        registry.get(1)
    registry.group.open_group("1", False).remove_attr(DIMENSION_TYPE_ATTR)
    with pytest.raises(InvalidDimensionTypeError):
        registry.get(1)


def test_set_dimension(registry):
    d = registry.create_set()
    assert d.labels == []
    d.labels = ["a", "b", "c"]
    d.labels = ["x"]
    assert registry.get(1).labels == ["x"]
    d.labels = []
    assert d.labels == []
    assert d.unit is None


def test_range_dimension(registry):
    d = registry.create_range([1.0, 2.0, 4.0])
    assert d.ticks.tolist() == [1.0, 2.0, 4.0]
    assert d.tick_at(2) == 4.0
    assert d.index_of(3.0) == 1
    assert d.index_of(4.0) == 2
    assert d.index_of(100.0) == 2
    with pytest.raises(IndexError):
        d.index_of(0.5)
    with pytest.raises(IndexError):
        d.tick_at(3)
    with pytest.raises(ValueError):
        d.ticks = [1.0, 1.0]
    d.ticks = [5.0]
    assert d.ticks.tolist() == [5.0]

    d.label = "time"
    d.unit = "s"
    assert (d.label, d.unit) == ("time", "s")
    d.unit = None
    assert d.unit is None


def test_sampled_dimension(registry):
    with pytest.raises(ValueError):
        registry.create_sampled(0)
    assert registry.count() == 0

    d = registry.create_sampled(0.5)
    assert d.offset == 0.0
    d.offset = 1.0
    assert d.position_at(4) == 3.0
    assert d.index_of(3.1) == 4
    assert d.axis(3, start=1).tolist() == [1.5, 2.0, 2.5]
    with pytest.raises(IndexError):
        d.index_of(0.0)
    with pytest.raises(ValueError):
        d.sampling_interval = -1
    assert np.isclose(d.sampling_interval, 0.5)
