"""
Dimension descriptors of array entities.

Every axis of an array can be described by one of three kinds of dimensions:

* `SetDimension`: axis positions are (optionally labeled) categories,
* `RangeDimension`: axis positions are given by explicit, ascending ticks,
* `SampledDimension`: axis positions follow a regular sampling interval.

Each descriptor lives in its own group named by its 1-based id, below a
common parent group. The kind is recorded in a discriminator attribute and
is fixed at creation time.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Iterator, List, Optional, Sequence, Type, Union

import numpy as np

from ..errors import InvalidDimensionTypeError, NotFoundError
from .group import Group
from .utils import DIMENSION_TYPE_ATTR, str_id

logger = logging.getLogger(__name__)


class DimensionType(str, Enum):
    """Discriminator values stored with each dimension descriptor."""

    Set = "set"
    Range = "range"
    Sample = "sample"

    @classmethod
    def from_str(cls, value: str) -> DimensionType:
        try:
            return cls(value)
        except ValueError:
            msg = f"Invalid dimension type: '{value}'"
            raise InvalidDimensionTypeError(msg) from None


def _opt_attr(group: Group, name: str):
    return group.get_attr(name) if group.has_attr(name) else None


def _set_opt_attr(group: Group, name: str, value):
    if value is None:
        group.remove_attr(name)
    else:
        group.set_attr(name, value)


@dataclass
class _DimensionBase:
    group: Group
    """Group holding the descriptor."""

    id: int
    """1-based index of the described axis."""

    dimension_type: ClassVar[DimensionType]

    def _init_type(self):
        self.group.set_attr(DIMENSION_TYPE_ATTR, self.dimension_type.value)

    @property
    def index(self) -> int:
        """0-based index of the described axis."""
        return self.id - 1


class _LabeledUnitMixin:
    group: Group

    @property
    def label(self) -> Optional[str]:
        return _opt_attr(self.group, "label")

    @label.setter
    def label(self, value: Optional[str]):
        _set_opt_attr(self.group, "label", value)

    @property
    def unit(self) -> Optional[str]:
        return _opt_attr(self.group, "unit")

    @unit.setter
    def unit(self, value: Optional[str]):
        _set_opt_attr(self.group, "unit", value)


@dataclass
class SetDimension(_DimensionBase):
    dimension_type: ClassVar[DimensionType] = DimensionType.Set

    @property
    def labels(self) -> List[str]:
        if not self.group.has_data("labels"):
            return []
        return self.group.get_data("labels", into=[])

    @labels.setter
    def labels(self, labels: Sequence[str]):
        labels = [str(x) for x in labels]
        if not labels:
            self.group.remove_data("labels")
        else:
            self.group.replace_data("labels", labels)

    @property
    def unit(self) -> None:
        """Set dimensions are unitless."""
        return None


@dataclass
class RangeDimension(_LabeledUnitMixin, _DimensionBase):
    dimension_type: ClassVar[DimensionType] = DimensionType.Range

    @property
    def ticks(self) -> np.ndarray:
        if not self.group.has_data("ticks"):
            return np.empty(0, dtype=np.float64)
        return self.group.get_data("ticks")

    @ticks.setter
    def ticks(self, ticks: Sequence[float]):
        arr = np.asarray(ticks, dtype=np.float64).reshape(-1)
        if np.any(np.diff(arr) <= 0):
            raise ValueError("Ticks must be strictly ascending!")
        self.group.replace_data("ticks", arr)

    def tick_at(self, index: int) -> float:
        ticks = self.ticks
        if not (0 <= index < len(ticks)):
            raise IndexError(f"Tick index {index} out of range")
        return float(ticks[index])

    def index_of(self, position: float) -> int:
        """Return index of the last tick not greater than given position."""
        ticks = self.ticks
        if len(ticks) == 0 or position < ticks[0]:
            raise IndexError(f"Position {position} is before the first tick")
        return int(np.searchsorted(ticks, position, side="right")) - 1


@dataclass
class SampledDimension(_LabeledUnitMixin, _DimensionBase):
    dimension_type: ClassVar[DimensionType] = DimensionType.Sample

    @property
    def sampling_interval(self) -> float:
        return float(self.group.get_attr("sampling_interval"))

    @sampling_interval.setter
    def sampling_interval(self, value: float):
        if not value > 0:
            raise ValueError("Sampling interval must be positive!")
        self.group.set_attr("sampling_interval", float(value))

    @property
    def offset(self) -> float:
        value = _opt_attr(self.group, "offset")
        return 0.0 if value is None else float(value)

    @offset.setter
    def offset(self, value: Optional[float]):
        _set_opt_attr(self.group, "offset", None if value is None else float(value))

    def position_at(self, index: int) -> float:
        return self.offset + index * self.sampling_interval

    def index_of(self, position: float) -> int:
        """Return index of the sample closest to given position."""
        idx = round((position - self.offset) / self.sampling_interval)
        if idx < 0:
            raise IndexError(f"Position {position} is before the first sample")
        return int(idx)

    def axis(self, count: int, start: int = 0) -> np.ndarray:
        """Return the positions of `count` samples starting at index `start`."""
        return self.offset + np.arange(start, start + count) * self.sampling_interval


Dimension = Union[SetDimension, RangeDimension, SampledDimension]
"""Any dimension descriptor."""

_VARIANTS: Dict[DimensionType, Type[_DimensionBase]] = {
    DimensionType.Set: SetDimension,
    DimensionType.Range: RangeDimension,
    DimensionType.Sample: SampledDimension,
}


def dimension_from_group(group: Group, dim_id: int) -> Dimension:
    """Instantiate descriptor class matching the stored discriminator.

    Raises:
        InvalidDimensionTypeError: if the discriminator is missing or unknown.
    """
    if not group.has_attr(DIMENSION_TYPE_ATTR):
        raise InvalidDimensionTypeError(f"Dimension {dim_id} has no type attribute")
    dim_type = DimensionType.from_str(str(group.get_attr(DIMENSION_TYPE_ATTR)))
    return _VARIANTS[dim_type](group, dim_id)  # type: ignore


class DimensionRegistry:
    """Numbered dimension descriptors below a parent group.

    Ids are always contiguous (1..count). New descriptors can only be appended,
    removing a descriptor renumbers all following ones.
    """

    def __init__(self, group: Group):
        self._group = group

    @property
    def group(self) -> Group:
        return self._group

    def count(self) -> int:
        return self._group.object_count()

    def __len__(self) -> int:
        return self.count()

    def has(self, dim_id: int) -> bool:
        return 1 <= dim_id <= self.count() and self._group.has_group(str_id(dim_id))

    def get(self, dim_id: int) -> Dimension:
        if not self.has(dim_id):
            raise NotFoundError(f"No dimension with id {dim_id}")
        return dimension_from_group(self._group.open_group(str_id(dim_id), False), dim_id)

    def dimensions(self) -> List[Dimension]:
        return [self.get(i) for i in range(1, self.count() + 1)]

    def __iter__(self) -> Iterator[Dimension]:
        return iter(self.dimensions())

    def create(self, requested_id: int, dim_type: DimensionType) -> Dimension:
        """Append a new descriptor of given type.

        Ids are never reused or skipped: the descriptor always gets id `count + 1`,
        whatever id was requested.
        """
        dim_type = DimensionType(dim_type)
        dim_id = self.count() + 1
        if requested_id != dim_id:
            logger.debug("dimension id %s reassigned to %s", requested_id, dim_id)
        name = str_id(dim_id)
        self._group.remove_group(name)  # leftover from a broken store
        dim = _VARIANTS[dim_type](self._group.open_group(name, True), dim_id)
        dim._init_type()
        return dim  # type: ignore

    def create_set(self) -> SetDimension:
        return self.create(self.count() + 1, DimensionType.Set)  # type: ignore

    def create_range(self, ticks: Sequence[float]) -> RangeDimension:
        dim = self.create(self.count() + 1, DimensionType.Range)
        dim.ticks = ticks  # type: ignore
        return dim  # type: ignore

    def create_sampled(self, sampling_interval: float) -> SampledDimension:
        if not sampling_interval > 0:
            raise ValueError("Sampling interval must be positive!")
        dim = self.create(self.count() + 1, DimensionType.Sample)
        dim.sampling_interval = sampling_interval  # type: ignore
        return dim  # type: ignore

    def remove(self, dim_id: int) -> bool:
        """Remove a descriptor and renumber the following ones.

        Returns False if there is no descriptor with given id.
        """
        count = self.count()
        if not self.has(dim_id):
            return False
        self._group.remove_group(str_id(dim_id))
        for old_id in range(dim_id + 1, count + 1):
            self._group.rename_group(str_id(old_id), str_id(old_id - 1))
        if dim_id < count:
            logger.debug("dimensions %s..%s renumbered", dim_id + 1, count)
        return True
