"""Data arrays: typed N-dimensional payload with per-axis dimension descriptors."""
from __future__ import annotations

from typing import Any, List, Optional, Sequence

from ..hdf5.datatype import ElementType
from ..hdf5.dimension import (
    Dimension,
    DimensionRegistry,
    DimensionType,
    RangeDimension,
    SampledDimension,
    SetDimension,
)
from ..hdf5.group import Group
from ..hdf5.ndsize import NDSize, ShapeLike
from ..hdf5.utils import DIMENSIONS_GROUP
from .base import NamedEntity

DATA_DATASET = "data"
POLYNOM_DATASET = "polynom_coefficients"


class DataArray(NamedEntity):
    """Array of measured or computed values.

    Values can be calibrated with a polynomial (see `apply_polynomial`),
    every axis can be described by a dimension descriptor.
    """

    def __init__(self, group: Group, entity_id: str):
        super().__init__(group, entity_id)
        dim_group = group.open_group(DIMENSIONS_GROUP, create=not group.read_only)
        self._dimensions = DimensionRegistry(dim_group)

    # simple attributes

    def _get_opt(self, name: str):
        return self.group.get_attr(name) if self.group.has_attr(name) else None

    def _set_opt(self, name: str, value):
        if value is None:
            self.group.remove_attr(name)
        else:
            self.group.set_attr(name, value)
        self.force_updated_at()

    @property
    def label(self) -> Optional[str]:
        return self._get_opt("label")

    @label.setter
    def label(self, value: Optional[str]):
        self._set_opt("label", value)

    @property
    def unit(self) -> Optional[str]:
        return self._get_opt("unit")

    @unit.setter
    def unit(self, value: Optional[str]):
        self._set_opt("unit", value)

    @property
    def expansion_origin(self) -> Optional[float]:
        value = self._get_opt("expansion_origin")
        return None if value is None else float(value)

    @expansion_origin.setter
    def expansion_origin(self, value: Optional[float]):
        self._set_opt("expansion_origin", None if value is None else float(value))

    @property
    def polynom_coefficients(self) -> List[float]:
        if not self.group.has_data(POLYNOM_DATASET):
            return []
        return self.group.get_data(POLYNOM_DATASET, into=[])

    @polynom_coefficients.setter
    def polynom_coefficients(self, coefficients: Sequence[float]):
        coeffs = [float(c) for c in coefficients]
        if not coeffs:
            self.group.remove_data(POLYNOM_DATASET)
        elif len(coeffs) < len(self.polynom_coefficients):
            self.group.replace_data(POLYNOM_DATASET, coeffs)
        else:
            self.group.set_data(POLYNOM_DATASET, coeffs)
        self.force_updated_at()

    @staticmethod
    def apply_polynomial(coefficients: Sequence[float], origin: float, value):
        """Evaluate sum(c_i * (value - origin)^i), works element-wise on arrays."""
        ret = 0.0
        term = 1.0
        for c in coefficients:
            ret = ret + c * term
            term = term * (value - origin)
        return ret

    def calibrated(self, value):
        """Apply polynomial and expansion origin of this array to a raw value."""
        coeffs = self.polynom_coefficients
        if not coeffs:
            return value
        return self.apply_polynomial(coeffs, self.expansion_origin or 0.0, value)

    # payload

    def has_data(self) -> bool:
        return self.group.has_data(DATA_DATASET)

    def set_data(self, value: Any):
        """Store the payload (an existing payload can only grow)."""
        self.group.set_data(DATA_DATASET, value)
        self.force_updated_at()

    def get_data(self, into: Any = None) -> Any:
        return self.group.get_data(DATA_DATASET, into=into)

    @property
    def data_extent(self) -> NDSize:
        """Shape of the payload (rank 0 if there is none)."""
        if not self.has_data():
            return NDSize()
        return self.group.open_data(DATA_DATASET).size()

    @data_extent.setter
    def data_extent(self, shape: ShapeLike):
        self.group.open_data(DATA_DATASET).extend(shape)
        self.force_updated_at()

    @property
    def data_type(self) -> Optional[ElementType]:
        if not self.has_data():
            return None
        return self.group.open_data(DATA_DATASET).data_type

    # dimensions

    @property
    def dimension_registry(self) -> DimensionRegistry:
        return self._dimensions

    def dimension_count(self) -> int:
        return self._dimensions.count()

    def get_dimension(self, dim_id: int) -> Dimension:
        return self._dimensions.get(dim_id)

    def dimensions(self) -> List[Dimension]:
        return self._dimensions.dimensions()

    def create_dimension(self, dim_id: int, dim_type: DimensionType) -> Dimension:
        """Append a dimension descriptor (the id is reassigned if not the next free one)."""
        ret = self._dimensions.create(dim_id, dim_type)
        self.force_updated_at()
        return ret

    def append_set_dimension(self, labels: Optional[Sequence[str]] = None) -> SetDimension:
        ret = self._dimensions.create_set()
        if labels:
            ret.labels = labels
        self.force_updated_at()
        return ret

    def append_range_dimension(self, ticks: Sequence[float]) -> RangeDimension:
        ret = self._dimensions.create_range(ticks)
        self.force_updated_at()
        return ret

    def append_sampled_dimension(self, sampling_interval: float) -> SampledDimension:
        ret = self._dimensions.create_sampled(sampling_interval)
        self.force_updated_at()
        return ret

    def remove_dimension(self, dim_id: int) -> bool:
        ret = self._dimensions.remove(dim_id)
        if ret:
            self.force_updated_at()
        return ret
