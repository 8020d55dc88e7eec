"""Metadata sections holding properties with lists of annotated values."""
from __future__ import annotations

from typing import Any, List, Optional, Union

import numpy as np
from pydantic import BaseModel

from ..errors import NotFoundError, ShapeMismatchError, UnsupportedTypeError
from ..hdf5.dataset import DataSet
from ..hdf5.datatype import CompoundType, DataType
from ..hdf5.group import Group
from ..hdf5.marshal import describe
from ..hdf5.utils import PROPERTIES_GROUP, VALUES_DATASET
from .base import NamedEntity

Scalar = Union[int, float, str]


class Value(BaseModel):
    """A single property value with its annotations."""

    value: Scalar
    uncertainty: float = 0.0
    reference: str = ""
    filename: str = ""
    encoder: str = ""
    checksum: str = ""


_ANNOTATION_FIELDS = [
    ("uncertainty", DataType.Float64),
    ("reference", DataType.Text),
    ("filename", DataType.Text),
    ("encoder", DataType.Text),
    ("checksum", DataType.Text),
]


def value_record_type(value_type: DataType) -> CompoundType:
    """Return the record type used to store values of given element type."""
    return CompoundType.of([("value", value_type)] + _ANNOTATION_FIELDS)


def _native(x):
    return x.item() if isinstance(x, np.generic) else x


def _record(val: Value, rtype: CompoundType) -> np.ndarray:
    return np.array(
        (
            val.value,
            val.uncertainty,
            val.reference,
            val.filename,
            val.encoder,
            val.checksum,
        ),
        dtype=rtype.numpy_dtype,
    )


class Property(NamedEntity):
    """Named metadata property with a list of values of one element type.

    Values are appended one record at a time to a growable dataset.
    """

    def _get_opt(self, name: str) -> Optional[str]:
        return self.group.get_attr(name) if self.group.has_attr(name) else None

    def _set_opt(self, name: str, value: Optional[str]):
        if value is None:
            self.group.remove_attr(name)
        else:
            self.group.set_attr(name, value)
        self.force_updated_at()

    @property
    def mapping(self) -> Optional[str]:
        return self._get_opt("mapping")

    @mapping.setter
    def mapping(self, value: Optional[str]):
        self._set_opt("mapping", value)

    @property
    def unit(self) -> Optional[str]:
        return self._get_opt("unit")

    @unit.setter
    def unit(self, value: Optional[str]):
        self._set_opt("unit", value)

    @property
    def link(self) -> Optional[str]:
        """Id of another property this one links to."""
        return self._get_opt("link")

    @link.setter
    def link(self, value: Optional[str]):
        self._set_opt("link", value)

    @property
    def include(self) -> Optional[str]:
        """Location of an external definition included by this property."""
        return self._get_opt("include")

    @include.setter
    def include(self, value: Optional[str]):
        self._set_opt("include", value)

    @property
    def data_type(self) -> Optional[str]:
        """Declared data type name (free text, independent of `value_type`)."""
        return self._get_opt("data_type")

    @data_type.setter
    def data_type(self, value: Optional[str]):
        self._set_opt("data_type", value)

    # values

    def _values(self) -> Optional[DataSet]:
        if not self.group.has_data(VALUES_DATASET):
            return None
        return self.group.open_data(VALUES_DATASET)

    @property
    def value_type(self) -> Optional[DataType]:
        """Element type of the stored values (None if there are none)."""
        ds = self._values()
        if ds is None:
            return None
        return dict(ds.data_type.fields)["value"]  # type: ignore

    def value_count(self) -> int:
        ds = self._values()
        return 0 if ds is None else ds.size()[0]

    def _new_values(self, rtype: CompoundType, count: int) -> DataSet:
        chunks = DataSet.guess_chunking((1,), rtype)
        return DataSet.create(self.group, VALUES_DATASET, rtype, (count,), chunks=chunks)

    def add_value(self, value: Union[Value, Scalar], **annotations: Any) -> int:
        """Append a value (with optional annotations), return its index.

        The element type is taken from the given value, so numpy scalars keep
        their width (`np.float32(1)` is stored as Float32).

        Raises:
            ShapeMismatchError: if the value is not a scalar.
            UnsupportedTypeError: if the value type differs from the stored values.
        """
        raw = value.value if isinstance(value, Value) else value
        vtype, shape = describe(raw)
        if shape.rank != 0:
            raise ShapeMismatchError("Property values must be scalars!")
        if isinstance(value, Value):
            val = value
        else:
            val = Value(value=_native(raw), **annotations)
        rtype = value_record_type(vtype)

        ds = self._values()
        if ds is None:
            ds = self._new_values(rtype, 0)
        elif ds.data_type != rtype:
            msg = f"Property holds values of type {self.value_type}, got {vtype}"
            raise UnsupportedTypeError(msg)
        ret = ds.append(_record(val, rtype))
        self.force_updated_at()
        return ret

    def _to_value(self, row) -> Value:
        return Value(**{k: _native(row[k]) for k in Value.model_fields})

    def value(self, index: int) -> Value:
        """Return value at given index.

        Raises:
            IndexError: if index is out of bounds.
        """
        if not (0 <= index < self.value_count()):
            raise IndexError(f"Value index {index} out of bounds")
        rows = self._values().read_at((1,), (index,))  # type: ignore
        return self._to_value(rows[0])

    def values(self) -> List[Value]:
        ds = self._values()
        if ds is None:
            return []
        return [self._to_value(row) for row in ds.read()]

    def remove_value(self, index: int):
        """Remove the value at given index, later values move up by one.

        Raises:
            IndexError: if index is out of bounds.
        """
        if not (0 <= index < self.value_count()):
            raise IndexError(f"Value index {index} out of bounds")
        rtype: CompoundType = self._values().data_type  # type: ignore
        kept = self.values()
        del kept[index]
        self.group.remove_data(VALUES_DATASET)
        if kept:
            records = np.concatenate([_record(v, rtype).reshape(1) for v in kept])
            self._new_values(rtype, len(kept)).write(records)
        self.force_updated_at()

    def remove_values(self):
        self.group.remove_data(VALUES_DATASET)
        self.force_updated_at()


class Section(NamedEntity):
    """Named collection of metadata properties."""

    def __init__(self, group: Group, entity_id: str):
        super().__init__(group, entity_id)
        self._props = group.open_group(PROPERTIES_GROUP, create=not group.read_only)

    def create_property(self, name: str, type_: str = "property") -> Property:
        ret = Property._create(self._props, name, type_)
        self.force_updated_at()
        return ret

    def has_property(self, prop_id: str) -> bool:
        return self._props.has_group(prop_id)

    def get_property(self, prop_id: str) -> Property:
        if not self.has_property(prop_id):
            raise NotFoundError(f"No property with id {prop_id}")
        return Property(self._props.open_group(prop_id, False), prop_id)

    def property_count(self) -> int:
        return self._props.object_count()

    def properties(self) -> List[Property]:
        return [self.get_property(n) for n in self._props.object_names()]

    def has_property_by_name(self, name: str) -> bool:
        return any(p.name == name for p in self.properties())

    def get_property_by_name(self, name: str) -> Property:
        for p in self.properties():
            if p.name == name:
                return p
        raise NotFoundError(f"No property named '{name}'")

    def delete_property(self, prop_id: str) -> bool:
        ret = self._props.remove_group(prop_id)
        if ret:
            self.force_updated_at()
        return ret
