"""Generic HDF5 storage layer.

| nixcore        | h5py         |
| -------------- | ------------ |
| `Group`        | [h5py.Group](https://docs.h5py.org/en/latest/high/group.html) |
| `DataSet`      | [h5py.Dataset](https://docs.h5py.org/en/latest/high/dataset.html) |

Values are translated between native Python/numpy objects and storage by
`nixcore.hdf5.marshal`, which describes any supported value as a triple of
element type, shape and row-major element sequence.
"""

from .dataset import DataSet
from .datatype import CompoundType, DataType
from .dimension import (
    Dimension,
    DimensionRegistry,
    DimensionType,
    RangeDimension,
    SampledDimension,
    SetDimension,
)
from .group import Group
from .ndbuffer import NDBuffer
from .ndsize import NDSize
from .reference_list import ReferenceList

__all__ = [
    "CompoundType",
    "DataSet",
    "DataType",
    "Dimension",
    "DimensionRegistry",
    "DimensionType",
    "Group",
    "NDBuffer",
    "NDSize",
    "RangeDimension",
    "ReferenceList",
    "SampledDimension",
    "SetDimension",
]
