"""Wrapper for HDF5 groups exposing the typed attribute/dataset/child interface."""
from __future__ import annotations

import logging
from typing import Any, List

import h5py
import wrapt

from ..errors import (
    AlreadyExistsError,
    NotFoundError,
    ReadOnlyError,
    ShapeMismatchError,
    UnsupportedTypeError,
)
from .dataset import DataSet
from .datatype import ElementType, element_type_of, encoding_of
from .marshal import describe, pack, unpack
from .ndsize import NDSize

logger = logging.getLogger(__name__)


def _attr_shape(aid) -> NDSize:
    # shape is None for attributes with empty (null) dataspace
    return NDSize(aid.shape) if aid.shape is not None else NDSize()


def _same_type(dt, etype: ElementType) -> bool:
    try:
        return element_type_of(dt) == etype
    except UnsupportedTypeError:
        return False


class Group(wrapt.ObjectProxy):
    """Node in the persistent tree (wraps a `h5py.Group`).

    A group has attributes (small typed values that can be overwritten),
    datasets (large, growable typed arrays) and child groups.

    Handles are cheap: copying a handle or opening the same child twice yields
    handles referring to the same underlying node, and two handles compare
    equal iff they refer to the same node.

    A handle can be restricted to be read-only (regardless of the mode the
    file was opened in). The restriction is inherited by all child groups and
    datasets opened through it and cannot be lifted again.
    """

    __wrapped__: h5py.Group

    def __init__(self, h5group: Any, *, read_only: bool = False):
        if isinstance(h5group, Group):
            read_only = read_only or h5group.read_only
            h5group = h5group.__wrapped__
        if not isinstance(h5group, h5py.Group):
            raise TypeError(f"Expected a h5py.Group, got: {type(h5group).__name__}")
        super().__init__(h5group)
        self._self_read_only: bool = read_only

    def __copy__(self) -> Group:
        return Group(self.__wrapped__, read_only=self._self_read_only)

    def __deepcopy__(self, memo) -> Group:
        # a handle never owns the node, so a deep copy is just another handle
        return self.__copy__()

    def __repr__(self) -> str:
        return repr(self.__wrapped__)

    @property
    def read_only(self) -> bool:
        return self._self_read_only

    def restrict(self, read_only: bool = True) -> Group:
        """Mark this handle as read-only (cannot be undone)."""
        self._self_read_only = self._self_read_only or read_only
        return self

    def _guard_read_only(self, method: str):
        if self._self_read_only:
            raise ReadOnlyError(f"Cannot use {method}, the group is marked as read_only!")

    # attributes

    def has_attr(self, name: str) -> bool:
        return name in self.__wrapped__.attrs

    def remove_attr(self, name: str) -> bool:
        """Remove attribute, return whether it existed."""
        self._guard_read_only("remove_attr")
        if not self.has_attr(name):
            return False
        del self.__wrapped__.attrs[name]
        return True

    def set_attr(self, name: str, value: Any):
        """Create or overwrite an attribute.

        An existing attribute is overwritten in place if the new value has the
        same type and shape. If only rank agrees, the attribute is replaced.

        Raises:
            ShapeMismatchError: if the existing attribute has a different rank.
            UnsupportedTypeError: if the value cannot be stored.
        """
        self._guard_read_only("set_attr")
        etype, shape, data = pack(value)
        attrs = self.__wrapped__.attrs
        if name in attrs:
            aid = attrs.get_id(name)
            old_shape = _attr_shape(aid)
            if old_shape.rank != shape.rank:
                msg = f"Attribute '{name}' has rank {old_shape.rank}, value has rank {shape.rank}"
                raise ShapeMismatchError(msg)
            if old_shape == shape and _same_type(aid.dtype, etype):
                attrs.modify(name, data)
                return
        attrs.create(name, data, dtype=encoding_of(etype))

    def get_attr(self, name: str, into: Any = None) -> Any:
        """Return the value of an attribute.

        If `into` is a list or a numpy array, it is refilled in place and returned.

        Raises:
            NotFoundError: if there is no such attribute.
        """
        attrs = self.__wrapped__.attrs
        if name not in attrs:
            raise NotFoundError(f"No attribute '{name}' at {self.name}")
        etype = element_type_of(attrs.get_id(name).dtype)
        return unpack(attrs[name], etype, into=into)

    # generic children

    def has_object(self, path: str) -> bool:
        return path in self.__wrapped__

    def object_count(self) -> int:
        return len(self.__wrapped__)

    def object_names(self) -> List[str]:
        """Return names of all children (alphabetical order)."""
        return list(self.__wrapped__.keys())

    def object_name(self, index: int) -> str:
        """Return name of the child at given position (alphabetical order)."""
        names = list(self.__wrapped__.keys())
        if not (0 <= index < len(names)):
            raise IndexError(f"Object index {index} out of range at {self.name}")
        return names[index]

    # datasets

    def has_data(self, name: str) -> bool:
        return self.__wrapped__.get(name, getclass=True) is h5py.Dataset

    def open_data(self, name: str) -> DataSet:
        if not self.has_data(name):
            raise NotFoundError(f"No dataset '{name}' at {self.name}")
        return DataSet(self.__wrapped__[name], read_only=self._self_read_only)

    def remove_data(self, name: str) -> bool:
        """Remove dataset, return whether it existed."""
        self._guard_read_only("remove_data")
        if not self.has_data(name):
            return False
        del self.__wrapped__[name]
        return True

    def set_data(self, name: str, value: Any) -> DataSet:
        """Create or overwrite a growable dataset with given value.

        A new dataset is unbounded along every axis and chunked one element per axis.
        An existing dataset is extended to the shape of the value (it cannot shrink).

        Raises:
            UnsupportedTypeError: if the value type differs from the existing dataset.
            InvalidResizeError: if the value is smaller than the existing dataset.
        """
        self._guard_read_only("set_data")
        etype, shape = describe(value)
        if self.has_data(name):
            ds = self.open_data(name)
            ds.require_type(etype)
            ds.extend(shape)
        else:
            ds = DataSet.create(self, name, etype, shape, chunks=(1,) * shape.rank)
        ds.write(value)
        return ds

    def get_data(self, name: str, into: Any = None) -> Any:
        """Return the whole content of a dataset (see `get_attr` about `into`)."""
        return self.open_data(name).read(into=into)

    def replace_data(self, name: str, value: Any) -> DataSet:
        """Drop a dataset (if it exists) and store the value freshly."""
        self.remove_data(name)
        return self.set_data(name, value)

    # child groups

    def has_group(self, name: str) -> bool:
        return self.__wrapped__.get(name, getclass=True) is h5py.Group

    def open_group(self, name: str, create: bool = True) -> Group:
        """Open a child group, creating it if missing and `create` is set.

        Raises:
            NotFoundError: if the group does not exist and `create` is not set.
        """
        if self.has_group(name):
            return Group(self.__wrapped__[name], read_only=self._self_read_only)
        if not create:
            raise NotFoundError(f"No group '{name}' at {self.name}")
        self._guard_read_only("open_group")
        logger.debug("create group %s in %s", name, self.name)
        grp = self.__wrapped__.create_group(name)
        return Group(grp, read_only=self._self_read_only)

    def remove_group(self, name: str) -> bool:
        """Remove child group with everything in it, return whether it existed."""
        self._guard_read_only("remove_group")
        if not self.has_group(name):
            return False
        logger.debug("remove group %s from %s", name, self.name)
        del self.__wrapped__[name]
        return True

    def rename_group(self, old_name: str, new_name: str):
        """Rename a child group.

        Raises:
            NotFoundError: if `old_name` does not exist.
            AlreadyExistsError: if `new_name` is already taken.
        """
        self._guard_read_only("rename_group")
        if not self.has_group(old_name):
            raise NotFoundError(f"No group '{old_name}' at {self.name}")
        if self.has_object(new_name):
            raise AlreadyExistsError(f"Name '{new_name}' already taken at {self.name}")
        logger.debug("rename group %s to %s in %s", old_name, new_name, self.name)
        self.__wrapped__.move(old_name, new_name)
