"""Representations: links from a data tag to data arrays showing its regions."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Union

from ..errors import NotFoundError
from ..hdf5.group import Group
from .base import Entity
from .data_array import DataArray

if TYPE_CHECKING:
    from .block import Block


class LinkType(str, Enum):
    """How the linked data relates to the regions of the tag."""

    Tagged = "tagged"
    Untagged = "untagged"
    Indexed = "indexed"


class Representation(Entity):
    """A data array of the block together with the kind of its link to a tag."""

    def __init__(self, group: Group, entity_id: str, block: Block):
        super().__init__(group, entity_id)
        self._block = block

    @classmethod
    def _create(
        cls,
        parent: Group,
        entity_id: str,
        block: Block,
        data: Union[DataArray, str],
        link_type: LinkType,
    ) -> Representation:
        ret = cls(parent.open_group(entity_id, True), entity_id, block)
        ret._init_times()
        ret.link_type = link_type
        ret.data = data
        return ret

    @property
    def link_type(self) -> LinkType:
        return LinkType(self.group.get_attr("link_type"))

    @link_type.setter
    def link_type(self, value: LinkType):
        self.group.set_attr("link_type", LinkType(value).value)
        self.force_updated_at()

    @property
    def data(self) -> DataArray:
        """The linked data array.

        Raises:
            NotFoundError: if the array was deleted from the block.
        """
        arr_id = self.group.get_attr("data")
        if not self._block.has_data_array(arr_id):
            raise NotFoundError(f"Unable to find data array with id {arr_id}")
        return self._block.get_data_array(arr_id)

    @data.setter
    def data(self, value: Union[DataArray, str]):
        arr_id = value.id if isinstance(value, DataArray) else str(value)
        if not self._block.has_data_array(arr_id):
            raise NotFoundError(f"Cannot link data, no data array with id {arr_id}")
        self.group.set_attr("data", arr_id)
        self.force_updated_at()

    def __repr__(self) -> str:
        return f"Representation(id={self.id!r}, link_type={self.link_type.value!r})"
