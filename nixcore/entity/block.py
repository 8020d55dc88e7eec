"""Blocks group data arrays and the tags referring to them."""
from __future__ import annotations

from typing import Any, List, Optional

from ..errors import NotFoundError
from ..hdf5.group import Group
from ..hdf5.utils import DATA_ARRAYS_GROUP, DATA_TAGS_GROUP
from .base import NamedEntity
from .data_array import DataArray
from .data_tag import DataTag


class Block(NamedEntity):
    """Top-level collection of data arrays and data tags."""

    def __init__(self, group: Group, entity_id: str):
        super().__init__(group, entity_id)
        create = not group.read_only
        self._arrays = group.open_group(DATA_ARRAYS_GROUP, create=create)
        self._tags = group.open_group(DATA_TAGS_GROUP, create=create)

    # data arrays

    def create_data_array(
        self, name: str, type_: str, data: Optional[Any] = None
    ) -> DataArray:
        ret = DataArray._create(self._arrays, name, type_)
        if data is not None:
            ret.set_data(data)
        self.force_updated_at()
        return ret

    def has_data_array(self, arr_id: str) -> bool:
        return self._arrays.has_group(arr_id)

    def get_data_array(self, arr_id: str) -> DataArray:
        if not self.has_data_array(arr_id):
            raise NotFoundError(f"No data array with id {arr_id}")
        return DataArray(self._arrays.open_group(arr_id, False), arr_id)

    def data_array_count(self) -> int:
        return self._arrays.object_count()

    def data_arrays(self) -> List[DataArray]:
        return [self.get_data_array(n) for n in self._arrays.object_names()]

    def delete_data_array(self, arr_id: str) -> bool:
        ret = self._arrays.remove_group(arr_id)
        if ret:
            self.force_updated_at()
        return ret

    # data tags

    def create_data_tag(
        self, name: str, type_: str, positions: Optional[DataArray] = None
    ) -> DataTag:
        ret = DataTag._create(self._tags, name, type_, block=self)
        if positions is not None:
            ret.positions = positions
        self.force_updated_at()
        return ret

    def has_data_tag(self, tag_id: str) -> bool:
        return self._tags.has_group(tag_id)

    def get_data_tag(self, tag_id: str) -> DataTag:
        if not self.has_data_tag(tag_id):
            raise NotFoundError(f"No data tag with id {tag_id}")
        return DataTag(self._tags.open_group(tag_id, False), tag_id, self)

    def data_tag_count(self) -> int:
        return self._tags.object_count()

    def data_tags(self) -> List[DataTag]:
        return [self.get_data_tag(n) for n in self._tags.object_names()]

    def delete_data_tag(self, tag_id: str) -> bool:
        ret = self._tags.remove_group(tag_id)
        if ret:
            self.force_updated_at()
        return ret
