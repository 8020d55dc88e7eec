"""Data tags: regions in data arrays given by position and extent arrays."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from ..errors import NotFoundError
from ..hdf5.checks import check_shapes_compatible, require_shapes_compatible
from ..hdf5.group import Group
from ..hdf5.reference_list import ReferenceList
from ..hdf5.utils import REFERENCES_DATASET, REPRESENTATIONS_GROUP
from .base import NamedEntity, create_id
from .data_array import DataArray
from .representation import LinkType, Representation

if TYPE_CHECKING:
    from .block import Block

ArrayOrId = Union[DataArray, str]

POSITIONS_ATTR = "positions"
EXTENTS_ATTR = "extents"


def _array_id(arr: ArrayOrId) -> str:
    return arr.id if isinstance(arr, DataArray) else str(arr)


class DataTag(NamedEntity):
    """Tags regions of referenced data arrays.

    The region start points are stored in the `positions` array, their sizes
    in the `extents` array. Both are data arrays of the same block and must
    agree in shape whenever both are set.
    """

    def __init__(self, group: Group, entity_id: str, block: Block):
        super().__init__(group, entity_id)
        self._block = block
        self._references = ReferenceList(group, REFERENCES_DATASET)
        self._reps = group.open_group(REPRESENTATIONS_GROUP, create=not group.read_only)

    @property
    def block(self) -> Block:
        return self._block

    # linked arrays

    def _has_link(self, attr: str) -> bool:
        return self.group.has_attr(attr) and bool(self.group.get_attr(attr))

    def _linked(self, attr: str) -> DataArray:
        if not self._has_link(attr):
            raise NotFoundError(f"No {attr} set for data tag {self.id}")
        arr_id = self.group.get_attr(attr)
        if not self._block.has_data_array(arr_id):
            raise NotFoundError(f"Unable to find data array with id {arr_id}")
        return self._block.get_data_array(arr_id)

    def _bind(self, attr: str, other_attr: str, target: Optional[ArrayOrId]):
        if target is None:
            self.group.remove_attr(attr)
            self.force_updated_at()
            return
        arr_id = _array_id(target)
        if not self._block.has_data_array(arr_id):
            raise NotFoundError(f"Cannot set {attr}, no data array with id {arr_id}")
        if self._has_link(other_attr):
            # check before writing anything, so a failed bind changes nothing
            require_shapes_compatible(
                self._block.get_data_array(arr_id),
                self._linked(other_attr),
                f"{attr} and {other_attr}",
            )
        self.group.set_attr(attr, arr_id)
        self.force_updated_at()

    def has_positions(self) -> bool:
        return self._has_link(POSITIONS_ATTR)

    @property
    def positions(self) -> DataArray:
        return self._linked(POSITIONS_ATTR)

    @positions.setter
    def positions(self, target: Optional[ArrayOrId]):
        self._bind(POSITIONS_ATTR, EXTENTS_ATTR, target)

    def has_extents(self) -> bool:
        return self._has_link(EXTENTS_ATTR)

    @property
    def extents(self) -> DataArray:
        return self._linked(EXTENTS_ATTR)

    @extents.setter
    def extents(self, target: Optional[ArrayOrId]):
        self._bind(EXTENTS_ATTR, POSITIONS_ATTR, target)

    def check_positions_and_extents(self) -> bool:
        """Return whether positions and extents agree (True if one is missing)."""
        if not (self.has_positions() and self.has_extents()):
            return True
        return check_shapes_compatible(self.positions, self.extents)

    # references

    def has_reference(self, ref: ArrayOrId) -> bool:
        return self._references.has(_array_id(ref))

    def reference_count(self) -> int:
        return self._references.count()

    def get_reference(self, ref_id: str) -> DataArray:
        if not self.has_reference(ref_id):
            raise NotFoundError(f"No reference with id {ref_id}")
        return self._block.get_data_array(ref_id)

    def add_reference(self, ref: ArrayOrId):
        ref_id = _array_id(ref)
        if not self._block.has_data_array(ref_id):
            raise NotFoundError(f"Cannot add reference, no data array with id {ref_id}")
        self._references.add(ref_id)
        self.force_updated_at()

    def remove_reference(self, ref: ArrayOrId) -> bool:
        ret = self._references.remove(_array_id(ref))
        if ret:
            self.force_updated_at()
        return ret

    @property
    def reference_ids(self) -> List[str]:
        return self._references.get()

    @property
    def references(self) -> List[DataArray]:
        """Referenced data arrays (ids of deleted arrays are skipped)."""
        return [
            self._block.get_data_array(ref_id)
            for ref_id in self._references.get()
            if self._block.has_data_array(ref_id)
        ]

    @references.setter
    def references(self, refs: Sequence[ArrayOrId]):
        ids = [_array_id(r) for r in refs]
        missing = [i for i in ids if not self._block.has_data_array(i)]
        if missing:
            raise NotFoundError(f"Cannot set references, unknown data arrays: {missing}")
        self._references.set(ids)
        self.force_updated_at()

    # representations

    def has_representation(self, rep_id: str) -> bool:
        return self._reps.has_group(rep_id)

    def representation_count(self) -> int:
        return self._reps.object_count()

    def get_representation(self, rep: Union[str, int]) -> Representation:
        """Return representation by id or by position.

        Raises:
            NotFoundError: if there is no representation with given id.
            IndexError: if the position is out of bounds.
        """
        if isinstance(rep, int):
            rep = self._reps.object_name(rep)
        elif not self.has_representation(rep):
            raise NotFoundError(f"No representation with id {rep}")
        return Representation(self._reps.open_group(rep, False), rep, self._block)

    def representations(self) -> List[Representation]:
        return [self.get_representation(n) for n in self._reps.object_names()]

    def create_representation(
        self, data: ArrayOrId, link_type: LinkType = LinkType.Tagged
    ) -> Representation:
        """Link a data array of the block as representation of this tag.

        Raises:
            NotFoundError: if the block has no such data array.
        """
        arr_id = _array_id(data)
        if not self._block.has_data_array(arr_id):
            raise NotFoundError(f"Cannot link data, no data array with id {arr_id}")
        ret = Representation._create(self._reps, create_id(), self._block, arr_id, link_type)
        self.force_updated_at()
        return ret

    def remove_representation(self, rep_id: str) -> bool:
        ret = self._reps.remove_group(rep_id)
        if ret:
            self.force_updated_at()
        return ret
