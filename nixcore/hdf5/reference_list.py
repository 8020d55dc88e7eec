"""Ordered set of entity ids stored as a text dataset."""
from __future__ import annotations

from typing import Iterable, List

from .group import Group


def _unique(ids: Iterable[str]) -> List[str]:
    seen = set()
    ret = []
    for x in map(str, ids):
        if x not in seen:
            seen.add(x)
            ret.append(x)
    return ret


class ReferenceList:
    """List of ids of referenced entities without duplicates.

    The ids are stored in insertion order in a dataset of the parent group.
    An empty list is represented by the absence of the dataset.
    """

    def __init__(self, group: Group, name: str):
        self._group = group
        self._name = name

    @property
    def group(self) -> Group:
        return self._group

    @property
    def name(self) -> str:
        return self._name

    def get(self) -> List[str]:
        """Return all ids in insertion order."""
        if not self._group.has_data(self._name):
            return []
        return self._group.get_data(self._name, into=[])

    def __iter__(self):
        return iter(self.get())

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, ref_id: str) -> bool:
        return self.has(ref_id)

    def count(self) -> int:
        if not self._group.has_data(self._name):
            return 0
        return self._group.open_data(self._name).size()[0]

    def has(self, ref_id: str) -> bool:
        return str(ref_id) in self.get()

    def add(self, ref_id: str):
        """Append an id, unless it is already contained."""
        ref_id = str(ref_id)
        if not self._group.has_data(self._name):
            self._group.set_data(self._name, [ref_id])
        elif not self.has(ref_id):
            self._group.open_data(self._name).append(ref_id)

    def remove(self, ref_id: str) -> bool:
        """Remove an id, return whether it was contained."""
        ids = self.get()
        if str(ref_id) not in ids:
            return False
        ids.remove(str(ref_id))
        self.set(ids)
        return True

    def set(self, ids: Iterable[str]):
        """Replace all ids (duplicates are dropped, first occurrence wins)."""
        ids = _unique(ids)
        if not ids:
            self._group.remove_data(self._name)
        else:
            self._group.replace_data(self._name, ids)
