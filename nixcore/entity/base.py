"""Base classes of all entities stored in a nixcore file."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Type, TypeVar
from uuid import uuid1

from ..hdf5.group import Group

T = TypeVar("T", bound="NamedEntity")


def create_id() -> str:
    """Return a fresh unique entity id."""
    return str(uuid1())


def now() -> datetime:
    return datetime.now(timezone.utc)


class Entity:
    """Something stored in its own group, identified by an id.

    Two entity objects are equal if they are of the same class and
    refer to the same storage group.
    """

    def __init__(self, group: Group, entity_id: str):
        self._group = group
        self._id = entity_id

    @property
    def id(self) -> str:
        return self._id

    @property
    def group(self) -> Group:
        """Group holding the data of this entity."""
        return self._group

    def __eq__(self, other) -> bool:
        if not isinstance(other, Entity) or type(self) is not type(other):
            return NotImplemented
        return self._group == other._group

    def __hash__(self) -> int:
        return hash((type(self), self._id))

    def _init_times(self):
        t = now().isoformat()
        self._group.set_attr("created_at", t)
        self._group.set_attr("updated_at", t)

    @property
    def created_at(self) -> datetime:
        return datetime.fromisoformat(self._group.get_attr("created_at"))

    @property
    def updated_at(self) -> datetime:
        return datetime.fromisoformat(self._group.get_attr("updated_at"))

    def force_updated_at(self):
        """Set modification time to the current time."""
        self._group.set_attr("updated_at", now().isoformat())


class NamedEntity(Entity):
    """Entity with a name, a type and an optional definition."""

    @classmethod
    def _create(cls: Type[T], parent: Group, name: str, type_: str, **kwargs) -> T:
        entity_id = create_id()
        ret = cls(parent.open_group(entity_id, True), entity_id, **kwargs)
        ret._init_times()
        ret._group.set_attr("name", name)
        ret._group.set_attr("type", type_)
        return ret

    @property
    def name(self) -> str:
        return self._group.get_attr("name")

    @property
    def type(self) -> str:
        return self._group.get_attr("type")

    @type.setter
    def type(self, value: str):
        self._group.set_attr("type", value)
        self.force_updated_at()

    @property
    def definition(self) -> Optional[str]:
        if not self._group.has_attr("definition"):
            return None
        return self._group.get_attr("definition")

    @definition.setter
    def definition(self, value: Optional[str]):
        if value is None:
            self._group.remove_attr("definition")
        else:
            self._group.set_attr("definition", value)
        self.force_updated_at()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, type={self.type!r}, id={self.id!r})"
