"""Entry point: a nixcore file with its blocks and metadata sections."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Tuple, TypeVar, Union

import h5py
from pydantic import BaseModel, field_validator
from typing_extensions import Literal

from .entity.base import NamedEntity, now
from .entity.block import Block
from .entity.section import Section
from .errors import NotFoundError
from .hdf5.group import Group
from .hdf5.utils import DATA_PATH, FORMAT_NAME, FORMAT_VERSION, METADATA_PATH

logger = logging.getLogger(__name__)

OpenMode = Literal["r", "r+", "a", "w", "w-", "x"]
"""Modes that can be passed when opening a file (same as for `h5py.File`)."""

E = TypeVar("E", bound=NamedEntity)


class FileHeader(BaseModel):
    """Format information stored in the attributes of the root group."""

    format: str = FORMAT_NAME
    version: Tuple[int, int, int] = FORMAT_VERSION
    created_at: datetime
    updated_at: datetime

    @field_validator("format")
    @classmethod
    def check_format(cls, value: str) -> str:
        if value != FORMAT_NAME:
            raise ValueError(f"Unknown file format: '{value}'")
        return value

    @field_validator("version")
    @classmethod
    def check_version(cls, value: Tuple[int, int, int]) -> Tuple[int, int, int]:
        if value[0] != FORMAT_VERSION[0]:
            raise ValueError(f"Incompatible format version: {value}")
        return value

    @classmethod
    def create(cls) -> FileHeader:
        t = now()
        return cls(created_at=t, updated_at=t)

    @classmethod
    def load(cls, root: Group) -> FileHeader:
        for attr in ("format", "version", "created_at", "updated_at"):
            if not root.has_attr(attr):
                raise ValueError(f"{root.file.filename}: it doesn't look like a nix file!")
        return cls(
            format=root.get_attr("format"),
            version=tuple(int(x) for x in root.get_attr("version")),
            created_at=root.get_attr("created_at"),
            updated_at=root.get_attr("updated_at"),
        )

    def save(self, root: Group):
        root.set_attr("format", self.format)
        root.set_attr("version", list(self.version))
        root.set_attr("created_at", self.created_at.isoformat())
        root.set_attr("updated_at", self.updated_at.isoformat())


class File:
    """A nixcore file (wraps a `h5py.File`).

    Accepts either an already opened `h5py.File` or the arguments to open one
    (extra keyword arguments are passed on to `h5py.File`).

    A new (empty) file opened in a writable mode is initialized. Opening
    anything else that lacks a valid header fails with a `ValueError`.
    """

    def __init__(
        self, name_or_obj: Union[str, Path, h5py.File], mode: OpenMode = "r", **kwargs
    ):
        if isinstance(name_or_obj, h5py.File):
            self._h5file = name_or_obj
        else:
            self._h5file = h5py.File(name_or_obj, mode, **kwargs)
        self._root = Group(self._h5file, read_only=self._h5file.mode == "r")

        try:
            if self._is_fresh():
                logger.debug("initialize new file %s", self._h5file.filename)
                self._header = FileHeader.create()
                self._header.save(self._root)
            else:
                self._header = FileHeader.load(self._root)
        except Exception:
            if not isinstance(name_or_obj, h5py.File):
                self._h5file.close()
            raise

        writable = not self._root.read_only
        self._data = self._root.open_group(DATA_PATH, create=writable)
        self._metadata = self._root.open_group(METADATA_PATH, create=writable)

    def _is_fresh(self) -> bool:
        return (
            not self._root.read_only
            and self._root.object_count() == 0
            and not self._root.has_attr("format")
        )

    # context manager and lifecycle

    def __enter__(self) -> File:
        return self

    def __exit__(self, ex_type, ex_value, ex_traceback):
        self.close()

    def close(self):
        if self._h5file:
            self._h5file.close()

    def flush(self):
        self._h5file.flush()

    @property
    def is_open(self) -> bool:
        return bool(self._h5file)

    @property
    def root(self) -> Group:
        return self._root

    @property
    def header(self) -> FileHeader:
        return self._header

    @property
    def mode(self) -> str:
        return self._h5file.mode

    @property
    def format(self) -> str:
        return self._header.format

    @property
    def version(self) -> Tuple[int, int, int]:
        return self._header.version

    @property
    def created_at(self) -> datetime:
        return self._header.created_at

    @property
    def updated_at(self) -> datetime:
        return self._header.updated_at

    def force_updated_at(self):
        self._header.updated_at = now()
        self._root.set_attr("updated_at", self._header.updated_at.isoformat())

    # shared helpers for the two collections

    @staticmethod
    def _get(grp: Group, cls: Callable[[Group, str], E], ent_id: str, what: str) -> E:
        if not grp.has_group(ent_id):
            raise NotFoundError(f"No {what} with id {ent_id}")
        return cls(grp.open_group(ent_id, False), ent_id)

    @staticmethod
    def _all(grp: Group, cls: Callable[[Group, str], E]) -> List[E]:
        return [cls(grp.open_group(n, False), n) for n in grp.object_names()]

    def _delete(self, grp: Group, ent_id: str) -> bool:
        ret = grp.remove_group(ent_id)
        if ret:
            self.force_updated_at()
        return ret

    # blocks

    def create_block(self, name: str, type_: str) -> Block:
        ret = Block._create(self._data, name, type_)
        self.force_updated_at()
        return ret

    def has_block(self, block_id: str) -> bool:
        return self._data.has_group(block_id)

    def get_block(self, block_id: str) -> Block:
        return self._get(self._data, Block, block_id, "block")

    def block_count(self) -> int:
        return self._data.object_count()

    def blocks(self) -> List[Block]:
        return self._all(self._data, Block)

    def delete_block(self, block_id: str) -> bool:
        return self._delete(self._data, block_id)

    # metadata sections

    def create_section(self, name: str, type_: str) -> Section:
        ret = Section._create(self._metadata, name, type_)
        self.force_updated_at()
        return ret

    def has_section(self, section_id: str) -> bool:
        return self._metadata.has_group(section_id)

    def get_section(self, section_id: str) -> Section:
        return self._get(self._metadata, Section, section_id, "section")

    def section_count(self) -> int:
        return self._metadata.object_count()

    def sections(self) -> List[Section]:
        return self._all(self._metadata, Section)

    def delete_section(self, section_id: str) -> bool:
        return self._delete(self._metadata, section_id)

    def __repr__(self) -> str:
        return f"File({self._h5file.filename!r}, mode={self.mode!r})"


__all__ = ["File", "FileHeader", "OpenMode"]
