"""Domain entities built on top of the storage layer."""

from .base import Entity, NamedEntity
from .block import Block
from .data_array import DataArray
from .data_tag import DataTag
from .representation import LinkType, Representation
from .section import Property, Section, Value

__all__ = [
    "Block",
    "DataArray",
    "DataTag",
    "Entity",
    "LinkType",
    "NamedEntity",
    "Property",
    "Representation",
    "Section",
    "Value",
]
