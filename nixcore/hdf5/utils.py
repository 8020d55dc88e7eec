"""
Constants of the nixcore storage layout.

Provides the reserved names used to lay out entities inside an HDF5 file.
"""

from typing_extensions import Final

FORMAT_NAME: Final[str] = "nix"
"""Value of the `format` attribute on the root group of every store."""

FORMAT_VERSION: Final[tuple] = (1, 0, 0)
"""Version of the storage layout created by this package."""
# NOTE: bump it when something about the layout changes!

DATA_PATH: Final[str] = "data"
"""Root child group holding one group per block."""

METADATA_PATH: Final[str] = "metadata"
"""Root child group holding one group per metadata section."""

DATA_ARRAYS_GROUP: Final[str] = "data_arrays"
DATA_TAGS_GROUP: Final[str] = "data_tags"
PROPERTIES_GROUP: Final[str] = "properties"
REPRESENTATIONS_GROUP: Final[str] = "representations"

DIMENSIONS_GROUP: Final[str] = "dimensions"
"""Child group of a data array holding the numbered dimension descriptors."""

DIMENSION_TYPE_ATTR: Final[str] = "dimension_type"
"""Attribute storing the variant discriminator of a dimension descriptor."""

REFERENCES_DATASET: Final[str] = "references"
VALUES_DATASET: Final[str] = "values"

TEXT_ENCODING: Final[str] = "utf-8"

CHUNK_BASE: Final[int] = 16 * 1024
"""Multiplier in bytes for the chunk size guess."""

CHUNK_MIN: Final[int] = 8 * 1024
"""Lower bound in bytes of a guessed chunk."""

CHUNK_MAX: Final[int] = 1024 * 1024
"""Upper bound in bytes of a guessed chunk."""


def str_id(num: int) -> str:
    """Return the group name used for a numeric (1-based) id."""
    return str(num)
