"""Accumulating validation of stored entities.

Unlike the storage layer, which fails on the first error, the checks here
collect all problems found in a file into a `Result` of errors and warnings.
"""

from .checks import (
    get_dimensions_units,
    validate_block,
    validate_data_array,
    validate_data_tag,
    validate_file,
)
from .result import Message, Result

__all__ = [
    "Message",
    "Result",
    "get_dimensions_units",
    "validate_block",
    "validate_data_array",
    "validate_data_tag",
    "validate_file",
]
