"""HDF5 persistence core for annotated scientific data.

The `nixcore.hdf5` subpackage maps typed in-memory values onto a hierarchical
HDF5 store (groups, attributes, growable datasets, dimension descriptors and
reference lists). The entity classes in `nixcore.entity` and the `File` class
are thin domain wrappers built on top of it.
"""
import logging

from .file import File

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["File"]
