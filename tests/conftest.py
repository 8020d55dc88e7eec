import secrets
import shutil
from pathlib import Path

import h5py
import pytest

from nixcore import File
from nixcore.hdf5 import Group


@pytest.fixture(scope="session")
def nix_dir(tmpdir_factory):
    """Create a fresh temporary directory for files created in the tests."""
    return tmpdir_factory.mktemp("nixcore_tests")


@pytest.fixture
def tmp_nix_path_factory(nix_dir):
    """Return a file name generator to be used for creating files.

    All files will be cleaned up after completing the test.
    """
    names = []

    def fresh_name() -> Path:
        name = secrets.token_hex(4)
        names.append(name)
        return Path(nix_dir / f"{name}.nix")

    yield fresh_name

    for name in names:
        for path in Path(nix_dir).glob(f"{name}*"):
            if path.is_file():
                path.unlink()
            elif path.is_dir():
                shutil.rmtree(path)


@pytest.fixture
def tmp_nix_path(tmp_nix_path_factory):
    return tmp_nix_path_factory()


@pytest.fixture
def h5file_factory():
    """Return factory for in-memory HDF5 files (closed after the test)."""
    files = []

    def fresh_file() -> h5py.File:
        name = f"mem_{secrets.token_hex(4)}.h5"
        f = h5py.File(name, "w", driver="core", backing_store=False)
        files.append(f)
        return f

    yield fresh_file
    for f in files:
        if f:
            f.close()


@pytest.fixture
def h5file(h5file_factory):
    return h5file_factory()


@pytest.fixture
def group(h5file) -> Group:
    """Writable group in an in-memory file."""
    return Group(h5file).open_group("test", create=True)


@pytest.fixture
def nix_file(h5file):
    """Fresh nixcore file in memory."""
    return File(h5file)


@pytest.fixture
def block(nix_file):
    return nix_file.create_block("session", "recording")
