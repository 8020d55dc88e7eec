from datetime import datetime

import h5py
import numpy as np
import pytest
from pydantic import ValidationError

from nixcore import File
from nixcore.errors import NotFoundError, ReadOnlyError
from nixcore.file import FileHeader
from nixcore.hdf5.utils import FORMAT_NAME, FORMAT_VERSION


def test_new_file_header(nix_file):
    assert nix_file.format == FORMAT_NAME
    assert nix_file.version == FORMAT_VERSION
    assert isinstance(nix_file.created_at, datetime)
    assert nix_file.root.has_group("data")
    assert nix_file.root.has_group("metadata")

    before = nix_file.updated_at
    nix_file.force_updated_at()
    assert nix_file.updated_at >= before
    assert FileHeader.load(nix_file.root) == nix_file.header


def test_header_validation():
    with pytest.raises(ValidationError):
        FileHeader(format="hdf5", created_at=datetime.now(), updated_at=datetime.now())
    with pytest.raises(ValidationError):
        FileHeader(version=(2, 0, 0), created_at=datetime.now(), updated_at=datetime.now())


def test_blocks(nix_file):
    b = nix_file.create_block("session 1", "nix.session")
    assert nix_file.block_count() == 1
    assert nix_file.has_block(b.id)
    assert nix_file.get_block(b.id) == b
    assert nix_file.blocks() == [b]
    assert b.name == "session 1"
    assert b.type == "nix.session"
    b.type = "nix.recording"
    assert nix_file.get_block(b.id).type == "nix.recording"
    assert b.created_at <= b.updated_at

    assert nix_file.delete_block(b.id)
    assert not nix_file.delete_block(b.id)
    with pytest.raises(NotFoundError):
        nix_file.get_block(b.id)


def test_sections(nix_file):
    s = nix_file.create_section("subject", "odml.subject")
    assert nix_file.section_count() == 1
    assert nix_file.get_section(s.id).name == "subject"
    assert nix_file.sections() == [s]
    assert nix_file.delete_section(s.id)
    assert nix_file.section_count() == 0


def test_entity_identity(nix_file):
    a = nix_file.create_block("a", "t")
    b = nix_file.create_block("b", "t")
    assert a != b
    assert a.id != b.id
    assert len({a, b, nix_file.get_block(a.id)}) == 2


def test_reopen(tmp_nix_path):
    with File(tmp_nix_path, "w") as f:
        blk = f.create_block("session", "t")
        arr = blk.create_data_array("v", "t", data=np.arange(4.0))
        arr.append_sampled_dimension(0.5)
        tag = blk.create_data_tag("ev", "t", positions=arr)
        prop = f.create_section("s", "t").create_property("p")
        prop.add_value(3)
        ids = blk.id, arr.id, tag.id, prop.id
    assert not f.is_open

    with File(tmp_nix_path) as f:
        assert f.mode == "r"
        assert f.root.read_only
        blk = f.get_block(ids[0])
        arr = blk.get_data_array(ids[1])
        assert arr.get_data().tolist() == [0.0, 1.0, 2.0, 3.0]
        assert arr.get_dimension(1).sampling_interval == 0.5
        assert blk.get_data_tag(ids[2]).positions == arr
        assert f.sections()[0].get_property(ids[3]).value(0).value == 3

        with pytest.raises(ReadOnlyError):
            f.create_block("x", "t")
        with pytest.raises(ReadOnlyError):
            arr.unit = "mV"


def test_open_foreign_file(tmp_nix_path):
    with h5py.File(tmp_nix_path, "w") as f:
        f["x"] = 1
    with pytest.raises(ValueError):
        File(tmp_nix_path, "r")
    with pytest.raises(ValueError):
        File(tmp_nix_path, "a")


def test_wrap_open_h5file(h5file):
    f = File(h5file)
    assert f.mode == "r+"
    blk = f.create_block("b", "t")
    assert File(h5file).get_block(blk.id) == blk
