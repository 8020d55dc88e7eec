import numpy as np
import pytest

from nixcore.entity import LinkType
from nixcore.errors import DimensionMismatchError, NotFoundError


@pytest.fixture
def arrays(block):
    def make(name, shape):
        return block.create_data_array(name, "t", data=np.zeros(shape))

    return make


def test_positions_and_extents(block, arrays):
    pos = arrays("pos", (10,))
    ext = arrays("ext", (10,))
    tag = block.create_data_tag("events", "nix.events", positions=pos)
    assert tag.has_positions() and not tag.has_extents()
    assert tag.positions == pos
    with pytest.raises(NotFoundError):
        tag.extents

    tag.extents = ext.id
    assert tag.extents == ext
    assert tag.check_positions_and_extents()

    tag.extents = None
    assert not tag.has_extents()


def test_mismatching_extents_are_rejected(block, arrays):
    pos = arrays("pos", (10,))
    short = arrays("short", (7,))
    tag = block.create_data_tag("events", "t", positions=pos)
    with pytest.raises(DimensionMismatchError):
        tag.extents = short
    assert not tag.has_extents()

    wide = arrays("wide", (10, 2))
    tag.positions = None
    tag.extents = short
    with pytest.raises(DimensionMismatchError):
        tag.positions = wide
    assert not tag.has_positions()


def test_link_unknown_array(block):
    tag = block.create_data_tag("events", "t")
    with pytest.raises(NotFoundError):
        tag.positions = "no-such-id"
    assert not tag.has_positions()


def test_references(block, arrays):
    a, b = arrays("a", (3,)), arrays("b", (4,))
    tag = block.create_data_tag("events", "t")
    assert tag.reference_count() == 0

    tag.add_reference(a)
    tag.add_reference(a)
    assert tag.reference_count() == 1
    tag.add_reference(b.id)
    assert tag.references == [a, b]
    assert tag.get_reference(b.id) == b
    with pytest.raises(NotFoundError):
        tag.add_reference("no-such-id")

    assert tag.remove_reference(a)
    assert not tag.remove_reference(a)
    with pytest.raises(NotFoundError):
        tag.get_reference(a.id)

    tag.references = [b, a, b]
    assert tag.reference_ids == [b.id, a.id]
    with pytest.raises(NotFoundError):
        tag.references = [a, "no-such-id"]
    assert tag.reference_ids == [b.id, a.id]


def test_deleted_references_are_skipped(block, arrays):
    a, b = arrays("a", (3,)), arrays("b", (4,))
    tag = block.create_data_tag("events", "t")
    tag.references = [a, b]
    block.delete_data_array(a.id)
    assert tag.references == [b]
    assert tag.reference_count() == 2


def test_block_tags(block):
    tag = block.create_data_tag("events", "t")
    assert block.has_data_tag(tag.id)
    assert block.data_tag_count() == 1
    assert block.data_tags() == [tag]
    assert block.get_data_tag(tag.id).name == "events"
    assert block.delete_data_tag(tag.id)
    with pytest.raises(NotFoundError):
        block.get_data_tag(tag.id)


def test_representations(block, arrays):
    a, b = arrays("a", (3,)), arrays("b", (4,))
    tag = block.create_data_tag("events", "t")
    assert tag.representation_count() == 0
    assert tag.representations() == []

    rep = tag.create_representation(a)
    assert rep.link_type is LinkType.Tagged
    assert rep.data == a
    other = tag.create_representation(b.id, LinkType.Indexed)
    assert tag.representation_count() == 2
    assert tag.has_representation(rep.id)
    assert tag.get_representation(rep.id) == rep
    assert {r.id for r in tag.representations()} == {rep.id, other.id}
    assert tag.get_representation(0) in (rep, other)
    with pytest.raises(IndexError):
        tag.get_representation(2)

    other.link_type = "untagged"
    assert tag.get_representation(other.id).link_type is LinkType.Untagged
    other.data = a
    assert other.data == a
    with pytest.raises(NotFoundError):
        other.data = "no-such-id"

    assert tag.remove_representation(rep.id)
    assert not tag.remove_representation(rep.id)
    with pytest.raises(NotFoundError):
        tag.get_representation(rep.id)
    assert tag.representations() == [other]


def test_representation_of_unknown_array(block, arrays):
    tag = block.create_data_tag("events", "t")
    with pytest.raises(NotFoundError):
        tag.create_representation("no-such-id")
    assert tag.representation_count() == 0

    a = arrays("a", (3,))
    rep = tag.create_representation(a, LinkType.Untagged)
    block.delete_data_array(a.id)
    with pytest.raises(NotFoundError):
        rep.data
