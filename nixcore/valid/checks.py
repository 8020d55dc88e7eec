"""Checks collecting problems of entities into validation results."""
from __future__ import annotations

from typing import List, Optional

from ..entity.block import Block
from ..entity.data_array import DataArray
from ..entity.data_tag import DataTag
from ..file import File
from ..hdf5.dimension import RangeDimension, SetDimension
from .result import Message, Result


def get_dimensions_units(data_array: DataArray) -> List[Optional[str]]:
    """Return the unit of every dimension of the array (None for set dimensions)."""
    return [dim.unit for dim in data_array.dimensions()]


def validate_data_array(data_array: DataArray) -> Result:
    ret = Result()
    eid = data_array.id

    if not data_array.has_data():
        ret = ret.add_warning(Message(id=eid, msg="data array has no data"))
        return ret

    rank = data_array.data_extent.rank
    dim_count = data_array.dimension_count()
    if dim_count != rank:
        msg = f"data has rank {rank}, but {dim_count} dimensions are defined"
        ret = ret.add_error(Message(id=eid, msg=msg))

    extent = data_array.data_extent
    for dim in data_array.dimensions():
        if dim.index >= rank:
            continue
        if isinstance(dim, SetDimension):
            labels = dim.labels
            if labels and len(labels) != extent[dim.index]:
                msg = f"dimension {dim.id} has {len(labels)} labels for {extent[dim.index]} entries"
                ret = ret.add_error(Message(id=eid, msg=msg))
        elif isinstance(dim, RangeDimension):
            ticks = dim.ticks
            if len(ticks) != extent[dim.index]:
                msg = f"dimension {dim.id} has {len(ticks)} ticks for {extent[dim.index]} entries"
                ret = ret.add_error(Message(id=eid, msg=msg))

    if data_array.unit is None:
        ret = ret.add_warning(Message(id=eid, msg="data array has no unit"))
    if data_array.expansion_origin is not None and not data_array.polynom_coefficients:
        msg = "expansion origin is set, but there are no polynom coefficients"
        ret = ret.add_warning(Message(id=eid, msg=msg))
    return ret


def _missing_link(data_tag: DataTag, attr: str) -> Optional[Message]:
    arr_id = data_tag.group.get_attr(attr)
    if data_tag.block.has_data_array(arr_id):
        return None
    return Message(id=data_tag.id, msg=f"{attr} refer to missing data array {arr_id}")


def validate_data_tag(data_tag: DataTag) -> Result:
    ret = Result()
    eid = data_tag.id
    block = data_tag.block

    links_ok = True
    if not data_tag.has_positions():
        ret = ret.add_error(Message(id=eid, msg="data tag has no positions"))
        links_ok = False
    for attr in ("positions", "extents"):
        if not data_tag.group.has_attr(attr):
            continue
        err = _missing_link(data_tag, attr)
        if err is not None:
            ret = ret.add_error(err)
            links_ok = False
    if links_ok and not data_tag.check_positions_and_extents():
        msg = "dimensionality of positions and extents does not match"
        ret = ret.add_error(Message(id=eid, msg=msg))

    for ref_id in data_tag.reference_ids:
        if not block.has_data_array(ref_id):
            msg = f"reference {ref_id} refers to a missing data array"
            ret = ret.add_warning(Message(id=eid, msg=msg))
    for rep in data_tag.representations():
        arr_id = rep.group.get_attr("data")
        if not block.has_data_array(arr_id):
            msg = f"representation {rep.id} refers to a missing data array {arr_id}"
            ret = ret.add_error(Message(id=eid, msg=msg))
    return ret


def validate_block(block: Block) -> Result:
    ret = Result()
    for arr in block.data_arrays():
        ret = ret.concat(validate_data_array(arr))
    for tag in block.data_tags():
        ret = ret.concat(validate_data_tag(tag))
    return ret


def validate_file(file: File) -> Result:
    ret = Result()
    for block in file.blocks():
        ret = ret.concat(validate_block(block))
    return ret
