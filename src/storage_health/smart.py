"""Decoder for the vendor-specific SMART attribute block.

The block is the 512 byte ``VendorSpecific`` buffer reported by the storage
driver. After a two byte revision header it holds fixed 12 byte records::

    +0  attribute id (0 = unused slot)
    +1  status flags (ignored)
    +2  threshold
    +3  current normalized value
    +4  worst normalized value
    +5  raw counter, little endian

Only the low four bytes of the raw counter are read, so counters above
``2**32 - 1`` are truncated.
"""

from __future__ import annotations

import struct
from typing import Iterable, List, Optional, Union

from .models import SmartAttribute


HEADER_SIZE = 2
RECORD_SIZE = 12
# bytes that must remain from a record's offset for it to be read
MIN_RECORD_BYTES = 11

_RAW = struct.Struct("<I")

BlockLike = Union[bytes, bytearray, memoryview, Iterable[int]]


def _as_bytes(block: Optional[BlockLike]) -> bytes:
    if block is None:
        return b""
    if isinstance(block, (bytes, bytearray, memoryview)):
        return bytes(block)
    try:
        return bytes(int(b) & 0xFF for b in block)
    except (TypeError, ValueError):
        return b""


def decode_attributes(block: Optional[BlockLike]) -> List[SmartAttribute]:
    data = _as_bytes(block)
    attributes: List[SmartAttribute] = []
    offset = HEADER_SIZE
    while len(data) - offset >= MIN_RECORD_BYTES:
        attr_id = data[offset]
        if attr_id != 0:
            attributes.append(
                SmartAttribute(
                    id=attr_id,
                    threshold=data[offset + 2],
                    current_value=data[offset + 3],
                    worst_value=data[offset + 4],
                    raw_value=_RAW.unpack_from(data, offset + 5)[0],
                )
            )
        offset += RECORD_SIZE
    return attributes


def find_attribute(attributes: Iterable[SmartAttribute], attr_id: int) -> Optional[SmartAttribute]:
    for attr in attributes:
        if attr.id == attr_id:
            return attr
    return None
