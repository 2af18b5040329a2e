"""
callnote/audio/boxes.py
========================
ISO base media box parser - CallNote

Responsibility:
    - Walk the TOP-LEVEL boxes of an MP4/3GP buffer
    - Report each box's type, offset, header size and payload size
    - Locate the payload box (mdat) either strictly or by a loose scan

Box layout:
    [4 bytes size, big-endian] [4 bytes ASCII type] [payload]

    size == 0  box runs to the end of the buffer
    size == 1  a 64-bit size follows the type (16-byte header)

Only 32-bit sizes are supported.  An extended size whose high word is set
(> 4 GiB) is rejected with UnsupportedSize instead of being truncated;
voice recordings never get near that.

This module does NOT:
    - Recurse into container boxes (moov, trak, ...); mdat is always top-level
    - Interpret sample tables or codec configuration
"""

import logging
import struct
from dataclasses import dataclass

logger = logging.getLogger("callnote.audio.boxes")

PAYLOAD_BOX_TYPE: bytes = b"mdat"

_STANDARD_HEADER = 8
_EXTENDED_HEADER = 16


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ContainerFormatError(Exception):
    """Base class for container parsing failures."""
    pass


class MalformedBox(ContainerFormatError):
    """Raised when a box declares a size smaller than its own header."""
    pass


class UnsupportedSize(ContainerFormatError):
    """Raised for truncated or > 4 GiB extended-size boxes."""
    pass


class BoxNotFound(ContainerFormatError):
    """Raised when the requested box type is not present."""
    pass


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Box:
    """Descriptor of one top-level box."""

    type: str
    start: int
    header_size: int
    payload_size: int

    @property
    def payload_start(self) -> int:
        return self.start + self.header_size

    @property
    def end(self) -> int:
        return self.payload_start + self.payload_size


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_top_level_boxes(buffer: bytes) -> list[Box]:
    """
    Parse the top-level box list of an ISO base media buffer.

    Scanning stops when fewer than 8 bytes remain.

    Raises:
        UnsupportedSize: Extended size is truncated or exceeds 32 bits.
        MalformedBox:    Declared size is smaller than the header.
    """
    boxes: list[Box] = []
    offset = 0
    length = len(buffer)

    while offset + _STANDARD_HEADER <= length:
        size_field, raw_type = struct.unpack_from(">I4s", buffer, offset)
        box_type = raw_type.decode("ascii", errors="replace")

        if size_field == 0:
            header_size = _STANDARD_HEADER
            total_size = length - offset
        elif size_field == 1:
            if offset + _EXTENDED_HEADER > length:
                raise UnsupportedSize(
                    f"Box '{box_type}' at offset {offset} has a truncated "
                    f"extended size header."
                )
            high, low = struct.unpack_from(">II", buffer, offset + 8)
            if high != 0:
                raise UnsupportedSize(
                    f"Box '{box_type}' at offset {offset} is larger than 4 GiB "
                    f"- not supported."
                )
            header_size = _EXTENDED_HEADER
            total_size = low
        else:
            header_size = _STANDARD_HEADER
            total_size = size_field

        if total_size < header_size:
            raise MalformedBox(
                f"Malformed box '{box_type}' at offset {offset}: reported size "
                f"{total_size} < header size {header_size}."
            )

        boxes.append(
            Box(
                type=box_type,
                start=offset,
                header_size=header_size,
                payload_size=total_size - header_size,
            )
        )
        offset += total_size

    logger.debug(
        "Parsed %d top-level boxes: %s", len(boxes), [b.type for b in boxes],
    )
    return boxes


def find_box(boxes: list[Box], box_type: bytes = PAYLOAD_BOX_TYPE) -> Box:
    """
    Return the first box of *box_type*.

    Raises:
        BoxNotFound: No box of that type is present.
    """
    wanted = box_type.decode("ascii")
    for box in boxes:
        if box.type == wanted:
            return box
    raise BoxNotFound(f"No {wanted} box found in the supplied buffer.")


def find_payload_box_loose(
    buffer: bytes,
    box_type: bytes = PAYLOAD_BOX_TYPE,
) -> Box:
    """
    Locate the payload box by scanning for its 4-byte type tag.

    The 4 bytes before the tag are assumed to be a standard size field and
    the payload is taken to run to the end of the buffer.  No validation
    is done: the tag bytes can also appear inside unrelated metadata (a
    moov/udta comment, for instance) and give a false hit.  Only suitable
    for well-behaved recorder output where mdat is the last box.

    Raises:
        BoxNotFound: The tag does not occur after the first 4 bytes.
    """
    type_offset = buffer.find(box_type)
    if type_offset < 4:
        raise BoxNotFound(
            f"{box_type.decode('ascii')} box not found in the supplied buffer."
        )

    start = type_offset - 4
    return Box(
        type=box_type.decode("ascii"),
        start=start,
        header_size=_STANDARD_HEADER,
        payload_size=len(buffer) - start - _STANDARD_HEADER,
    )
