"""
callnote/audio/framer.py
=========================
AMR framing - CallNote

A 3GP voice recording stores concatenated AMR-NB frames in its mdat box.
The codec only accepts a self-describing AMR stream, so the payload is
sliced out and the 6-byte ``#!AMR\\n`` magic header is prepended.
"""

import logging

from callnote.audio.boxes import (
    PAYLOAD_BOX_TYPE,
    Box,
    find_box,
    find_payload_box_loose,
    parse_top_level_boxes,
)
from callnote.audio.sniffer import AMR_MAGIC

logger = logging.getLogger("callnote.audio.framer")


def frame_amr_payload(
    buffer: bytes,
    boxes: list[Box],
    box_type: bytes = PAYLOAD_BOX_TYPE,
) -> bytes:
    """
    Build a codec-ready AMR stream from the first *box_type* box.

    Raises:
        BoxNotFound: No such box among *boxes*.
    """
    box = find_box(boxes, box_type)
    return _frame(buffer, box)


def extract_amr_stream(buffer: bytes, loose: bool = False) -> bytes:
    """
    Extract the AMR stream of a 3GP buffer.

    Args:
        buffer: Complete 3GP container bytes.
        loose:  Use the tag scan instead of the box parser.

    Raises:
        ContainerFormatError: Parsing failed or no mdat box exists.
    """
    if loose:
        return _frame(buffer, find_payload_box_loose(buffer))
    return frame_amr_payload(buffer, parse_top_level_boxes(buffer))


def _frame(buffer: bytes, box: Box) -> bytes:
    payload = buffer[box.payload_start : box.end]
    logger.debug(
        "Framing %s payload at offset %d (%d bytes).",
        box.type, box.payload_start, len(payload),
    )
    return AMR_MAGIC + payload
