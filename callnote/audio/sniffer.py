"""
callnote/audio/sniffer.py
==========================
Container sniffing - CallNote

Classifies an uploaded byte buffer by fixed-offset magic bytes.  Mobile
clients report unreliable MIME types, so the buffer itself is the only
source of truth.
"""

AMR_MAGIC: bytes = b"#!AMR\n"
ISO_FTYP: bytes = b"ftyp"

# Brand prefix of 3GPP recordings, whose mdat carries raw AMR-NB frames.
BRAND_3GP: str = "3gp"


def is_codec_native(buffer: bytes) -> bool:
    """True if *buffer* is a raw AMR stream (starts with ``#!AMR\\n``)."""
    return len(buffer) >= len(AMR_MAGIC) and buffer[: len(AMR_MAGIC)] == AMR_MAGIC


def is_iso_container(buffer: bytes) -> bool:
    """True if *buffer* is an ISO base media file (``ftyp`` at offset 4)."""
    return len(buffer) >= 8 and buffer[4:8] == ISO_FTYP


def container_brand(buffer: bytes) -> str:
    """Major brand of an ISO container (bytes 8-12), or ``""`` if absent."""
    if len(buffer) < 12:
        return ""
    return buffer[8:12].decode("ascii", errors="replace")


def is_3gp_brand(buffer: bytes) -> bool:
    return container_brand(buffer).startswith(BRAND_3GP)
