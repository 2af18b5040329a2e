"""
callnote/audio/codec.py
========================
AMR codec adapter - CallNote

Thin boundary around the external AMR -> WAV decoder.  The decode itself
is pydub's (ffmpeg-backed); this module only normalizes its result and
failures into CodecDecodeError.
"""

import io
import logging
from typing import Callable, Optional

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

logger = logging.getLogger("callnote.audio.codec")

# Accepts a framed AMR stream, returns WAV bytes or None when it produced
# nothing.
Codec = Callable[[bytes], Optional[bytes]]


class CodecDecodeError(Exception):
    """Raised when the codec produces no audio for an AMR stream."""
    pass


def pydub_amr_codec(amr_bytes: bytes) -> Optional[bytes]:
    """Default codec: decode AMR with pydub and export it as PCM WAV."""
    try:
        audio = AudioSegment.from_file(io.BytesIO(amr_bytes), format="amr")
    except CouldntDecodeError:
        return None

    if len(audio) == 0:
        return None

    buffer = io.BytesIO()
    audio.export(buffer, format="wav")
    return buffer.getvalue()


def decode_amr(amr_bytes: bytes, codec: Codec | None = None) -> bytes:
    """
    Decode a framed AMR stream to WAV bytes.

    Raises:
        CodecDecodeError: The codec raised, or returned no output.
    """
    codec = codec or pydub_amr_codec

    try:
        wav_bytes = codec(amr_bytes)
    except Exception as exc:
        raise CodecDecodeError(f"AMR decoding failed: {exc}") from exc

    if not wav_bytes:
        raise CodecDecodeError("AMR decoding failed: codec returned no audio.")

    logger.info(
        "AMR decoded: %d bytes in -> %d bytes WAV.", len(amr_bytes), len(wav_bytes),
    )
    return wav_bytes
