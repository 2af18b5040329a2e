"""
callnote/audio/preparer.py
===========================
Audio Preparer - CallNote

Responsibility:
    Turn any uploaded file into exactly one PreparedAudio value the
    transcription service accepts:

        1. Raw AMR (``#!AMR\\n``)   -> decode to WAV.  A decode failure is
                                     fatal: there is nothing to fall back to.
        2. ISO container (ftyp)    -> 3GP brand: extract the AMR stream from
                                     mdat and decode it to WAV, falling back
                                     to uploading the container as-is on any
                                     format or codec error.
                                     Other brands: upload the container as-is.
        3. Anything else           -> keep the bytes, infer the MIME type from
                                     the filename extension.

The client-supplied MIME type is never trusted.

This module does NOT:
    - Call the transcription service
    - Split oversized WAV output (handled by callnote.stt.orchestrator)
"""

import logging
import re
from dataclasses import dataclass

from callnote import config
from callnote.audio.boxes import ContainerFormatError
from callnote.audio.codec import Codec, CodecDecodeError, decode_amr
from callnote.audio.framer import extract_amr_stream
from callnote.audio.sniffer import (
    container_brand,
    is_3gp_brand,
    is_codec_native,
    is_iso_container,
)
from callnote.fallback import Outcome, run_in_order

logger = logging.getLogger("callnote.audio.preparer")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WAV_MIME: str = "audio/wav"
CONTAINER_MIME: str = "audio/mp4"
DEFAULT_EXTENSION: str = "mp3"
DEFAULT_MIME: str = "audio/mpeg"

MIME_MAP: dict[str, str] = {
    "m4a": "audio/mp4",
    "mp3": "audio/mpeg",
    "aac": "audio/aac",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "webm": "audio/webm",
    "flac": "audio/flac",
    "mp4": "audio/mp4",
    "mpeg": "audio/mpeg",
    "mpga": "audio/mpeg",
    "oga": "audio/ogg",
}

_EXTENSION_RE = re.compile(r"\.(" + "|".join(MIME_MAP) + r")$")


@dataclass(frozen=True)
class PreparedAudio:
    """Audio ready to be sent to the transcription service."""

    buffer: bytes
    name: str
    mime_type: str

    @property
    def is_wav(self) -> bool:
        return self.mime_type == WAV_MIME


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def prepare_audio(
    buffer: bytes,
    filename: str,
    codec: Codec | None = None,
    allow_loose_scan: bool | None = None,
) -> PreparedAudio:
    """
    Normalize an uploaded file for transcription.

    Args:
        buffer:           Raw uploaded bytes.
        filename:         Original client filename (extension hint only).
        codec:            AMR decoder override (defaults to pydub).
        allow_loose_scan: Also try the loose mdat scan on 3GP input.
                          Defaults to ``config.ALLOW_LOOSE_BOX_SCAN``.

    Returns:
        Exactly one PreparedAudio.

    Raises:
        CodecDecodeError: Raw AMR input that the codec could not decode.
    """
    if is_codec_native(buffer):
        logger.info("AMR stream detected, converting to WAV...")
        wav_bytes = decode_amr(buffer, codec)
        return _wav(wav_bytes)

    if is_iso_container(buffer):
        brand = container_brand(buffer)
        if not is_3gp_brand(buffer):
            logger.info("Non-3GP container (brand=%r), sending as .mp4.", brand)
            return _container(buffer)

        logger.info("3GP container detected (brand=%r), extracting AMR from mdat...", brand)
        if allow_loose_scan is None:
            allow_loose_scan = config.ALLOW_LOOSE_BOX_SCAN
        _, prepared = run_in_order(_3gp_strategies(buffer, codec, allow_loose_scan))
        return prepared

    return _by_extension(buffer, filename)


def infer_extension(filename: str) -> str:
    """Known audio extension of *filename*, or the default (``mp3``)."""
    match = _EXTENSION_RE.search((filename or "").lower())
    return match.group(1) if match else DEFAULT_EXTENSION


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _3gp_strategies(buffer: bytes, codec: Codec | None, allow_loose_scan: bool):
    strategies = [("extract_mdat", lambda: _try_extract(buffer, codec, loose=False))]
    if allow_loose_scan:
        strategies.append(
            ("extract_mdat_loose", lambda: _try_extract(buffer, codec, loose=True))
        )
    strategies.append(("forward_container", lambda: Outcome.success(_container(buffer))))
    return strategies


def _try_extract(buffer: bytes, codec: Codec | None, loose: bool) -> Outcome:
    try:
        amr_bytes = extract_amr_stream(buffer, loose=loose)
        logger.info("AMR extracted (%d bytes), converting to WAV...", len(amr_bytes))
        wav_bytes = decode_amr(amr_bytes, codec)
    except (ContainerFormatError, CodecDecodeError) as exc:
        return Outcome.skip(f"AMR extraction failed ({exc})")
    return Outcome.success(_wav(wav_bytes))


def _wav(wav_bytes: bytes) -> PreparedAudio:
    logger.info("WAV conversion done, size: %d", len(wav_bytes))
    return PreparedAudio(buffer=wav_bytes, name="audio.wav", mime_type=WAV_MIME)


def _container(buffer: bytes) -> PreparedAudio:
    return PreparedAudio(buffer=buffer, name="audio.mp4", mime_type=CONTAINER_MIME)


def _by_extension(buffer: bytes, filename: str) -> PreparedAudio:
    ext = infer_extension(filename)
    mime_type = MIME_MAP.get(ext, DEFAULT_MIME)
    logger.info("No known magic bytes, using extension '.%s' (%s).", ext, mime_type)
    return PreparedAudio(buffer=buffer, name=f"audio.{ext}", mime_type=mime_type)
