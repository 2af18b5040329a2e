"""
callnote/audio/chunker.py
==========================
WAV Chunker - CallNote

Responsibility:
    - Split a PCM WAV buffer that exceeds the transcription service's
      request-size ceiling into standalone WAV buffers
    - Cut only on sample-frame boundaries: every chunk's PCM payload is a
      whole multiple of block_align (channels * bytes per sample)
    - Give every chunk a fresh 44-byte header describing its own payload

Concatenating the PCM payloads of the chunks, in order, reproduces the
input PCM byte for byte.  Chunks are contiguous: no overlap, no padding.

This module does NOT:
    - Resample, remix or otherwise touch the samples
    - Look for silence; boundaries are purely size-driven
    - Perform STT
"""

import io
import logging
import struct
import wave
from dataclasses import dataclass

logger = logging.getLogger("callnote.audio.chunker")

WAV_HEADER_SIZE: int = 44

# WAVE_FORMAT_PCM, WAVE_FORMAT_EXTENSIBLE
_PCM_FORMAT_TAGS: frozenset[int] = frozenset({0x0001, 0xFFFE})


@dataclass(frozen=True)
class WavFormat:
    """PCM layout read from a WAV header."""

    n_channels: int
    sample_rate: int
    sampwidth: int  # bytes per sample

    @property
    def bits_per_sample(self) -> int:
        return self.sampwidth * 8

    @property
    def block_align(self) -> int:
        return self.n_channels * self.sampwidth


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def split_wav(wav_bytes: bytes, max_chunk_size: int) -> list[bytes]:
    """
    Split *wav_bytes* into WAV chunks no larger than *max_chunk_size*.

    Args:
        wav_bytes:      A complete PCM WAV file.
        max_chunk_size: Upper bound on each chunk's total size (header
                        included), in bytes.

    Returns:
        ``[wav_bytes]`` unchanged if it already fits, otherwise the ordered
        list of standalone chunk buffers.

    Raises:
        ValueError: If the buffer is not a readable PCM WAV, or
                    *max_chunk_size* cannot hold a header and one frame.
    """
    if len(wav_bytes) <= max_chunk_size:
        return [wav_bytes]

    fmt, pcm = read_wav(wav_bytes)
    block_align = fmt.block_align

    max_pcm_per_chunk = ((max_chunk_size - WAV_HEADER_SIZE) // block_align) * block_align
    if max_pcm_per_chunk <= 0:
        raise ValueError(
            f"max_chunk_size={max_chunk_size} cannot hold a {WAV_HEADER_SIZE}-byte "
            f"header plus one {block_align}-byte sample frame."
        )

    logger.info(
        "Splitting WAV: %d bytes PCM | %d Hz | %d ch | %d-bit | "
        "max %d PCM bytes per chunk.",
        len(pcm), fmt.sample_rate, fmt.n_channels, fmt.bits_per_sample,
        max_pcm_per_chunk,
    )

    chunks: list[bytes] = []
    for offset in range(0, len(pcm), max_pcm_per_chunk):
        chunk_pcm = pcm[offset : offset + max_pcm_per_chunk]
        chunks.append(frames_to_wav(chunk_pcm, fmt))

    logger.info("WAV split into %d chunk(s).", len(chunks))
    return chunks


def read_wav(wav_bytes: bytes) -> tuple[WavFormat, bytes]:
    """
    Read the PCM format and the raw sample frames of a WAV buffer.

    The header is parsed directly: channels, sample rate and bits per
    sample come from the ``fmt `` chunk (offsets 22, 24 and 34 of a
    canonical header) and the samples from the ``data`` chunk.  Both plain
    PCM (format tag 1) and WAVE_FORMAT_EXTENSIBLE (0xFFFE) are accepted.

    Only whole sample frames are returned; a truncated trailing frame is
    dropped.  A ``data`` size running past the end of the buffer (common
    with streaming recorders) is clamped to the bytes actually present.

    Raises:
        ValueError: If the buffer is not a readable PCM WAV.
    """
    if len(wav_bytes) < 12 or wav_bytes[0:4] != b"RIFF" or wav_bytes[8:12] != b"WAVE":
        raise ValueError("Failed to read WAV audio for chunking: missing RIFF/WAVE header.")

    fmt: WavFormat | None = None
    pcm: bytes | None = None
    offset = 12
    while offset + 8 <= len(wav_bytes) and pcm is None:
        chunk_id, chunk_size = struct.unpack_from("<4sI", wav_bytes, offset)
        body = offset + 8

        if chunk_id == b"fmt ":
            if chunk_size < 16 or body + 16 > len(wav_bytes):
                raise ValueError("Failed to read WAV audio for chunking: truncated fmt chunk.")
            format_tag, n_channels, sample_rate, _, _, bits = struct.unpack_from(
                "<HHIIHH", wav_bytes, body,
            )
            if format_tag not in _PCM_FORMAT_TAGS:
                raise ValueError(
                    f"Failed to read WAV audio for chunking: unsupported format tag {format_tag:#06x}."
                )
            if bits <= 0 or bits % 8:
                raise ValueError(
                    f"Failed to read WAV audio for chunking: unsupported {bits}-bit samples."
                )
            fmt = WavFormat(n_channels=n_channels, sample_rate=sample_rate, sampwidth=bits // 8)

        elif chunk_id == b"data":
            if fmt is None:
                raise ValueError("Failed to read WAV audio for chunking: data chunk before fmt.")
            pcm = wav_bytes[body : body + chunk_size]

        # Chunks are word-aligned.
        offset = body + chunk_size + (chunk_size & 1)

    if fmt is None or pcm is None:
        raise ValueError("Failed to read WAV audio for chunking: missing fmt or data chunk.")
    if fmt.block_align <= 0:
        raise ValueError("WAV header declares a zero-byte sample frame.")

    whole = len(pcm) - len(pcm) % fmt.block_align
    return fmt, pcm[:whole]


def frames_to_wav(raw_pcm: bytes, fmt: WavFormat) -> bytes:
    """Wrap raw PCM frames into a standalone 44-byte-header WAV buffer."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(fmt.n_channels)
        wf.setsampwidth(fmt.sampwidth)
        wf.setframerate(fmt.sample_rate)
        wf.writeframes(raw_pcm)
    return buf.getvalue()
