# callnote/audio/__init__.py
# ===========================
# Audio Ingestion Layer - CallNote
#
#   sniffer.py   magic-byte classification (raw AMR / ISO container / other)
#   boxes.py     top-level ISO box parser (+ loose mdat scan)
#   framer.py    mdat payload -> "#!AMR\n" framed stream
#   codec.py     AMR -> WAV decode boundary (pydub)
#   chunker.py   frame-aligned WAV splitting
#   preparer.py  upload -> PreparedAudio policy
#
# Public API:
#   prepare_audio(buffer, filename) -> PreparedAudio
#   split_wav(wav_bytes, max_chunk_size) -> list[bytes]

from callnote.audio.chunker import split_wav  # noqa: F401
from callnote.audio.preparer import PreparedAudio, prepare_audio  # noqa: F401

__all__ = [
    "PreparedAudio",
    "prepare_audio",
    "split_wav",
]
