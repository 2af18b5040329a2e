# callnote/stt/__init__.py
# =========================
# Speech-to-Text Layer - CallNote
#
#   whisper_client.py  one OpenAI transcription call per buffer
#   orchestrator.py    whole-or-chunked transcription with partial-failure merge
#
# Public API:
#   transcribe_audio(prepared_audio) -> TranscriptionOutcome

from callnote.stt.orchestrator import (  # noqa: F401
    AllChunksFailed,
    EmptyTranscript,
    TranscriptionOutcome,
    transcribe_audio,
)

__all__ = [
    "AllChunksFailed",
    "EmptyTranscript",
    "TranscriptionOutcome",
    "transcribe_audio",
]
