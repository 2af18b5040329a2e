"""
callnote/stt/orchestrator.py
=============================
Transcription Orchestrator - CallNote

Responsibility:
    1. Send prepared audio to the transcription service whole, or
    2. If it is a WAV larger than the service's request ceiling, split it
       on sample-frame boundaries and transcribe the chunks in parallel
    3. Isolate chunk failures: one failed chunk never aborts the others
    4. Wait for EVERY chunk call to settle, then merge the texts in chunk
       order (one space between chunks)
    5. Report which chunks failed when some, but not all, did

Failure rules:
    - Every chunk failed                     -> AllChunksFailed
    - Merged / single transcript is blank    -> EmptyTranscript
      (unrecoverable audio quality, never retried)
    - Single-call service errors propagate unchanged

This module does NOT:
    - Decide the upload format (callnote.audio.preparer)
    - Summarize
    - Cancel in-flight chunk calls (request timeouts belong to the caller)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from functools import partial
from typing import Callable

from callnote import config
from callnote.audio.chunker import split_wav
from callnote.audio.preparer import WAV_MIME, PreparedAudio
from callnote.openai_support import get_client
from callnote.stt import whisper_client

logger = logging.getLogger("callnote.stt.orchestrator")

# (buffer, filename, mime_type) -> transcript text
TranscriptionService = Callable[[bytes, str, str], str]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AllChunksFailed(Exception):
    """Raised when every chunk of a split recording failed to transcribe."""

    def __init__(self, errors: list[BaseException]):
        self.errors = errors
        super().__init__(
            f"All {len(errors)} audio chunks failed transcription - "
            "no usable transcript produced."
        )


class EmptyTranscript(Exception):
    """Raised when the service returned no speech for the recording."""
    pass


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TranscriptionOutcome:
    transcript: str
    partial_failure: str | None = None
    chunk_count: int = 1
    failed_chunks: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        data = {"transcript": self.transcript}
        if self.partial_failure:
            data["partialFailure"] = self.partial_failure
        return data


@dataclass
class _ChunkResult:
    index: int
    text: str | None = None
    error: BaseException | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def transcribe_audio(
    audio: PreparedAudio,
    service: TranscriptionService | None = None,
    size_limit: int | None = None,
    max_workers: int | None = None,
) -> TranscriptionOutcome:
    """
    Transcribe prepared audio, chunking oversized WAV input.

    Args:
        audio:       Output of ``prepare_audio``.
        service:     Transcription callable; defaults to OpenAI Whisper.
        size_limit:  Request ceiling in bytes
                     (default ``config.TRANSCRIPTION_SIZE_LIMIT``).
        max_workers: Parallel chunk calls (default ``config.MAX_CHUNK_WORKERS``).

    Returns:
        TranscriptionOutcome with the merged transcript.

    Raises:
        AllChunksFailed: Chunked path, zero chunks succeeded.
        EmptyTranscript: The resulting transcript is blank.
    """
    if size_limit is None:
        size_limit = config.TRANSCRIPTION_SIZE_LIMIT
    if max_workers is None:
        max_workers = config.MAX_CHUNK_WORKERS
    if service is None:
        service = partial(whisper_client.transcribe_buffer, client=get_client())

    if audio.mime_type == WAV_MIME and len(audio.buffer) > size_limit:
        outcome = _transcribe_chunked(audio, service, size_limit, max_workers)
    else:
        text = service(audio.buffer, audio.name, audio.mime_type)
        outcome = TranscriptionOutcome(transcript=(text or "").strip())

    if not outcome.transcript.strip():
        raise EmptyTranscript("The transcription service returned no speech.")

    logger.info(
        "Transcription complete: %d chars from %d call(s).",
        len(outcome.transcript), outcome.chunk_count,
    )
    return outcome


def format_partial_failure(failed: list[int], total: int) -> str:
    """User-facing note naming the failed 1-based chunk indices."""
    indices = ", ".join(str(i) for i in failed)
    return f"일부 구간({indices}/{total})의 변환에 실패했습니다."


# ---------------------------------------------------------------------------
# Chunked path
# ---------------------------------------------------------------------------


def _transcribe_chunked(
    audio: PreparedAudio,
    service: TranscriptionService,
    size_limit: int,
    max_workers: int,
) -> TranscriptionOutcome:
    chunks = split_wav(audio.buffer, size_limit)
    total = len(chunks)
    logger.info(
        "WAV too large (%.1fMB), split into %d chunks.",
        len(audio.buffer) / 1024 / 1024, total,
    )

    results = _transcribe_chunks_parallel(chunks, service, max_workers)

    texts: list[str] = []
    failed: list[int] = []
    errors: list[BaseException] = []
    for result in results:
        if result.error is not None:
            failed.append(result.index + 1)
            errors.append(result.error)
        elif result.text:
            texts.append(result.text)

    if len(failed) == total:
        raise AllChunksFailed(errors)

    partial_failure = None
    if failed:
        partial_failure = format_partial_failure(failed, total)
        logger.warning("%d/%d chunks failed: %s", len(failed), total, failed)

    return TranscriptionOutcome(
        transcript=" ".join(texts),
        partial_failure=partial_failure,
        chunk_count=total,
        failed_chunks=tuple(failed),
    )


def _transcribe_chunks_parallel(
    chunks: list[bytes],
    service: TranscriptionService,
    max_workers: int,
) -> list[_ChunkResult]:
    """
    Transcribe every chunk on a bounded thread pool.

    Results land in a list indexed by chunk position, so the merge order
    never depends on completion order.  Failed chunks carry their error
    (logged, not raised).
    """
    results: list[_ChunkResult] = [_ChunkResult(index=i) for i in range(len(chunks))]

    def _transcribe_one(index: int, chunk: bytes) -> _ChunkResult:
        logger.info(
            "Transcribing chunk %d/%d (%.1fMB)",
            index + 1, len(chunks), len(chunk) / 1024 / 1024,
        )
        try:
            text = service(chunk, f"audio_{index}.wav", WAV_MIME)
        except Exception as exc:
            logger.warning("Chunk %d failed: %s - skipping.", index + 1, exc)
            return _ChunkResult(index=index, error=exc)
        return _ChunkResult(index=index, text=(text or "").strip())

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(chunks)))) as executor:
        futures = [
            executor.submit(_transcribe_one, index, chunk)
            for index, chunk in enumerate(chunks)
        ]
        for future in as_completed(futures):
            result = future.result()
            results[result.index] = result

    return results
