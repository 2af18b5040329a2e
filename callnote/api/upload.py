"""
callnote/api/upload.py
=======================
API Endpoints - CallNote

Responsibility:
    - POST /api/transcribe  multipart upload -> transcript + summary
    - POST /api/summarize   JSON {"transcript"} -> summary (re-summarize)
    - GET  /health
    - Translate pipeline failures into a Korean user message, plus a
      ``debug`` payload (filename, content type, size, detail) when
      config.DEBUG is on

The pipeline itself is blocking (OpenAI SDK + thread pool) and runs in a
worker thread via ``asyncio.to_thread``.

This module does NOT:
    - Inspect the client-supplied content type (logged for debugging only)
    - Persist uploads or results
"""

import asyncio
import logging
from functools import partial
from typing import Any

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import APIStatusError

from callnote import __version__, config
from callnote.api import messages
from callnote.audio.codec import CodecDecodeError
from callnote.audio.preparer import prepare_audio
from callnote.openai_support import get_client
from callnote.stt.orchestrator import AllChunksFailed, EmptyTranscript, transcribe_audio
from callnote.stt.whisper_client import transcribe_buffer
from callnote.summary.summarizer import AllModelsExhausted, summarize

logger = logging.getLogger("callnote.api")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="CallNote",
    description="Voice recording transcription and call summary.",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Pipeline runners (executed in a worker thread)
# ---------------------------------------------------------------------------


def run_transcription(audio_bytes: bytes, filename: str) -> dict[str, Any]:
    """Prepare -> transcribe -> summarize.  Returns the response body."""
    audio = prepare_audio(audio_bytes, filename)
    client = get_client()

    outcome = transcribe_audio(audio, service=partial(transcribe_buffer, client=client))
    summary = summarize(outcome.transcript, client=client)

    body = outcome.to_dict()
    body["summary"] = summary.to_dict()
    return body


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/transcribe")
async def transcribe_call(file: UploadFile | None = File(None)):
    """
    Accept a recording and return its transcript and six-field summary.

    Response:
        {"transcript": str, "summary": {...}, "partialFailure"?: str}
    """
    if file is None:
        return _error(400, messages.NO_FILE)

    audio_bytes = await file.read()
    debug_info = {
        "name": file.filename,
        "type": file.content_type,
        "size": len(audio_bytes),
    }
    logger.info(
        "Upload received: name=%s, type=%s, size=%d",
        file.filename, file.content_type, len(audio_bytes),
    )

    if len(audio_bytes) > config.MAX_UPLOAD_BYTES:
        return _error(400, messages.FILE_TOO_LARGE)

    try:
        body = await asyncio.to_thread(
            run_transcription, audio_bytes, file.filename or "",
        )
    except EmptyTranscript as exc:
        logger.warning("Empty transcript: %s", exc)
        return _error(422, messages.EMPTY_TRANSCRIPT, debug_info, exc)
    except AllChunksFailed as exc:
        logger.error("All chunks failed: %s", exc)
        return _error(502, messages.ALL_CHUNKS_FAILED, debug_info, exc)
    except CodecDecodeError as exc:
        logger.error("AMR decode failed: %s", exc)
        return _error(422, messages.AUDIO_DECODE_FAILED, debug_info, exc)
    except APIStatusError as exc:
        logger.error("Transcription error (status %s): %s", exc.status_code, exc)
        message = messages.status_message(
            exc.status_code,
            messages.TRANSCRIBE_STATUS_MESSAGES,
            messages.TRANSCRIBE_SERVICE_FAILED,
        )
        return _error(413 if exc.status_code == 413 else 502, message, debug_info, exc)
    except AllModelsExhausted as exc:
        logger.error("Summarization unavailable: %s", exc)
        return _error(500, messages.ALL_MODELS_EXHAUSTED, debug_info, exc)
    except Exception as exc:
        logger.error("Transcription error: %s", exc, exc_info=True)
        return _error(500, messages.TRANSCRIBE_FAILED, debug_info, exc)

    return JSONResponse(status_code=200, content=body)


@app.post("/api/summarize")
async def summarize_transcript(request: Request):
    """
    Re-summarize an existing transcript.

    Body: {"transcript": str}.  A missing, blank or non-string transcript,
    or a body that is not a JSON object, is answered with the same 400.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    transcript = payload.get("transcript") if isinstance(payload, dict) else None
    if not isinstance(transcript, str) or not transcript.strip():
        return _error(400, messages.NO_TEXT)

    logger.info("Summarizing transcript (%d chars)", len(transcript))

    try:
        summary = await asyncio.to_thread(summarize, transcript)
    except APIStatusError as exc:
        logger.error("Summary error (status %s): %s", exc.status_code, exc)
        message = messages.status_message(
            exc.status_code,
            messages.SUMMARIZE_STATUS_MESSAGES,
            messages.SUMMARIZE_SERVICE_FAILED,
        )
        return _error(502, message)
    except AllModelsExhausted as exc:
        logger.error("Summarization unavailable: %s", exc)
        return _error(500, messages.ALL_MODELS_EXHAUSTED)
    except Exception as exc:
        logger.error("Summary error: %s", exc, exc_info=True)
        return _error(500, messages.SUMMARIZE_FAILED)

    return JSONResponse(status_code=200, content={"summary": summary.to_dict()})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(
    status: int,
    message: str,
    debug_info: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {"error": message}
    if config.DEBUG and debug_info is not None:
        content["debug"] = {**debug_info, "detail": str(exc) if exc else None}
    return JSONResponse(status_code=status, content=content)
