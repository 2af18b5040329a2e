"""
callnote/stt/whisper_client.py
===============================
OpenAI Whisper client - CallNote

Responsibility:
    - Send one audio buffer to the OpenAI transcription endpoint
    - Return the plain transcript text

Status errors (401, 413, 429, 5xx, ...) are raised unchanged as
``openai.APIStatusError`` so the HTTP layer can map them to messages.

This module does NOT:
    - Decide whether audio must be chunked (callnote.stt.orchestrator)
    - Retry failed calls
"""

import logging

from openai import OpenAI

from callnote import config
from callnote.openai_support import get_client

logger = logging.getLogger("callnote.stt.whisper_client")


def transcribe_buffer(
    buffer: bytes,
    name: str,
    mime_type: str,
    client: OpenAI | None = None,
) -> str:
    """
    Transcribe a single audio buffer.

    Args:
        buffer:    Audio bytes.
        name:      Upload filename; the service infers the format from it.
        mime_type: Content type sent with the upload.
        client:    Optional pre-built OpenAI client.

    Returns:
        Transcript text (may be empty).
    """
    client = client or get_client()

    logger.debug("Sending %s (%d bytes, %s) to %s.", name, len(buffer), mime_type, config.WHISPER_MODEL)
    transcription = client.audio.transcriptions.create(
        file=(name, buffer, mime_type),
        model=config.WHISPER_MODEL,
        language=config.TRANSCRIBE_LANGUAGE,
        response_format="text",
    )

    if isinstance(transcription, str):
        return transcription
    # Older SDKs wrap text responses in an object with a ``text`` attribute.
    return getattr(transcription, "text", None) or str(transcription)
