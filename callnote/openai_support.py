"""
callnote/openai_support.py
===========================
Shared OpenAI helpers - CallNote

Provides:
    - ``get_client()``      builds an ``openai.OpenAI`` client from config
    - ``status_code(exc)``  HTTP status carried by an OpenAI error, if any
    - ``is_model_rejection(exc)``  True for "model unavailable" (404) and
      "bad request" (400) failures, the only ones a different model can fix

Auth (401), rate-limit (429) and server (5xx) failures are account- or
service-level and are never classified as model rejections.

This module does NOT:
    - Retry calls (the SDK's own ``max_retries`` is the only retry layer)
    - Map statuses to user-facing text (see callnote.api.messages)
"""

import logging

from openai import OpenAI

from callnote import config

logger = logging.getLogger("callnote.openai_support")

MODEL_REJECTION_STATUS_CODES: frozenset[int] = frozenset({400, 404})


def get_client() -> OpenAI:
    """
    Create an OpenAI client from the configured API key.

    Raises:
        RuntimeError: If OPENAI_API_KEY is not set.
    """
    if not config.OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
    return OpenAI(api_key=config.OPENAI_API_KEY, max_retries=config.OPENAI_MAX_RETRIES)


def status_code(exc: BaseException) -> int | None:
    """Return the HTTP status of an OpenAI ``APIStatusError``, else None."""
    code = getattr(exc, "status_code", None)
    return code if isinstance(code, int) else None


def is_model_rejection(exc: BaseException) -> bool:
    return status_code(exc) in MODEL_REJECTION_STATUS_CODES
