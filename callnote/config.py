"""
callnote/config.py
===================
Runtime configuration - CallNote

All settings are read once from the process environment (a local ``.env``
file is loaded first).  Every value has a default so the pipeline can be
imported and tested without any environment at all.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("true", "1", "yes")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


def _env_list(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, "").strip() or default
    return [item.strip() for item in raw.split(",") if item.strip()]


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

OPENAI_API_KEY: str | None = os.environ.get("OPENAI_API_KEY")

# SDK-level retries only; the pipeline itself never retries a status error.
OPENAI_MAX_RETRIES: int = _env_int("OPENAI_MAX_RETRIES", 2)

WHISPER_MODEL: str = os.environ.get("WHISPER_MODEL", "whisper-1")
TRANSCRIBE_LANGUAGE: str = os.environ.get("TRANSCRIBE_LANGUAGE", "ko")

# Cost/quality ordered; tried strictly in this order.
SUMMARY_MODELS: list[str] = _env_list("SUMMARY_MODELS", "gpt-5.2,gpt-4o,gpt-4o-mini")
SUMMARY_TEMPERATURE: float = _env_float("SUMMARY_TEMPERATURE", 0.3)

# ---------------------------------------------------------------------------
# Audio limits
# ---------------------------------------------------------------------------

MAX_UPLOAD_BYTES: int = _env_int("MAX_UPLOAD_BYTES", 25 * 1024 * 1024)

# Largest single request body sent to the transcription service.
TRANSCRIPTION_SIZE_LIMIT: int = _env_int("TRANSCRIPTION_SIZE_LIMIT", 20 * 1024 * 1024)

MAX_CHUNK_WORKERS: int = _env_int("MAX_CHUNK_WORKERS", 4)

# Degraded mdat scan for 3GP files whose box structure does not parse.
ALLOW_LOOSE_BOX_SCAN: bool = _env_bool("ALLOW_LOOSE_BOX_SCAN")

# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

DEBUG: bool = (
    os.environ.get("APP_ENV", "").strip().lower() == "development"
    or _env_bool("DEBUG")
)
