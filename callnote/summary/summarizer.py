"""
callnote/summary/summarizer.py
===============================
Summarization Fallback Chain - CallNote

Responsibility:
    - Summarize a call transcript into six fixed fields using OpenAI chat
      completions with JSON output
    - Try the configured models strictly in order (cost/quality ordered)
    - Move to the next model ONLY when the service rejects the model
      itself: 404 (model unavailable) or 400 (bad request)
    - Propagate every other failure (401, 429, 5xx, network) immediately;
      switching models cannot fix an account- or service-level problem
    - Never fail on an unparseable answer: fall back to a degraded Summary
      carrying the raw text and asking the user to review it manually

Failure rules:
    - Every model rejected   -> AllModelsExhausted
    - Model returned nothing -> SummaryGenerationError (not a model rejection)

This module does NOT:
    - Retry a model
    - Call models concurrently
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from openai import OpenAI

from callnote import config
from callnote.fallback import Outcome, StrategiesExhausted, run_in_order
from callnote.openai_support import get_client, is_model_rejection, status_code

logger = logging.getLogger("callnote.summary.summarizer")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AllModelsExhausted(StrategiesExhausted):
    """Raised when every configured model was rejected by the service."""

    def __init__(self, skipped: list[tuple[str, str]]):
        models = ", ".join(name for name, _ in skipped) or "none"
        super().__init__(skipped, f"No summarization model is available (tried: {models}).")


class SummaryGenerationError(Exception):
    """Raised when a model answered with empty content."""
    pass


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

# (attribute, JSON key)
SUMMARY_FIELDS: tuple[tuple[str, str], ...] = (
    ("brief_summary", "briefSummary"),
    ("participants", "participants"),
    ("key_points", "keyPoints"),
    ("agreements", "agreements"),
    ("legally_significant", "legallySignificant"),
    ("cautions", "cautions"),
)

UNAVAILABLE_TEXT: str = "자동 분석 불가"
NONE_FOUND_TEXT: str = "확인된 사항 없음"
DEGRADED_CAUTION: str = (
    "AI 응답 형식 오류로 자동 분석이 불가했습니다. 위 텍스트를 직접 확인해주세요."
)


@dataclass(frozen=True)
class Summary:
    brief_summary: str
    participants: str
    key_points: str
    agreements: str
    legally_significant: str
    cautions: str
    degraded: bool = False

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, attr) for attr, key in SUMMARY_FIELDS}


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT: str = """당신은 통화 녹음을 분석하는 전문가입니다.
통화 내용을 파악하여 누가 누구와 무슨 이야기를 했는지 명확하게 정리해주세요.

통화에 법적 분쟁, 산업재해, 사고, 수사, 계약, 협상 등의 맥락이 있으면:
- 책임 인정, 과실 언급, 약속, 합의 같은 법적으로 중요한 발언을 특히 주의 깊게 찾아주세요
- 직접 인용은 「」로 감싸 원문 그대로 기록해주세요
그런 맥락이 없는 일반 통화라면 legallySignificant는 "해당 없음"으로 작성하세요.

반드시 아래 JSON 형식으로만 응답하세요.
각 필드는 항목마다 줄바꿈(\\n)하고 bullet(•)을 사용해 읽기 쉽게 작성하세요.

{
  "briefSummary": "핵심 내용을 3-5문장으로 요약. 문장 사이에 줄바꿈(\\n).",
  "participants": "참여자별로 줄바꿈.\\n예: • 발신자: OOO (소속/역할)\\n• 수신자: OOO (소속/역할)",
  "keyPoints": "• 핵심 내용 1\\n• 핵심 내용 2",
  "agreements": "약속, 합의, 다음 행동 항목을 bullet(•)으로. 없으면 '확인된 사항 없음'",
  "legallySignificant": "법적으로 중요한 발언을 bullet(•)으로, 직접 인용은 「」. 없으면 '해당 없음'",
  "cautions": "주의할 점을 bullet(•)으로"
}"""

_USER_PREFIX: str = "다음 통화 녹음 텍스트를 분석해주세요:\n\n"


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def _parse_summary_response(raw: str) -> Summary:
    """
    Parse the model's JSON answer into a Summary.

    A field may be a string or a list of strings (joined with newlines).

    Raises:
        ValueError: Not JSON, not an object, or a field is missing/invalid.
    """
    try:
        parsed = json.loads(raw.strip())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Summary response is not valid JSON: {raw[:80]!r}") from exc

    if not isinstance(parsed, dict):
        raise ValueError(f"Expected JSON object, got {type(parsed).__name__}")

    values: dict[str, str] = {}
    for attr, key in SUMMARY_FIELDS:
        values[attr] = _field_text(key, parsed.get(key))
    return Summary(**values)


def _field_text(key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return "\n".join(value)
    raise ValueError(f"Summary field {key!r} is missing or not text: {value!r}")


def degraded_summary(raw: str) -> Summary:
    """Summary built from an answer that could not be parsed."""
    return Summary(
        brief_summary=raw,
        participants=UNAVAILABLE_TEXT,
        key_points=raw,
        agreements=NONE_FOUND_TEXT,
        legally_significant=NONE_FOUND_TEXT,
        cautions=DEGRADED_CAUTION,
        degraded=True,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def summarize(
    transcript: str,
    models: list[str] | None = None,
    client: OpenAI | None = None,
) -> Summary:
    """
    Summarize *transcript*, falling back across *models*.

    Args:
        transcript: Call transcript text (non-blank).
        models:     Model ids in trial order (default ``config.SUMMARY_MODELS``).
        client:     Optional pre-built OpenAI client.

    Returns:
        Summary (``degraded=True`` if the answer was not valid JSON).

    Raises:
        ValueError:             Blank transcript.
        AllModelsExhausted:     Every model returned 404/400.
        SummaryGenerationError: A model answered with empty content.
        openai.OpenAIError:     Any other service failure, unchanged.
    """
    if not transcript or not transcript.strip():
        raise ValueError("Transcript is empty - nothing to summarize.")

    models = models or config.SUMMARY_MODELS
    client = client or get_client()

    logger.info(
        "Summarizing transcript (%d chars), models in order: %s",
        len(transcript), models,
    )

    strategies = [
        (model, lambda model=model: _try_model(client, model, transcript))
        for model in models
    ]
    model, summary = run_in_order(strategies, exhausted=AllModelsExhausted)

    logger.info("Summary produced by %s (degraded=%s).", model, summary.degraded)
    return summary


def _try_model(client: OpenAI, model: str, transcript: str) -> Outcome:
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": _USER_PREFIX + transcript},
            ],
            temperature=config.SUMMARY_TEMPERATURE,
            response_format={"type": "json_object"},
        )
    except Exception as exc:
        if is_model_rejection(exc):
            return Outcome.skip(f"model {model} unavailable ({status_code(exc)})")
        return Outcome.fatal(exc)

    content = response.choices[0].message.content if response.choices else None
    if not content:
        return Outcome.fatal(SummaryGenerationError(f"Model {model} returned no content."))

    try:
        return Outcome.success(_parse_summary_response(content))
    except ValueError as exc:
        logger.warning("Unparseable summary from %s (%s) - returning degraded summary.", model, exc)
        return Outcome.success(degraded_summary(content))
