# callnote/summary/__init__.py
# =============================
# Summarization Layer - CallNote
#
# Public API:
#   summarize(transcript) -> Summary

from callnote.summary.summarizer import (  # noqa: F401
    AllModelsExhausted,
    Summary,
    SummaryGenerationError,
    summarize,
)

__all__ = [
    "AllModelsExhausted",
    "Summary",
    "SummaryGenerationError",
    "summarize",
]
