"""
callnote/fallback.py
=====================
Ordered fallback chains - CallNote

Responsibility:
    - Run an ordered list of named strategies, one at a time
    - Stop at the first strategy that reports SUCCESS
    - Move on when a strategy reports SKIP (the failure is one the next
      strategy may fix)
    - Re-raise immediately when a strategy reports FATAL
    - Raise StrategiesExhausted when every strategy skipped

Used by:
    - callnote.audio.preparer   (3GP extraction -> forward container)
    - callnote.summary.summarizer (model fallback chain)

This module does NOT:
    - Retry a strategy
    - Run strategies concurrently (trial order is significant)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

logger = logging.getLogger("callnote.fallback")


class OutcomeKind(str, Enum):
    """Tag carried by every strategy result."""

    SUCCESS = "success"
    SKIP = "skip"
    FATAL = "fatal"


@dataclass(frozen=True)
class Outcome:
    """Tagged result of a single strategy attempt."""

    kind: OutcomeKind
    value: Any = None
    reason: str = ""
    error: BaseException | None = None

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(OutcomeKind.SUCCESS, value=value)

    @classmethod
    def skip(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.SKIP, reason=reason)

    @classmethod
    def fatal(cls, error: BaseException) -> "Outcome":
        return cls(OutcomeKind.FATAL, reason=str(error), error=error)


class StrategiesExhausted(Exception):
    """Raised when every strategy in a chain reported SKIP."""

    def __init__(self, skipped: list[tuple[str, str]], message: str | None = None):
        self.skipped = skipped
        names = ", ".join(name for name, _ in skipped) or "none"
        super().__init__(message or f"All strategies exhausted (tried: {names}).")


Strategy = tuple[str, Callable[[], Outcome]]


def run_in_order(
    strategies: Iterable[Strategy],
    exhausted: Callable[[list[tuple[str, str]]], Exception] = StrategiesExhausted,
) -> tuple[str, Any]:
    """
    Try each ``(name, attempt)`` pair in order.

    Args:
        strategies: Ordered ``(name, attempt)`` pairs.  ``attempt`` takes no
                    arguments and returns an Outcome.
        exhausted:  Factory for the exception raised when all strategies
                    skipped.  Receives the ``(name, reason)`` skip log.

    Returns:
        ``(name, value)`` of the first successful strategy.

    Raises:
        The strategy's own error on FATAL, or ``exhausted(skipped)``.
    """
    skipped: list[tuple[str, str]] = []

    for name, attempt in strategies:
        outcome = attempt()

        if outcome.kind is OutcomeKind.SUCCESS:
            if skipped:
                logger.info(
                    "Strategy '%s' succeeded after %d skipped.", name, len(skipped),
                )
            return name, outcome.value

        if outcome.kind is OutcomeKind.SKIP:
            logger.warning("Strategy '%s' skipped: %s", name, outcome.reason)
            skipped.append((name, outcome.reason))
            continue

        logger.warning("Strategy '%s' failed fatally: %s", name, outcome.reason)
        if outcome.error is not None:
            raise outcome.error
        raise RuntimeError(f"Strategy '{name}' failed: {outcome.reason}")

    raise exhausted(skipped)
