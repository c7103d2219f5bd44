"""
ValidationScorer — combines independent validator scores into one decision.

Policy: the record's score is the arithmetic mean of every validator's
score, and the record is valid when that mean reaches the threshold.
Validators are called on every score() — rectification may have changed
the record in ways only the validators can see.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Generic, TypeVar

from invoice_processor.pipeline.errors import ConfigurationError
from invoice_processor.pipeline.handlers import ParseResultValidator

T = TypeVar("T")

DEFAULT_VALIDATION_THRESHOLD = 1.0


def combine_scores(scores: Iterable[float]) -> float:
    """Arithmetic mean of the scores.  An empty set scores 0.0."""
    scores = list(scores)
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def check_threshold(threshold: float) -> float:
    """Return the threshold as a float, or raise if it is outside (0, 1]."""
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ConfigurationError(
            f"Validation threshold must be a number, got {type(threshold).__name__}",
            details={"threshold": repr(threshold)},
        )
    if math.isnan(threshold) or not 0.0 < threshold <= 1.0:
        raise ConfigurationError(
            f"Validation threshold must be in (0, 1], got {threshold}",
            details={"threshold": threshold},
        )
    return float(threshold)


class ValidationScorer(Generic[T]):
    """Scores records against a fixed, non-empty validator set."""

    def __init__(
        self,
        validators: Iterable[ParseResultValidator[T]] | None,
        threshold: float = DEFAULT_VALIDATION_THRESHOLD,
    ) -> None:
        # Materialise first so generators are not consumed by the checks
        validators = tuple(validators or ())
        if not validators:
            raise ConfigurationError("At least one validator is required")
        if any(v is None for v in validators):
            raise ConfigurationError("Validator set must not contain None")

        self._validators: tuple[ParseResultValidator[T], ...] = validators
        self._threshold = check_threshold(threshold)

    @property
    def validators(self) -> tuple[ParseResultValidator[T], ...]:
        return self._validators

    @property
    def threshold(self) -> float:
        return self._threshold

    async def score(self, record: T) -> float:
        """
        Mean score of the record across all validators.

        Validator exceptions are not caught here; the processor turns
        them into a failure for the current document.
        """
        scores = [await validator.validate(record) for validator in self._validators]
        return combine_scores(scores)

    def passes(self, score: float) -> bool:
        return score >= self._threshold

    async def is_valid(self, record: T) -> bool:
        return self.passes(await self.score(record))
