"""
Record validators — required fields and pydantic schema checks.

Each validator returns a score in [0.0, 1.0] rather than pass/fail,
so the processor can combine several of them against one threshold.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from invoice_processor.core.logging import get_logger
from invoice_processor.pipeline.handlers import ParseResultValidator

logger = get_logger(__name__)

_MISSING = object()


def _lookup(record: Mapping[str, Any], dotted: str) -> Any:
    """Resolve "seller.name" style paths through nested dicts."""
    value: Any = record
    for part in dotted.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _is_empty(value: Any) -> bool:
    if value is _MISSING or value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple, set)):
        return not value
    return False


class RequiredFieldsValidator(ParseResultValidator[Mapping[str, Any]]):
    """Score = fraction of required fields that are present and non-empty."""

    def __init__(self, fields: Iterable[str]) -> None:
        self._fields = list(fields)

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    async def validate(self, record: Mapping[str, Any]) -> float:
        if not self._fields:
            return 1.0
        if not isinstance(record, Mapping):
            return 0.0

        missing = [f for f in self._fields if _is_empty(_lookup(record, f))]
        if missing:
            logger.debug("Required fields missing", missing=missing)
        return (len(self._fields) - len(missing)) / len(self._fields)


class PydanticModelValidator(ParseResultValidator[Mapping[str, Any]]):
    """
    Validate the record against a pydantic model.

    A fully valid record scores 1.0.  Otherwise the score drops by the
    share of model fields that produced at least one error.
    """

    def __init__(self, model: type[BaseModel]) -> None:
        self._model = model

    async def validate(self, record: Mapping[str, Any]) -> float:
        try:
            self._model.model_validate(record)
            return 1.0
        except ValidationError as exc:
            total = len(self._model.model_fields) or 1
            errored = {str(err["loc"][0]) if err["loc"] else "__root__" for err in exc.errors()}
            logger.debug(
                "Schema validation failed",
                model=self._model.__name__,
                errored_fields=sorted(errored),
            )
            return max(0.0, 1.0 - len(errored) / total)
