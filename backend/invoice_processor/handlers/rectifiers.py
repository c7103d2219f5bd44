"""
NormalizingRectifier — cheap, deterministic repairs for invalid records.

Trims whitespace from string values and fills missing or blank
top-level fields from configured defaults.  The record is mutated in
place; the return value tells the processor whether anything changed.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from invoice_processor.core.logging import get_logger
from invoice_processor.pipeline.errors import RectificationError
from invoice_processor.pipeline.handlers import ParseRectificationStepHandler

logger = get_logger(__name__)


class NormalizingRectifier(ParseRectificationStepHandler[MutableMapping[str, Any]]):
    def __init__(
        self,
        defaults: Mapping[str, Any] | None = None,
        strip_strings: bool = True,
    ) -> None:
        self._defaults = dict(defaults or {})
        self._strip_strings = strip_strings

    async def rectify_parsed_invoice(self, record: MutableMapping[str, Any]) -> bool:
        if not isinstance(record, MutableMapping):
            raise RectificationError(
                f"Cannot rectify a {type(record).__name__}, expected a mapping",
                step_name="rectify_parsed_invoice",
            )

        changed: list[str] = []

        if self._strip_strings:
            changed.extend(self._strip(record, prefix=""))

        for key, default in self._defaults.items():
            current = record.get(key)
            if current is None or (isinstance(current, str) and not current.strip()):
                record[key] = default
                changed.append(key)

        if changed:
            logger.info("Record rectified", fields=sorted(set(changed)))
        return bool(changed)

    def _strip(self, record: MutableMapping[str, Any], prefix: str) -> list[str]:
        changed = []
        for key, value in record.items():
            if isinstance(value, str):
                stripped = value.strip()
                if stripped != value:
                    record[key] = stripped
                    changed.append(f"{prefix}{key}")
            elif isinstance(value, MutableMapping):
                changed.extend(self._strip(value, prefix=f"{prefix}{key}."))
        return changed
