"""JSON invoice parser — one JSON object per file."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from invoice_processor.pipeline.errors import ParseError
from invoice_processor.pipeline.handlers import FailedInvoiceBuilder, InvoiceParserStepHandler

# Set on placeholder records built for documents that could not be parsed
PARSE_FAILED_KEY = "parse_failed"


class JsonInvoiceParser(InvoiceParserStepHandler[dict[str, Any]]):
    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding

    async def parse_invoice(self, document: str | os.PathLike) -> dict[str, Any]:
        path = Path(document)
        try:
            data = json.loads(path.read_text(encoding=self._encoding))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ParseError(
                f"Could not read invoice JSON from {path.name}: {exc}",
                step_name="parse_invoice",
                details={"path": str(path)},
            ) from exc

        if not isinstance(data, dict):
            raise ParseError(
                f"Invoice file {path.name} must contain a JSON object, got {type(data).__name__}",
                step_name="parse_invoice",
                details={"path": str(path)},
            )
        return data


class SourceFileInvoiceBuilder(FailedInvoiceBuilder[dict[str, Any]]):
    """Placeholder record for unparseable files: just enough to trace the source."""

    async def build_for_error(self, document: str | os.PathLike) -> dict[str, Any]:
        path = Path(document)
        return {
            "invoice_id": None,
            "source_file": path.name,
            PARSE_FAILED_KEY: True,
        }
