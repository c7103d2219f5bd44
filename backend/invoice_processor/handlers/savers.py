"""
JsonDirectorySaver — persists document outcomes as JSON files.

Successful records land in success_dir; failures land in failure_dir
wrapped in an envelope that names the raw document, so an operator can
find and re-submit it.  Existing files are never overwritten: a name
that is already taken gets a short uuid suffix.  Every save is followed
by a structured notification log line.
"""

from __future__ import annotations

import json
import os
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from invoice_processor.core.logging import get_logger
from invoice_processor.handlers.json_parser import PARSE_FAILED_KEY
from invoice_processor.handlers.naming import safe_file_stem, unique_json_path
from invoice_processor.pipeline.errors import SaveError
from invoice_processor.pipeline.handlers import ParseSaveStepHandler, RawDocument

logger = get_logger(__name__)


class JsonDirectorySaver(ParseSaveStepHandler[Mapping[str, Any]]):
    def __init__(
        self,
        success_dir: str | os.PathLike,
        failure_dir: str | os.PathLike,
        id_field: str = "invoice_id",
    ) -> None:
        self._success_dir = Path(success_dir)
        self._failure_dir = Path(failure_dir)
        self._id_field = id_field

    async def save_and_notify_success(self, record: Mapping[str, Any]) -> None:
        record_id = self._record_id(record)
        path = self._write(self._success_dir, safe_file_stem(record_id) or str(uuid.uuid4()), dict(record))
        logger.info("Invoice processed successfully", invoice_id=record_id, path=str(path))

    async def save_and_notify_failure(
        self,
        document: RawDocument,
        record: Mapping[str, Any] | None,
    ) -> None:
        record_id = self._record_id(record)
        document_stem = Path(document).stem if isinstance(document, (str, os.PathLike)) else None
        stem = safe_file_stem(record_id) or safe_file_stem(document_stem) or str(uuid.uuid4())
        envelope = {
            "document": str(document),
            "record": dict(record) if record is not None else None,
            "failed_at": datetime.now(timezone.utc).isoformat(),
        }
        path = self._write(self._failure_dir, stem, envelope)
        logger.warning(
            "Invoice processing failed",
            document=str(document),
            invoice_id=record_id,
            parsed=self._was_parsed(record),
            path=str(path),
        )

    def _record_id(self, record: Mapping[str, Any] | None) -> str | None:
        if isinstance(record, Mapping) and record.get(self._id_field):
            return str(record[self._id_field])
        return None

    @staticmethod
    def _was_parsed(record: Mapping[str, Any] | None) -> bool:
        if record is None:
            return False
        return not (isinstance(record, Mapping) and record.get(PARSE_FAILED_KEY))

    def _write(self, directory: Path, stem: str, payload: dict[str, Any]) -> Path:
        path = directory / f"{stem}.json"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = unique_json_path(directory, stem)
            with path.open("x", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, default=str)
        except (OSError, TypeError, ValueError) as exc:
            raise SaveError(
                f"Failed to save {path}: {exc}",
                step_name="save",
                details={"path": str(path)},
            ) from exc
        return path
