"""
Invoice loaders — push valid records into the target system.

HttpInvoiceLoader POSTs each record to a REST endpoint (an ERP or
accounting API).  JsonDirectoryLoader writes records to a directory,
for local runs without a target system.
"""

from __future__ import annotations

import json
import os
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx

from invoice_processor.core.logging import get_logger
from invoice_processor.handlers.naming import safe_file_stem
from invoice_processor.pipeline.errors import LoadError
from invoice_processor.pipeline.handlers import InvoiceLoadStepHandler

logger = get_logger(__name__)

# Default timeout for API calls (seconds)
DEFAULT_TIMEOUT = 30


class HttpInvoiceLoader(InvoiceLoadStepHandler[Mapping[str, Any]]):
    """
    POST each record as JSON to the target system.

    A shared httpx.AsyncClient can be injected (connection pooling,
    tests with httpx.MockTransport); otherwise one is opened per call.
    """

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: int = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        expected_status_codes: list[int] | None = None,
    ) -> None:
        """
        Args:
            url: Endpoint receiving one invoice per request.
            api_key: Optional bearer token.
            timeout: HTTP timeout in seconds (ignored for injected clients).
            client: Optional shared AsyncClient.
            expected_status_codes: Acceptable status codes (default: [200, 201, 202]).
        """
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._client = client
        self._expected_status = expected_status_codes or [200, 201, 202]

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def load_invoice(self, record: Mapping[str, Any]) -> None:
        logger.info("Loading invoice", url=self._url, invoice_id=record.get("invoice_id"))

        try:
            if self._client is not None:
                response = await self._client.post(self._url, headers=self._headers(), json=dict(record))
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, headers=self._headers(), json=dict(record))
        except httpx.HTTPError as exc:
            raise LoadError(
                f"Invoice load request failed: {exc}",
                step_name="load_invoice",
                details={"url": self._url},
            ) from exc

        if response.status_code not in self._expected_status:
            raise LoadError(
                f"Target system returned {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
                step_name="load_invoice",
                details={"url": self._url},
            )

        logger.info("Invoice loaded", status_code=response.status_code)


class JsonDirectoryLoader(InvoiceLoadStepHandler[Mapping[str, Any]]):
    """
    Write each record to <target_dir>/<id>.json.

    Loading the same invoice id again replaces the file, as an upsert
    into a target system would.
    """

    def __init__(self, target_dir: str | os.PathLike, id_field: str = "invoice_id") -> None:
        self._target_dir = Path(target_dir)
        self._id_field = id_field

    async def load_invoice(self, record: Mapping[str, Any]) -> None:
        record_id = safe_file_stem(record.get(self._id_field)) or str(uuid.uuid4())
        target = self._target_dir / f"{record_id}.json"
        try:
            self._target_dir.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(record, indent=2, default=str), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            raise LoadError(
                f"Failed to write invoice {record_id}: {exc}",
                step_name="load_invoice",
                details={"path": str(target)},
            ) from exc
        logger.info("Invoice loaded", path=str(target))
