"""
Processor builder — maps Settings to a wired InvoiceProcessor.

The reference (file-based) handlers are selected and configured from
settings so a local run needs no code:

    Filter by suffix → List inbox → Parse JSON → Required fields →
    Normalize → Load (HTTP or directory) → Save JSON → Archive

Applications with their own storage or target systems construct
InvoiceProcessor directly with their own handlers instead.
"""

from __future__ import annotations

from pathlib import Path

from invoice_processor.core.config import Settings, settings as default_settings
from invoice_processor.core.logging import get_logger
from invoice_processor.handlers.json_parser import JsonInvoiceParser, SourceFileInvoiceBuilder
from invoice_processor.handlers.loaders import HttpInvoiceLoader, JsonDirectoryLoader
from invoice_processor.handlers.local_files import (
    LocalFileDisposer,
    LocalFileRetriever,
    SuffixInputFilter,
)
from invoice_processor.handlers.rectifiers import NormalizingRectifier
from invoice_processor.handlers.savers import JsonDirectorySaver
from invoice_processor.handlers.validators import RequiredFieldsValidator
from invoice_processor.pipeline.handlers import InvoiceLoadStepHandler
from invoice_processor.pipeline.processor import InvoiceProcessor

logger = get_logger(__name__)


def _loader(cfg: Settings, output_dir: Path) -> InvoiceLoadStepHandler:
    if cfg.LOADER_URL:
        return HttpInvoiceLoader(
            url=cfg.LOADER_URL,
            api_key=cfg.LOADER_API_KEY,
            timeout=cfg.LOADER_TIMEOUT,
        )
    return JsonDirectoryLoader(output_dir / "loaded")


def build_local_processor(
    cfg: Settings | None = None,
    validation_threshold: float | None = None,
) -> InvoiceProcessor:
    """
    Build a processor for JSON invoices on the local filesystem.

    Args:
        cfg: Settings to use (defaults to the module-level settings).
        validation_threshold: Overrides cfg.VALIDATION_THRESHOLD.
    """
    cfg = cfg or default_settings
    output_dir = Path(cfg.OUTPUT_DIR)
    threshold = validation_threshold if validation_threshold is not None else cfg.VALIDATION_THRESHOLD
    # Raw documents are archived, never deleted, so failed ones can be re-submitted
    archive_dir = Path(cfg.ARCHIVE_DIR) if cfg.ARCHIVE_DIR else output_dir / "archive"

    processor = InvoiceProcessor(
        input_filter=SuffixInputFilter(cfg.ACCEPTED_SUFFIXES) if cfg.ACCEPTED_SUFFIXES else None,
        retriever=LocalFileRetriever(),
        parser=JsonInvoiceParser(),
        validators=[RequiredFieldsValidator(cfg.REQUIRED_FIELDS)],
        validation_threshold=threshold,
        loader=_loader(cfg, output_dir),
        rectifier=NormalizingRectifier(defaults=cfg.FIELD_DEFAULTS),
        saver=JsonDirectorySaver(output_dir / "succeeded", output_dir / "failed"),
        disposer=LocalFileDisposer(archive_dir),
        failed_invoice_builder=SourceFileInvoiceBuilder(),
    )

    logger.info(
        "Processor built",
        threshold=processor.validation_threshold,
        required_fields=cfg.REQUIRED_FIELDS,
        loader="http" if cfg.LOADER_URL else "directory",
        output_dir=str(output_dir),
        archive_dir=str(archive_dir),
    )
    return processor
