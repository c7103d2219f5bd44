"""
Invoice Processor — generic document processing orchestrator.

This package provides the processor that takes one input through
retrieval, per-document parsing, scored validation, a single
rectification attempt, loading and outcome reporting, with failures
contained per document.
"""

from invoice_processor.pipeline.errors import ConfigurationError, ProcessorError
from invoice_processor.pipeline.handlers import (
    DisposeStepHandler,
    FailedInvoiceBuilder,
    FileRetrievalStepHandler,
    InputFilterStepHandler,
    InvoiceLoadStepHandler,
    InvoiceParserStepHandler,
    ParseRectificationStepHandler,
    ParseResultValidator,
    ParseSaveStepHandler,
    RectifiedInvoice,
)
from invoice_processor.pipeline.processor import InvoiceProcessor
from invoice_processor.pipeline.scoring import ValidationScorer, combine_scores

__all__ = [
    "InvoiceProcessor",
    "ValidationScorer",
    "combine_scores",
    "ProcessorError",
    "ConfigurationError",
    "InputFilterStepHandler",
    "FileRetrievalStepHandler",
    "InvoiceParserStepHandler",
    "ParseResultValidator",
    "ParseRectificationStepHandler",
    "RectifiedInvoice",
    "InvoiceLoadStepHandler",
    "ParseSaveStepHandler",
    "DisposeStepHandler",
    "FailedInvoiceBuilder",
]
