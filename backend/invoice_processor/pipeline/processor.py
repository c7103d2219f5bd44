"""
InvoiceProcessor — the orchestrator that runs one input through the steps.

Responsibilities:
    - Skip filtered-out inputs
    - Retrieve the raw documents for the input (fatal on failure)
    - Parse, score, rectify and load each document, one at a time
    - Contain every per-document failure at the document boundary
    - Report exactly one outcome (success or failure) per document
    - Hand all raw documents to the disposer once, at the end of the run
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

import structlog

from invoice_processor.core.config import settings
from invoice_processor.core.constants import DocumentState, RunStatus
from invoice_processor.core.logging import get_logger
from invoice_processor.pipeline.context import DocumentContext, RunContext
from invoice_processor.pipeline.errors import ConfigurationError
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
from invoice_processor.pipeline.scoring import ValidationScorer

I = TypeVar("I")
T = TypeVar("T")


class InvoiceProcessor(Generic[I, T]):
    """
    Runs an input through filter → retrieve → (parse → validate →
    [rectify → validate] → load → save) per document → dispose.

    Usage::

        processor = InvoiceProcessor(
            retriever=LocalFileRetriever(),
            parser=JsonInvoiceParser(),
            validators=[RequiredFieldsValidator(["invoice_id", "total"])],
            validation_threshold=0.8,
            loader=HttpInvoiceLoader("https://erp.example.com/invoices"),
            rectifier=NormalizingRectifier(),
            saver=JsonDirectorySaver("out/ok", "out/failed"),
            disposer=LocalFileDisposer(),
        )
        await processor.process("/data/inbox")

    input_filter and disposer are optional; None means the step is
    skipped.  validation_threshold defaults to settings.VALIDATION_THRESHOLD
    (1.0 unless overridden), i.e. every validator must score perfectly.
    """

    def __init__(
        self,
        *,
        retriever: FileRetrievalStepHandler[I],
        parser: InvoiceParserStepHandler[T],
        validators: Sequence[ParseResultValidator[T]],
        loader: InvoiceLoadStepHandler[T],
        rectifier: ParseRectificationStepHandler[T],
        saver: ParseSaveStepHandler[T],
        input_filter: InputFilterStepHandler[I] | None = None,
        disposer: DisposeStepHandler | None = None,
        validation_threshold: float | None = None,
        failed_invoice_builder: FailedInvoiceBuilder[T] | None = None,
    ) -> None:
        mandatory = {
            "retriever": retriever,
            "parser": parser,
            "loader": loader,
            "rectifier": rectifier,
            "saver": saver,
        }
        missing = [name for name, handler in mandatory.items() if handler is None]
        if missing:
            raise ConfigurationError(
                f"Missing mandatory step handler(s): {', '.join(missing)}",
                details={"missing": missing},
            )

        if validation_threshold is None:
            validation_threshold = settings.VALIDATION_THRESHOLD

        self.scorer: ValidationScorer[T] = ValidationScorer(validators, validation_threshold)
        self.input_filter = input_filter
        self.retriever = retriever
        self.parser = parser
        self.loader = loader
        self.rectifier = rectifier
        self.saver = saver
        self.disposer = disposer
        self.failed_invoice_builder = failed_invoice_builder
        self.logger = get_logger("invoice_processor.processor")

    @property
    def validation_threshold(self) -> float:
        return self.scorer.threshold

    async def process(self, input: I) -> None:
        """
        Process every document behind the input.

        Only a retrieval failure (or a disposer failure) reaches the
        caller; per-document and reporting failures are contained.
        """
        run = RunContext(input=input)
        log = self.logger.bind(execution_id=run.execution_id)

        # ── Filter ────────────────────────────────────
        if self.input_filter is not None and not await self.input_filter.filter(input):
            run.status = RunStatus.FILTERED
            log.info("Input filtered out, nothing to process", input=repr(input))
            return

        # ── Retrieve (fatal on failure) ───────────────
        try:
            run.documents = list(await self.retriever.retrieve_file(input))
        except Exception as exc:
            run.status = RunStatus.FAILED
            log.error(
                "Document retrieval failed, aborting run",
                input=repr(input),
                error=str(exc),
            )
            raise

        log.info("Documents retrieved", input=repr(input), total_documents=len(run.documents))

        # ── Per-document processing ───────────────────
        for index, document in enumerate(run.documents):
            doc = run.new_document(index, document)
            doc_log = log.bind(document_index=index)

            loaded = await self._process_document(doc, doc_log)
            await self._report(doc, loaded, doc_log)

        # ── Dispose ───────────────────────────────────
        if self.disposer is not None:
            try:
                await self.disposer.dispose(run.documents)
            except Exception as exc:
                run.status = RunStatus.FAILED
                log.error("Disposing raw documents failed", error=str(exc), **run.to_summary_dict())
                raise

        run.status = RunStatus.COMPLETED
        log.info("Run finished", **run.to_summary_dict())

    # ─── Document boundary ─────────────────────────────

    async def _process_document(
        self,
        doc: DocumentContext,
        log: structlog.typing.FilteringBoundLogger,
    ) -> bool:
        """
        Parse, score, rectify and load one document.

        Returns True when the record was loaded.  Every exception raised
        by a step is converted into a failure of this document only.
        """
        step = "parse"
        try:
            doc.record = await self.parser.parse_invoice(doc.document)
            doc.advance(DocumentState.PARSED)

            step = "validate"
            if not await self._score(doc, DocumentState.INVALID):
                step = "rectify"
                doc.advance(DocumentState.RECTIFY_ATTEMPTED)
                if not await self._rectify(doc, log):
                    doc.advance(DocumentState.STILL_INVALID)
                    return False

                step = "validate"
                if not await self._score(doc, DocumentState.STILL_INVALID):
                    return False

            step = "load"
            await self.loader.load_invoice(doc.record)
            doc.advance(DocumentState.LOADED)
            return True

        except Exception as exc:
            doc.fail(step, exc)
            if step == "parse":
                doc.advance(DocumentState.PARSE_FAILED)
                doc.record = await self._build_failed_record(doc, log)
            log.warning(
                "Document step failed",
                step=step,
                error=doc.error,
                exc_info=True,
            )
            return False

    async def _score(self, doc: DocumentContext, invalid_state: DocumentState) -> bool:
        doc.score = await self.scorer.score(doc.record)
        valid = self.scorer.passes(doc.score)
        doc.advance(DocumentState.VALID if valid else invalid_state)
        return valid

    async def _rectify(
        self,
        doc: DocumentContext,
        log: structlog.typing.FilteringBoundLogger,
    ) -> bool:
        """Run the single rectification attempt.  A failing rectifier means 'not rectified'."""
        try:
            result = await self.rectifier.rectify_parsed_invoice(doc.record)
        except Exception as exc:
            doc.fail("rectify", exc)
            log.warning(
                "Rectification failed, record left as-is",
                error=doc.error,
                exc_info=True,
            )
            return False

        if isinstance(result, RectifiedInvoice):
            doc.record = result.record
            doc.rectified = True
        else:
            doc.rectified = bool(result)

        log.debug("Rectification attempted", changed=doc.rectified, score_before=doc.score)
        return doc.rectified

    async def _build_failed_record(
        self,
        doc: DocumentContext,
        log: structlog.typing.FilteringBoundLogger,
    ) -> Any:
        if self.failed_invoice_builder is None:
            return None
        try:
            return await self.failed_invoice_builder.build_for_error(doc.document)
        except Exception as exc:
            log.warning("Building failed-invoice record failed, reporting without one", error=str(exc))
            return None

    async def _report(
        self,
        doc: DocumentContext,
        loaded: bool,
        log: structlog.typing.FilteringBoundLogger,
    ) -> None:
        """
        Send exactly one outcome for the document.

        Errors raised by the saver are logged and swallowed so the
        remaining documents and the dispose step still run.
        """
        doc.advance(DocumentState.SAVED_SUCCESS if loaded else DocumentState.SAVED_FAILURE)
        try:
            if loaded:
                await self.saver.save_and_notify_success(doc.record)
            else:
                await self.saver.save_and_notify_failure(doc.document, doc.record)
        except Exception as exc:
            log.warning(
                "Saving document outcome failed, continuing",
                outcome=doc.state,
                error=str(exc),
                exc_info=True,
            )

        log.info("Document processed", **doc.to_log_dict())
