"""
Run and document state carried through one InvoiceProcessor.process() call.

RunContext lives for exactly one call and is never shared between calls,
so the processor itself stays free of mutable state.  DocumentContext
tracks one raw document through its state machine; the record it holds
is the single logical value threaded through validate → rectify →
validate → load/save.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from invoice_processor.core.constants import (
    STATE_TRANSITIONS,
    TERMINAL_STATES,
    DocumentState,
    RunStatus,
)
from invoice_processor.pipeline.handlers import RawDocument


# ═══════════════════════════════════════════════════════════
#  DocumentContext — per-document state within a run
# ═══════════════════════════════════════════════════════════

@dataclass
class DocumentContext:
    """
    State of one raw document within a run.

    Args:
        index: Position of the document in retrieval order.
        document: The raw document handle from the retriever.
        record: Parsed record, or None while unparsed / when parsing failed.
        state: Current DocumentState.
        score: Last validation score, if the record was scored.
        rectified: True once the rectifier reported a change.
        error: Error message of the per-document failure, if any.
    """

    index: int
    document: RawDocument
    record: Any = None
    state: DocumentState = DocumentState.RETRIEVED
    score: float | None = None
    rectified: bool = False
    error: str | None = None
    failed_step: str | None = None
    history: list[DocumentState] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.history.append(self.state)

    def advance(self, state: DocumentState) -> None:
        """Move to the next state.  States are never revisited."""
        if state not in STATE_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal document transition {self.state} -> {state}"
            )
        self.state = state
        self.history.append(state)

    def fail(self, step_name: str, exc: BaseException) -> None:
        """Record the per-document failure that ended the processing steps."""
        self.failed_step = step_name
        self.error = f"{type(exc).__name__}: {exc}"

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def succeeded(self) -> bool:
        return self.state == DocumentState.SAVED_SUCCESS

    @property
    def duration_ms(self) -> int:
        return int((datetime.now(timezone.utc) - self.started_at).total_seconds() * 1000)

    def to_log_dict(self) -> dict[str, Any]:
        """Compact summary for the per-document outcome log line."""
        return {
            "document_index": self.index,
            "state": self.state,
            "score": self.score,
            "rectified": self.rectified,
            "failed_step": self.failed_step,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


# ═══════════════════════════════════════════════════════════
#  RunContext — one process() call
# ═══════════════════════════════════════════════════════════

@dataclass
class RunContext:
    """Carries the documents and their outcomes for one process() call."""

    input: Any
    execution_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: RunStatus = RunStatus.RUNNING
    documents: list[RawDocument] = field(default_factory=list)
    outcomes: list[DocumentContext] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def new_document(self, index: int, document: RawDocument) -> DocumentContext:
        doc_ctx = DocumentContext(index=index, document=document)
        self.outcomes.append(doc_ctx)
        return doc_ctx

    @property
    def succeeded(self) -> int:
        return sum(1 for d in self.outcomes if d.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for d in self.outcomes if d.state == DocumentState.SAVED_FAILURE)

    @property
    def duration_ms(self) -> int:
        return int((datetime.now(timezone.utc) - self.started_at).total_seconds() * 1000)

    def to_summary_dict(self) -> dict[str, Any]:
        """Compact summary for logging."""
        return {
            "execution_id": self.execution_id,
            "status": self.status,
            "total_documents": len(self.documents),
            "succeeded": self.succeeded,
            "failed": self.failed,
            "duration_ms": self.duration_ms,
        }
