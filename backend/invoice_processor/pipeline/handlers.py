"""
Step handler contracts — the narrow capabilities the processor composes.

Each capability is an independent abstract base class.  The processor
holds at most one instance of each (plus 1..N validators) and never
inspects the documents or records flowing through them.

Type parameters:
    I — the input token handed to InvoiceProcessor.process()
    T — the parsed record produced by the parser
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

I = TypeVar("I")
T = TypeVar("T")

# Opaque handle to retrieved raw content (a Path, an object key, bytes...).
RawDocument = Any


class InputFilterStepHandler(ABC, Generic[I]):
    """Decides whether an input is worth processing at all."""

    @abstractmethod
    async def filter(self, input: I) -> bool:
        """Return True if the input passes the filter, False to skip it."""
        ...


class FileRetrievalStepHandler(ABC, Generic[I]):
    """Turns one input into the raw documents it refers to."""

    @abstractmethod
    async def retrieve_file(self, input: I) -> Sequence[RawDocument]:
        """
        Retrieve the raw invoice documents for the input, in order.

        Raising here aborts the whole run: nothing is parsed, saved
        or disposed.
        """
        ...


class InvoiceParserStepHandler(ABC, Generic[T]):
    """Parses one raw document into a structured record."""

    @abstractmethod
    async def parse_invoice(self, document: RawDocument) -> T:
        ...


class ParseResultValidator(ABC, Generic[T]):
    """Scores a parsed record."""

    @abstractmethod
    async def validate(self, record: T) -> float:
        """
        Return a score in [0.0, 1.0]: 1.0 is a perfect record,
        0.0 a complete failure.
        """
        ...


@dataclass
class RectifiedInvoice(Generic[T]):
    """Returned by a rectifier that replaced the record instead of mutating it."""

    record: T


class ParseRectificationStepHandler(ABC, Generic[T]):
    """Attempts one automated repair of a record that failed validation."""

    @abstractmethod
    async def rectify_parsed_invoice(self, record: T) -> bool | RectifiedInvoice[T]:
        """
        Repair the record.

        Returns True if the record was modified in place, False if it
        was left as-is, or a RectifiedInvoice wrapping a replacement.
        """
        ...


class InvoiceLoadStepHandler(ABC, Generic[T]):
    """Loads a valid record into the target system."""

    @abstractmethod
    async def load_invoice(self, record: T) -> None:
        ...


class ParseSaveStepHandler(ABC, Generic[T]):
    """Persists the outcome of a document and notifies interested parties."""

    @abstractmethod
    async def save_and_notify_success(self, record: T) -> None:
        ...

    @abstractmethod
    async def save_and_notify_failure(
        self,
        document: RawDocument,
        record: T | None,
    ) -> None:
        """record is None when the document could not be parsed."""
        ...


class DisposeStepHandler(ABC):
    """Releases the raw documents of a run once all of them are settled."""

    @abstractmethod
    async def dispose(self, documents: list[RawDocument]) -> None:
        ...


class FailedInvoiceBuilder(ABC, Generic[T]):
    """Builds a placeholder record for a document that failed to parse."""

    @abstractmethod
    async def build_for_error(self, document: RawDocument) -> T:
        ...
