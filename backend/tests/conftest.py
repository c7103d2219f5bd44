"""
Root conftest.py — shared fixtures for the processor tests.

Every collaborator is a MagicMock specced on its contract, so the
async methods come out as AsyncMock and calls can be asserted with
assert_awaited_*.  No test touches the network; file-based handlers
only use pytest's tmp_path.

How to run:
  pytest                   # all tests
  pytest -m unit           # unit tests only
"""

from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest

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
)
from invoice_processor.pipeline.processor import InvoiceProcessor

VALIDATION_THRESHOLD = 0.5
INPUT = "input"


@dataclass
class Invoice:
    """Mutable record used as T in processor tests."""

    value: str


# ─────────────────────────────────────────────────────────────────────────────
# Collaborator mocks
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def input_filter():
    handler = MagicMock(spec=InputFilterStepHandler)
    handler.filter.return_value = True
    return handler


@pytest.fixture
def retriever():
    return MagicMock(spec=FileRetrievalStepHandler)


@pytest.fixture
def parser():
    return MagicMock(spec=InvoiceParserStepHandler)


@pytest.fixture
def validator():
    return MagicMock(spec=ParseResultValidator)


@pytest.fixture
def loader():
    return MagicMock(spec=InvoiceLoadStepHandler)


@pytest.fixture
def rectifier():
    return MagicMock(spec=ParseRectificationStepHandler)


@pytest.fixture
def saver():
    return MagicMock(spec=ParseSaveStepHandler)


@pytest.fixture
def disposer():
    return MagicMock(spec=DisposeStepHandler)


@pytest.fixture
def failed_builder():
    return MagicMock(spec=FailedInvoiceBuilder)


@pytest.fixture
def document():
    """An opaque raw document handle."""
    return MagicMock(name="raw_document")


# ─────────────────────────────────────────────────────────────────────────────
# Processor factory
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def make_processor(input_filter, retriever, parser, validator, loader, rectifier, saver, disposer):
    """
    Factory: build an InvoiceProcessor wired to the mocks.

    Usage:
        processor = make_processor()
        processor = make_processor(input_filter=None, validators=[v1, v2])
    """
    def _build(**overrides):
        kwargs = dict(
            input_filter=input_filter,
            retriever=retriever,
            parser=parser,
            validators=[validator],
            validation_threshold=VALIDATION_THRESHOLD,
            loader=loader,
            rectifier=rectifier,
            saver=saver,
            disposer=disposer,
        )
        kwargs.update(overrides)
        return InvoiceProcessor(**kwargs)

    return _build


@pytest.fixture
def processor(make_processor):
    return make_processor()
