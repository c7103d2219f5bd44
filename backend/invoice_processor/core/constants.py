"""Shared constants and enums used across the application."""

from enum import StrEnum


class RunStatus(StrEnum):
    """Overall status of one process() call."""

    RUNNING = "RUNNING"
    FILTERED = "FILTERED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class DocumentState(StrEnum):
    """Where a single raw document is in its lifecycle."""

    RETRIEVED = "RETRIEVED"
    PARSED = "PARSED"
    PARSE_FAILED = "PARSE_FAILED"
    VALID = "VALID"
    INVALID = "INVALID"
    RECTIFY_ATTEMPTED = "RECTIFY_ATTEMPTED"
    STILL_INVALID = "STILL_INVALID"
    LOADED = "LOADED"
    SAVED_SUCCESS = "SAVED_SUCCESS"
    SAVED_FAILURE = "SAVED_FAILURE"


TERMINAL_STATES = frozenset({DocumentState.SAVED_SUCCESS, DocumentState.SAVED_FAILURE})

# Allowed forward moves.  Anything else is a bug in the processor.
STATE_TRANSITIONS: dict[DocumentState, frozenset[DocumentState]] = {
    DocumentState.RETRIEVED: frozenset({
        DocumentState.PARSED,
        DocumentState.PARSE_FAILED,
    }),
    DocumentState.PARSED: frozenset({
        DocumentState.VALID,
        DocumentState.INVALID,
        DocumentState.SAVED_FAILURE,
    }),
    DocumentState.PARSE_FAILED: frozenset({DocumentState.SAVED_FAILURE}),
    DocumentState.INVALID: frozenset({
        DocumentState.RECTIFY_ATTEMPTED,
        DocumentState.SAVED_FAILURE,
    }),
    DocumentState.RECTIFY_ATTEMPTED: frozenset({
        DocumentState.VALID,
        DocumentState.STILL_INVALID,
        DocumentState.SAVED_FAILURE,
    }),
    DocumentState.STILL_INVALID: frozenset({DocumentState.SAVED_FAILURE}),
    DocumentState.VALID: frozenset({
        DocumentState.LOADED,
        DocumentState.SAVED_FAILURE,
    }),
    DocumentState.LOADED: frozenset({DocumentState.SAVED_SUCCESS}),
    DocumentState.SAVED_SUCCESS: frozenset(),
    DocumentState.SAVED_FAILURE: frozenset(),
}
