"""
Unit Tests — structured logging
════════════════════════════════
✅ Named loggers can be created and used before and after setup_logging
✅ The processor logs through them with execution_id bound
✅ JSON rendering emits one parseable line per event
"""

from __future__ import annotations

import json

import pytest
import structlog
from structlog.testing import capture_logs

from invoice_processor.core.logging import get_logger, setup_logging
from tests.conftest import INPUT

pytestmark = pytest.mark.unit


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_named_logger_emits_events():
    logger = get_logger("invoice_processor.handlers.savers")

    with capture_logs() as logs:
        logger.info("Invoice loaded", invoice_id="INV-1")

    assert logs == [{"event": "Invoice loaded", "invoice_id": "INV-1", "log_level": "info"}]


async def test_processor_logs_filtered_input(processor, input_filter):
    input_filter.filter.return_value = False

    with capture_logs() as logs:
        await processor.process(INPUT)

    assert [entry["event"] for entry in logs] == ["Input filtered out, nothing to process"]
    assert logs[0]["execution_id"]


def test_json_output_renders_one_line_per_event(capsys, reset_structlog):
    setup_logging("INFO", json_output=True)

    get_logger("invoice_processor.tests").info("Run finished", succeeded=2)
    get_logger("invoice_processor.tests").debug("dropped below INFO")

    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert len(lines) == 1
    event = json.loads(lines[0])
    assert event["event"] == "Run finished"
    assert event["succeeded"] == 2
    assert event["level"] == "info"
