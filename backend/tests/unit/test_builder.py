"""
Unit Tests — settings-driven processor and CLI
═══════════════════════════════════════════════
✅ build_local_processor wiring from Settings
✅ End-to-end run over a tmp inbox (success, rectified, failed, filtered)
✅ scripts.process_invoices exit codes
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from invoice_processor.core.config import Settings
from invoice_processor.handlers.loaders import HttpInvoiceLoader, JsonDirectoryLoader
from invoice_processor.pipeline.builder import build_local_processor
from invoice_processor.pipeline.errors import ConfigurationError
from scripts import process_invoices

pytestmark = pytest.mark.unit


def _write(path, payload):
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")


@pytest.fixture
def inbox(tmp_path):
    directory = tmp_path / "inbox"
    directory.mkdir()
    _write(directory / "001.json", {"invoice_id": "INV-1", "total": 100, "currency": "USD"})
    _write(directory / "002.json", {"invoice_id": "INV-2", "total": 5, "currency": ""})
    _write(directory / "003.json", {"invoice_id": "INV-3"})
    _write(directory / "004.json", "{not json")
    return directory


@pytest.fixture
def cfg(tmp_path):
    return Settings(
        OUTPUT_DIR=str(tmp_path / "out"),
        ARCHIVE_DIR=str(tmp_path / "archive"),
        REQUIRED_FIELDS=["invoice_id", "total", "currency"],
        FIELD_DEFAULTS={"currency": "EUR"},
        VALIDATION_THRESHOLD=1.0,
        LOADER_URL="",
    )


class TestBuildLocalProcessor:

    def test_uses_settings_threshold(self, cfg):
        assert build_local_processor(cfg).validation_threshold == 1.0

    def test_explicit_threshold_wins(self, cfg):
        assert build_local_processor(cfg, validation_threshold=0.5).validation_threshold == 0.5

    def test_invalid_threshold_rejected(self, cfg):
        with pytest.raises(ConfigurationError):
            build_local_processor(cfg, validation_threshold=1.5)

    def test_directory_loader_without_url(self, cfg):
        assert isinstance(build_local_processor(cfg).loader, JsonDirectoryLoader)

    def test_http_loader_with_url(self, cfg):
        cfg = cfg.model_copy(update={"LOADER_URL": "https://erp.test/invoices"})
        assert isinstance(build_local_processor(cfg).loader, HttpInvoiceLoader)

    def test_no_suffixes_means_no_filter(self, cfg):
        cfg = cfg.model_copy(update={"ACCEPTED_SUFFIXES": []})
        assert build_local_processor(cfg).input_filter is None


class TestEndToEnd:

    async def test_inbox_run(self, cfg, inbox, tmp_path):
        await build_local_processor(cfg).process(inbox)

        out = tmp_path / "out"
        assert sorted(p.name for p in (out / "loaded").iterdir()) == ["INV-1.json", "INV-2.json"]
        assert sorted(p.name for p in (out / "succeeded").iterdir()) == ["INV-1.json", "INV-2.json"]
        assert sorted(p.name for p in (out / "failed").iterdir()) == ["004.json", "INV-3.json"]

        rectified = json.loads((out / "succeeded" / "INV-2.json").read_text(encoding="utf-8"))
        assert rectified["currency"] == "EUR"

        unparsed = json.loads((out / "failed" / "004.json").read_text(encoding="utf-8"))
        assert unparsed["record"]["parse_failed"] is True

        assert list(inbox.iterdir()) == []
        assert len(list((tmp_path / "archive").iterdir())) == 4

    async def test_unparseable_document_is_recoverable_by_default(self, cfg, inbox, tmp_path):
        cfg = cfg.model_copy(update={"ARCHIVE_DIR": None})

        await build_local_processor(cfg).process(inbox)

        out = tmp_path / "out"
        envelope = json.loads((out / "failed" / "004.json").read_text(encoding="utf-8"))
        assert envelope["document"] == str(inbox / "004.json")
        assert (out / "archive" / "004.json").read_text(encoding="utf-8") == "{not json"

    async def test_filtered_input_touches_nothing(self, cfg, tmp_path):
        document = tmp_path / "invoice.pdf"
        _write(document, "%PDF")

        await build_local_processor(cfg).process(document)

        assert document.exists()
        assert not (tmp_path / "out").exists()


class TestCli:

    def test_successful_run_exits_zero(self, inbox, tmp_path, monkeypatch):
        monkeypatch.setattr(process_invoices, "settings", Settings(REQUIRED_FIELDS=["invoice_id"]))

        code = process_invoices.main([str(inbox), "--output-dir", str(tmp_path / "out")])

        assert code == 0
        assert len(list((tmp_path / "out" / "succeeded").iterdir())) == 3
        assert list(inbox.iterdir()) == []

    def test_missing_input_exits_one(self, tmp_path, monkeypatch):
        monkeypatch.setattr(process_invoices, "settings", Settings())
        assert process_invoices.main([str(tmp_path / "nowhere.json")]) == 1

    def test_bad_threshold_exits_one(self, inbox, tmp_path, monkeypatch):
        monkeypatch.setattr(process_invoices, "settings", Settings())
        code = process_invoices.main([str(inbox), "--threshold", "0", "--output-dir", str(tmp_path)])
        assert code == 1

    @pytest.mark.parametrize(
        "argv, expected_level",
        [([], "WARNING"), (["--log-level", "DEBUG"], "DEBUG")],
    )
    def test_log_level_comes_from_settings_or_flag(self, inbox, tmp_path, monkeypatch, argv, expected_level):
        monkeypatch.setattr(process_invoices, "settings", Settings(LOG_LEVEL="WARNING"))
        setup = MagicMock()
        monkeypatch.setattr(process_invoices, "setup_logging", setup)

        process_invoices.main([str(inbox), "--output-dir", str(tmp_path / "out"), *argv])

        setup.assert_called_once_with(expected_level, json_output=False)
