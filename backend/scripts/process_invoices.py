#!/usr/bin/env python3
"""
Process a local invoice file or inbox directory.

Builds the file-based processor from settings (env vars / .env),
optionally overridden on the command line, and runs one input through it.

Usage:
    cd backend
    python -m scripts.process_invoices ./inbox
    python -m scripts.process_invoices ./inbox/INV-001.json --threshold 0.75 --output-dir ./out
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from invoice_processor.core.config import settings
from invoice_processor.core.logging import get_logger, setup_logging
from invoice_processor.pipeline.builder import build_local_processor
from invoice_processor.pipeline.errors import ProcessorError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="process_invoices",
        description="Parse, validate and load invoice files from a local path.",
    )
    parser.add_argument("path", help="Invoice file or inbox directory")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Validation threshold in (0, 1] (default: VALIDATION_THRESHOLD)")
    parser.add_argument("--output-dir", default=None,
                        help="Where loaded / succeeded / failed records are written")
    parser.add_argument("--archive-dir", default=None,
                        help="Where processed files are moved (default: OUTPUT_DIR/archive)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    cfg = settings.model_copy(update={
        key: value
        for key, value in {
            "OUTPUT_DIR": args.output_dir,
            "ARCHIVE_DIR": args.archive_dir,
        }.items()
        if value is not None
    })

    setup_logging(
        args.log_level or cfg.LOG_LEVEL,
        json_output=args.json_logs or cfg.LOG_JSON,
    )
    logger = get_logger("scripts.process_invoices")

    try:
        processor = build_local_processor(cfg, validation_threshold=args.threshold)
        asyncio.run(processor.process(args.path))
    except ProcessorError as exc:
        logger.error("Invoice processing aborted", path=args.path, error=str(exc))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
