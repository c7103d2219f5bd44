"""
Local filesystem handlers — input filter, retriever and disposer.

The input token is a path: either a single invoice file or a
directory ("inbox") whose files are processed in name order.
"""

from __future__ import annotations

import os
import shutil
import uuid
from collections.abc import Iterable
from pathlib import Path

from invoice_processor.core.logging import get_logger
from invoice_processor.pipeline.errors import DisposeError, RetrievalError
from invoice_processor.pipeline.handlers import (
    DisposeStepHandler,
    FileRetrievalStepHandler,
    InputFilterStepHandler,
)

logger = get_logger(__name__)


class SuffixInputFilter(InputFilterStepHandler[str | os.PathLike]):
    """Accept directories and files whose suffix is in the allowed set."""

    def __init__(self, suffixes: Iterable[str]) -> None:
        self._suffixes = {s.lower() if s.startswith(".") else f".{s.lower()}" for s in suffixes}

    async def filter(self, input: str | os.PathLike) -> bool:
        path = Path(input)
        if path.is_dir():
            return True
        accepted = path.suffix.lower() in self._suffixes
        if not accepted:
            logger.info("Input skipped by suffix filter", path=str(path), suffix=path.suffix)
        return accepted


class LocalFileRetriever(FileRetrievalStepHandler[str | os.PathLike]):
    """Resolve a file or a directory into a list of local file paths."""

    def __init__(self, pattern: str = "*") -> None:
        self._pattern = pattern

    async def retrieve_file(self, input: str | os.PathLike) -> list[Path]:
        path = Path(input)

        if path.is_file():
            logger.info("Using local file directly", path=str(path))
            return [path]

        if not path.is_dir():
            raise RetrievalError(
                f"Input path does not exist: {path}",
                step_name="retrieve_file",
                details={"path": str(path)},
            )

        files = sorted(p for p in path.glob(self._pattern) if p.is_file())
        logger.info(
            "Inbox listed",
            directory=str(path),
            pattern=self._pattern,
            files=len(files),
        )
        return files


class LocalFileDisposer(DisposeStepHandler):
    """
    Move processed files to an archive directory, or delete them when
    no archive directory is configured.

    A file already in the archive under the same name is kept; the
    newcomer gets a short uuid suffix.
    """

    def __init__(self, archive_dir: str | os.PathLike | None = None) -> None:
        self._archive_dir = Path(archive_dir) if archive_dir else None

    async def dispose(self, documents: list[Path]) -> None:
        if self._archive_dir is not None:
            self._archive_dir.mkdir(parents=True, exist_ok=True)

        for document in documents:
            path = Path(document)
            if not path.exists():
                logger.debug("Raw document already gone", path=str(path))
                continue
            try:
                if self._archive_dir is not None:
                    target = self._archive_target(path)
                    shutil.move(str(path), str(target))
                    logger.info("Raw document archived", path=str(path), archived_to=str(target))
                else:
                    path.unlink()
                    logger.info("Raw document deleted", path=str(path))
            except OSError as exc:
                raise DisposeError(
                    f"Failed to dispose {path}: {exc}",
                    step_name="dispose",
                    details={"path": str(path)},
                ) from exc

    def _archive_target(self, path: Path) -> Path:
        target = self._archive_dir / path.name
        if target.exists():
            target = self._archive_dir / f"{path.stem}-{uuid.uuid4().hex[:8]}{path.suffix}"
        return target
