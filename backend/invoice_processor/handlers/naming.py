"""
File naming for handlers that write records to disk.

Record ids come from parsed documents and are untrusted, so they are
reduced to a single safe path component before use as a file name.
"""

from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Any

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_file_stem(value: Any) -> str | None:
    """
    Turn a record id or document name into a file stem.

    Separators and other unsafe characters collapse to "_", leading and
    trailing dots are dropped, so "../escaped" becomes "escaped".
    Returns None when nothing usable is left.
    """
    if value is None:
        return None
    stem = _UNSAFE_CHARS.sub("_", str(value)).strip("._")
    return stem or None


def unique_json_path(directory: Path, stem: str) -> Path:
    """<directory>/<stem>.json, suffixed with a short uuid if that file exists."""
    path = directory / f"{stem}.json"
    if path.exists():
        path = directory / f"{stem}-{uuid.uuid4().hex[:8]}.json"
    return path
