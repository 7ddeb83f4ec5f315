"""UTF-8 text and JSON document helpers for the task database."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

PathLike = Path | str


def read_text(path: PathLike, errors: str = "strict") -> str:
    p = path if isinstance(path, Path) else Path(path)
    return p.read_text(encoding="utf-8", errors=errors)


def write_text(path: PathLike, text: str) -> None:
    p = path if isinstance(path, Path) else Path(path)
    p.write_text(text, encoding="utf-8")


def read_json(path: PathLike) -> Any:
    """Parse a JSON document. Raises ``FileNotFoundError`` when absent."""
    return json.loads(read_text(path))


def write_json_atomic(path: PathLike, data: Any) -> None:
    """Write *data* as indented JSON via a sibling temp file and ``os.replace``.

    Readers never observe a half-written document.
    """
    p = path if isinstance(path, Path) else Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=p.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, p)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
