"""JSON file helpers shared by the state store and webhook registry."""

from __future__ import annotations

import json
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from bountyhook.exceptions import PersistenceError


def read_json(path: Path) -> Any | None:
    """Read a JSON document, returning None if the file does not exist.

    Raises:
        ValueError: If the file exists but is not valid JSON.
        OSError: If the file cannot be read.
    """
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def write_json_atomic(path: Path, data: Any) -> None:
    """Overwrite ``path`` with ``data`` as JSON in a single rename.

    The document is written to a temporary file in the same directory and
    moved over the target, so readers never see a partial file.

    Raises:
        PersistenceError: If the file cannot be written.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            json.dump(data, tmp, indent=2)
            tmp.flush()
        Path(tmp_name).replace(path)
    except (OSError, TypeError, ValueError) as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise PersistenceError(f"Failed to write {path}: {e}") from e
