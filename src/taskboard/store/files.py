# src/taskboard/store/files.py

"""
Shared persistence helpers.

- JSON read/write with OS errors mapped to StorageIOError
  and decode errors mapped to CorruptRecordError,
- atomic writes (temp file + os.replace),
- `ListMapFile`: a mapping of key -> ordered list of ids held in memory and
  rewritten on every mutation (board, link and notes indexes).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from ..core.errors import CorruptRecordError, NotFoundError, StorageIOError
from ..tasks.task_models import SCHEMA_VERSION

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageIOError(f"Cannot create directory: {e}", path) from e


def atomic_write_json(path: Path, data: Any) -> None:
    """
    Write JSON to `path` atomically.

    The payload goes to a sibling temp file first and is then renamed over the
    target, so readers see either the old or the new content.
    """
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise CorruptRecordError(f"Cannot encode JSON: {e}", path) from e
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(payload, "utf-8")
        os.replace(tmp, path)
    except OSError as e:
        raise StorageIOError(f"Write failed: {e}", path) from e


def read_json(path: Path, *, entity_id: str | None = None) -> Any:
    try:
        raw = path.read_text("utf-8")
    except FileNotFoundError:
        raise NotFoundError(entity_id or path.name, path) from None
    except OSError as e:
        raise StorageIOError(f"Read failed: {e}", path) from e
    try:
        return json.loads(raw)
    except ValueError as e:
        raise CorruptRecordError(f"Cannot decode JSON: {e}", path) from e


def remove_file(path: Path, *, entity_id: str | None = None) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        raise NotFoundError(entity_id or path.name, path) from None
    except OSError as e:
        raise StorageIOError(f"Delete failed: {e}", path) from e


class ListMapFile:
    """
    On-disk mapping of key -> list[str].

    File layout: {"schema": 1, "<field>": {"key": ["a", "b"], ...}}.
    Key order and list order are preserved.
    """

    def __init__(self, path: Path, field: str) -> None:
        self.path = Path(path)
        self.field = field
        self.data: dict[str, list[str]] = {}
        self.existed = False

    def load(self) -> None:
        if not self.path.exists():
            self.data = {}
            self.existed = False
            return
        doc = read_json(self.path)
        if not isinstance(doc, dict) or doc.get("schema") != SCHEMA_VERSION:
            raise CorruptRecordError(
                f"Unsupported schema in {self.path.name} (expected {SCHEMA_VERSION})", self.path
            )
        body = doc.get(self.field)
        if not isinstance(body, dict):
            raise CorruptRecordError(f"Missing '{self.field}' mapping", self.path)

        data: dict[str, list[str]] = {}
        for key, items in body.items():
            if not isinstance(items, list) or not all(isinstance(x, str) for x in items):
                raise CorruptRecordError(f"Entry {key!r} is not a list of ids", self.path)
            data[str(key)] = list(items)
        self.data = data
        self.existed = True

    def save(self) -> None:
        atomic_write_json(self.path, {"schema": SCHEMA_VERSION, self.field: self.data})
        self.existed = True
