"""JsonFileStore — StoreBackend persisted to a single JSON file.

The file holds one object mapping each key to its document string, the
same shape browser local storage has. Every write rewrites the whole
file through a temporary sibling and ``os.replace``, so a crash mid-write
leaves the previous contents intact.

Two processes pointed at the same file see last-writer-wins semantics:
each write is based on a fresh read, but nothing serializes them.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonFileStore:
    """File-backed store. Reads the file on every access; never caches."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def fetch(self, key: str) -> str | None:
        return self._read_all().get(key)

    def store(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)

    # -- file helpers ---------------------------------------------------------

    def _read_all(self) -> dict[str, str]:
        """Load the key map, returning an empty map on missing/corrupt file."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        try:
            obj = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Store file %s is corrupt; treating it as empty.", self._path)
            return {}

        if not isinstance(obj, dict):
            logger.warning("Store file %s is not an object; treating it as empty.", self._path)
            return {}

        return {str(k): v for k, v in obj.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(items, fh, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
