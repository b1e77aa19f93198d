"""JSON file storage for the economy state.

The save file holds one JSON object mapping storage keys to records, so
several games (or several save slots) can share a file. Writes are atomic:
the document goes to a temporary file in the same directory, which
``os.replace`` then swaps into place.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from planetclicker.config import STORAGE_KEY

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Base class for storage failures."""


class SaveUnavailable(PersistenceError):
    """The save file could not be read or written."""


class MalformedSave(PersistenceError):
    """The save file exists but does not hold a usable record."""


class SaveStore:
    """Reads and writes one keyed record in a JSON save file."""

    def __init__(self, path: str | Path, key: str = STORAGE_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> dict[str, Any] | None:
        """Return the stored record, or None when nothing has been saved."""
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SaveUnavailable(f"cannot read {self.path}: {exc}") from exc
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise MalformedSave(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise MalformedSave(f"{self.path} does not hold a JSON object")
        if self.key not in document:
            return None
        record = document[self.key]
        if not isinstance(record, dict):
            raise MalformedSave(f"record {self.key!r} is not a JSON object")
        return record

    def write(self, record: dict[str, Any]) -> None:
        """Store *record* under this store's key, keeping other keys intact."""
        document = self._read_document()
        document[self.key] = record
        directory = self.path.parent
        temp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=directory,
                prefix=".save-",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                temp_name = tmp.name
                json.dump(document, tmp, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(temp_name, self.path)
        except OSError as exc:
            if temp_name is not None and os.path.exists(temp_name):
                os.remove(temp_name)
            raise SaveUnavailable(f"cannot write {self.path}: {exc}") from exc

    def _read_document(self) -> dict[str, Any]:
        """Current file contents, or an empty document if unreadable."""
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError):
            logger.warning("Overwriting unreadable save file %s", self.path)
            return {}
        if not isinstance(document, dict):
            logger.warning("Overwriting non-object save file %s", self.path)
            return {}
        return document
