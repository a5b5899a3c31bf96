# storage.py
#
# Description:
# Persistence for the application. JsonStorage is a small key-value blob
# store: every key is a JSON file inside the data directory. DocumentStore
# sits on top of it and loads/saves the checklist document, running the
# schema migrations on load. Storage problems are logged and never raised
# into the caller: a corrupt file reads as "no saved data".
#

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from migration import migrate

logger = logging.getLogger(__name__)

DOCUMENT_KEY = "task-checker-v2"


class JsonStorage:
    """A key-value store that keeps each value in its own file."""

    def __init__(self, directory):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        """Returns the raw stored string for a key, or None if there is none."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not read {path}: {e}")
            return None

    def set(self, key: str, value: str):
        """Writes a value, replacing the file atomically. Raises OSError on failure."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class MemoryStorage:
    """A key-value store kept in a dict, for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str):
        self.values[key] = value


def read_json(kv, key: str) -> Optional[Any]:
    """Reads and decodes a JSON value, treating bad data as missing."""
    raw = kv.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error(f"Stored value for '{key}' is not valid JSON, ignoring it: {e}")
        return None


def write_json(kv, key: str, value: Any) -> bool:
    """Encodes and stores a JSON value. Failures are logged, not raised."""
    try:
        kv.set(key, json.dumps(value, indent=2, ensure_ascii=False))
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to save '{key}': {e}")
        return False


class DocumentStore:
    """Loads and saves the serialized checklist document."""

    def __init__(self, kv, key: str = DOCUMENT_KEY):
        self.kv = kv
        self.key = key

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Returns the migrated document, or None when nothing usable is stored.
        """
        data = read_json(self.kv, self.key)
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.error(f"Stored document under '{self.key}' is not an object, ignoring it")
            return None
        try:
            return migrate(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to migrate stored document: {e}")
            return None

    def save(self, document: Dict[str, Any]) -> bool:
        document = {"version": 3, **document}
        return write_json(self.kv, self.key, document)
