"""
Key/value document storage for the local ledger.

Each backend holds JSON documents under string keys, the same shape as the
browser's localStorage. The ledger keeps its whole customer mapping under a
single key and rewrites it on every mutation.
"""

import json
import logging
import os
import tempfile
from typing import Any, Optional

logger = logging.getLogger(__name__)


class InMemoryStorage:
    def __init__(self):
        self.items: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[Any]:
        raw = self.items.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_item(self, key: str, value: Any) -> None:
        # Serialize on write so callers never share mutable state with the store
        self.items[key] = json.dumps(value)


class JsonFileStorage:
    """
    File-backed storage. The file holds one JSON object mapping keys to documents.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a crash mid-write leaves the previous file intact.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> tuple[dict[str, Any], bool]:
        """Return (data, readable). An unreadable file yields ({}, False)."""
        if not os.path.exists(self.path):
            return {}, True
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s, treating it as empty: %s", self.path, e)
            return {}, False
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top-level value is not an object", self.path)
            return {}, False
        return data, True

    def _quarantine(self) -> str:
        """Move an unreadable file aside so the next write cannot destroy it."""
        target = f"{self.path}.corrupt"
        n = 1
        while os.path.exists(target):
            target = f"{self.path}.corrupt.{n}"
            n += 1
        os.replace(self.path, target)
        logger.error("Unreadable store file %s moved to %s", self.path, target)
        return target

    def get_item(self, key: str) -> Optional[Any]:
        data, _ = self._read()
        return data.get(key)

    def set_item(self, key: str, value: Any) -> None:
        data, readable = self._read()
        if not readable:
            self._quarantine()
        data[key] = value

        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".punchcard-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
