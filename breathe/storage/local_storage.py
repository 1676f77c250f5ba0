"""
A small durable key-value store for user preferences, backed by a JSON file.
Reads and writes never raise; failures are logged and reported as absent values.
"""

import json
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)


class LocalStorage:
    """Get/set named string values in a JSON file that survives across sessions."""

    def __init__(self, path: Path):
        self.path = path

    def _read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            log.debug(f"Storage read failed for '{self.path}': {e}")
            return {}
        if not isinstance(data, dict):
            log.debug(f"Ignoring storage file '{self.path}' with unexpected layout.")
            return {}
        return data

    def _write_all(self, data: dict[str, str]) -> bool:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
            return True
        except (TypeError, OSError) as e:
            log.warning(f"Storage write failed for '{self.path}': {e}")
            return False

    def get(self, key: str) -> str | None:
        """Returns the stored string, or None if absent or unreadable."""
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> bool:
        """Best-effort write. Returns False on failure instead of raising."""
        data = self._read_all()
        data[key] = value
        return self._write_all(data)

    def remove(self, key: str) -> bool:
        """Forgets a key; removing an absent key succeeds without writing."""
        data = self._read_all()
        if key not in data:
            return True
        del data[key]
        return self._write_all(data)
