"""Directory-backed key/value text storage.

Each key maps to one UTF-8 text file, so a serialized database survives
between runs the same way a browser keeps it in local storage.
"""

import logging
import os
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class LocalStorage:
    """Persistent string storage addressed by key."""

    def __init__(self, directory: str | Path):
        """Initialize storage rooted at directory (created on first write)."""
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.txt"

    def get_item(self, key: str) -> str | None:
        """Return stored value or None when the key was never set."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, fully replacing any previous value."""
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    def remove_item(self, key: str) -> None:
        """Delete key; missing keys are ignored."""
        self._path(key).unlink(missing_ok=True)

    def __contains__(self, key: str) -> bool:
        return self._path(key).exists()
