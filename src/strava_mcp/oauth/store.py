"""
File-based store for the authorization server.

Records are JSON documents under ``<root>/<kind>/<key>.json`` where kind is
either ``clients`` or ``grants``. Keys are sanitized so that a
client-supplied identifier can never escape the store directory.
"""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class FileStore:
    """JSON document store keyed by (kind, key)."""

    def __init__(self, root: Path):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, kind: str, key: str) -> Path:
        directory = self._root / kind
        directory.mkdir(parents=True, exist_ok=True)
        # Sanitize key to prevent path traversal
        safe_key = "".join(c for c in key if c.isalnum() or c in "-_")
        if not safe_key:
            raise ValueError(f"Invalid {kind} key")
        return directory / f"{safe_key}.json"

    def get(self, kind: str, key: str) -> Optional[dict]:
        try:
            path = self._path(kind, key)
        except ValueError:
            return None
        if not path.exists():
            return None
        try:
            with open(path, "r") as f:
                return json.load(f)
        except json.JSONDecodeError:
            logger.warning(f"Corrupt {kind} record {path.name}, ignoring")
            return None

    def put(self, kind: str, key: str, data: dict) -> None:
        path = self._path(kind, key)
        tmp = path.with_suffix(".tmp")
        with open(tmp, "w") as f:
            json.dump(data, f)
        tmp.replace(path)

    def delete(self, kind: str, key: str) -> None:
        try:
            path = self._path(kind, key)
        except ValueError:
            return
        if path.exists():
            path.unlink()
