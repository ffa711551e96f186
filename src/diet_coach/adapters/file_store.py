"""JSON file storage for ledger blobs, one file per key."""

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from diet_coach.services.ledger import KeyValueStore


@dataclass
class FileKeyValueStore(KeyValueStore):
    """Key-value store backed by files under a data directory."""

    root: Path

    def get(self, key: str) -> str | None:
        """Return the stored blob, if the key has been written."""
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write a blob, replacing the previous file contents."""
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def _path_for(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.json"
