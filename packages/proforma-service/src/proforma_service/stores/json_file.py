"""
JSON file snapshot store.

One ``<name>.json`` file per snapshot inside a directory. Writes go to a
temporary file first and are moved into place, so a crashed write never
leaves a truncated snapshot behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Union

from proforma_service.stores.base import BaseSnapshotStore, SnapshotNotFoundError, validate_name

logger = logging.getLogger(__name__)


class JsonFileSnapshotStore(BaseSnapshotStore):
    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        return self.directory / f"{validate_name(name)}.json"

    def load(self, name: str) -> Dict[str, Any]:
        path = self._path(name)
        if not path.exists():
            raise SnapshotNotFoundError(name)
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot {name} is not a JSON object")
        return data

    def save(self, name: str, data: Dict[str, Any]) -> None:
        path = self._path(name)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(dict(data), fh, indent=2, sort_keys=True)
            os.replace(tmp_path, path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.info(f"Wrote snapshot {name} to {path}")

    def list_names(self) -> List[str]:
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def delete(self, name: str) -> None:
        path = self._path(name)
        if not path.exists():
            raise SnapshotNotFoundError(name)
        path.unlink()
        logger.info(f"Deleted snapshot {name}")
