import copy
import logging
from typing import Any, Dict, List

from proforma_service.stores.base import BaseSnapshotStore, SnapshotNotFoundError, validate_name

logger = logging.getLogger(__name__)


class InMemorySnapshotStore(BaseSnapshotStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._snapshots: Dict[str, Dict[str, Any]] = {}

    def load(self, name: str) -> Dict[str, Any]:
        validate_name(name)
        if name not in self._snapshots:
            raise SnapshotNotFoundError(name)
        return copy.deepcopy(self._snapshots[name])

    def save(self, name: str, data: Dict[str, Any]) -> None:
        validate_name(name)
        self._snapshots[name] = copy.deepcopy(dict(data))
        logger.info(f"Saved snapshot {name} ({len(data)} values)")

    def list_names(self) -> List[str]:
        return sorted(self._snapshots)

    def delete(self, name: str) -> None:
        validate_name(name)
        if self._snapshots.pop(name, None) is None:
            raise SnapshotNotFoundError(name)
        logger.info(f"Deleted snapshot {name}")
