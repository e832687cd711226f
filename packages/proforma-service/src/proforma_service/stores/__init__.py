from proforma_service.config import settings
from proforma_service.stores.base import (
    BaseSnapshotStore,
    SnapshotNotFoundError,
    StoreFactory,
    validate_name,
)
from proforma_service.stores.json_file import JsonFileSnapshotStore
from proforma_service.stores.memory import InMemorySnapshotStore

StoreFactory.register("memory", InMemorySnapshotStore)
StoreFactory.register("file", lambda: JsonFileSnapshotStore(settings.snapshot_dir))

__all__ = [
    "BaseSnapshotStore",
    "InMemorySnapshotStore",
    "JsonFileSnapshotStore",
    "SnapshotNotFoundError",
    "StoreFactory",
    "validate_name",
]
