import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]{0,63}$")


class SnapshotNotFoundError(KeyError):
    """Raised when a named assumption snapshot does not exist."""


def validate_name(name: str) -> str:
    if not isinstance(name, str) or not _NAME_PATTERN.match(name) or ".." in name:
        raise ValueError(f"Invalid snapshot name: {name!r}")
    return name


class BaseSnapshotStore(ABC):
    """Abstract base class for named assumption snapshot stores."""

    @abstractmethod
    def load(self, name: str) -> Dict[str, Any]:
        """Return the snapshot saved under ``name``; raise SnapshotNotFoundError if missing."""
        pass

    @abstractmethod
    def save(self, name: str, data: Dict[str, Any]) -> None:
        """Create or replace the snapshot ``name``."""
        pass

    @abstractmethod
    def list_names(self) -> List[str]:
        """Sorted names of all stored snapshots."""
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove ``name``; raise SnapshotNotFoundError if missing."""
        pass


class StoreFactory:
    """Simple factory to manage snapshot stores (Singleton Pattern)."""

    _store_builders: Dict[str, Callable[[], BaseSnapshotStore]] = {}
    _instances: Dict[str, BaseSnapshotStore] = {}

    @classmethod
    def register(cls, name: str, builder: Callable[[], BaseSnapshotStore]) -> None:
        cls._store_builders[name] = builder
        cls._instances.pop(name, None)

    @classmethod
    def get_store(cls, name: str) -> BaseSnapshotStore:
        # Check cache first
        if name in cls._instances:
            return cls._instances[name]

        builder = cls._store_builders.get(name)
        if not builder:
            raise ValueError(f"Snapshot store '{name}' not found.")

        instance = builder()
        cls._instances[name] = instance
        return instance

    @classmethod
    def reset(cls) -> None:
        cls._instances.clear()
