"""Object storage factory.

Provides get_storage() / set_storage() to swap implementations. Defaults to
InMemoryObjectStorage.
"""

from storefront.storage.memory_adapter import InMemoryObjectStorage
from storefront.storage.port import ObjectStorage

_current_storage: ObjectStorage | None = None


def get_storage() -> ObjectStorage:
    """Return the current object storage. Defaults to InMemoryObjectStorage."""
    global _current_storage
    if _current_storage is None:
        _current_storage = InMemoryObjectStorage()
    return _current_storage


def set_storage(storage: ObjectStorage) -> None:
    """Override the active object storage (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    """Reset to default storage."""
    global _current_storage
    _current_storage = None
