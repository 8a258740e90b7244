"""Object storage port (abstract interface).

Payment proofs are stored as opaque objects. The storefront keeps only the
object path on the order and asks the storage for a viewable URL on read.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class UploadResult:
    """Result of an object upload."""

    success: bool
    path: str | None = None
    failure_reason: str | None = None


class ObjectStorage(ABC):
    """Abstract object storage interface."""

    @abstractmethod
    def upload(self, path: str, content: bytes, content_type: str) -> UploadResult:
        """Store ``content`` at ``path``. Must not overwrite an existing object."""
        ...

    @abstractmethod
    def remove(self, path: str) -> bool:
        """Delete the object at ``path``. Best-effort: returns False instead of raising."""
        ...

    @abstractmethod
    def resolve_url(self, path: str) -> str | None:
        """Return a signed or public URL for ``path``."""
        ...
