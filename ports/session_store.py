"""
Port interface for annotation session persistence.

Implementations: InMemorySessionStoreAdapter, JsonSessionStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from domain.models import AnnotationSession


@runtime_checkable
class SessionStorePort(Protocol):
    """Abstract interface for keyed session storage."""

    def load(self, key: str) -> Optional[AnnotationSession]:
        """Load the session stored under key.

        Args:
            key: Storage key (see ``storage_key``).

        Returns:
            The stored session, or None when absent or unreadable.
        """
        ...

    def save(self, key: str, session: AnnotationSession) -> None:
        """Store session under key, replacing any previous value.

        Raises:
            StorageError: If the session cannot be written.
        """
        ...

    def clear(self, key: str) -> None:
        """Remove the session stored under key. Missing keys are ignored."""
        ...

    def list_keys(self) -> List[str]:
        """Return all keys currently stored."""
        ...
