"""
Port interface for delivering export archives.

Implementations: LocalArchiveStoreAdapter, S3ArchiveStoreAdapter (adapters/)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ArchiveStorePort(Protocol):
    """Abstract interface for storing finished export archives."""

    def store_archive(self, session_id: str, filename: str, content: bytes) -> str:
        """Persist one archive.

        Args:
            session_id: Session the archive was exported from.
            filename: Archive filename (``<prefix>-annotations-<ts>.zip``).
            content: ZIP bytes.

        Returns:
            Location of the stored archive (filesystem path or s3:// URI).

        Raises:
            StorageError / ExternalServiceError: If the archive cannot be stored.
        """
        ...
