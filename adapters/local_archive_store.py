"""
Local-directory adapter for ArchiveStorePort.

Writes each export archive under ``{archive_dir}/{session_id}/{filename}``.
"""

from __future__ import annotations

import os

from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope
from shared_utils.error_handler import StorageError


logger = get_scoped_logger(LogScope.ADAPTER)


class LocalArchiveStoreAdapter:
    """Filesystem implementation of ArchiveStorePort."""

    def __init__(self, archive_dir: str = "data/exports") -> None:
        self.archive_dir = archive_dir

    def store_archive(self, session_id: str, filename: str, content: bytes) -> str:
        """Write the archive and return its path."""
        directory = os.path.join(self.archive_dir, session_id)
        path = os.path.join(directory, filename)
        try:
            os.makedirs(directory, exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)
        except OSError as exc:
            logger.error("archive_write_failed", session_id=session_id, path=path, error=str(exc))
            raise StorageError(f"Failed to write archive: {exc}", context={"path": path}) from exc

        logger.info("archive_stored_local", session_id=session_id, path=path, size_bytes=len(content))
        return path
