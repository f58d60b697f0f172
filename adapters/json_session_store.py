"""
Local JSON-file adapter for SessionStorePort.

Stores every session in a single JSON object keyed by storage key.
Simple, no extra infra. Good for local runs and small deployments.
"""

from __future__ import annotations

import json
import os
import threading
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from domain.models import AnnotationSession
from shared_utils.logging_utils import ContextualLogger
from shared_utils.constants import LogScope
from shared_utils.error_handler import StorageError


logger = ContextualLogger(scope=LogScope.ADAPTER)

_DEFAULT_PATH = "data/sessions/sessions.json"


class JsonSessionStoreAdapter:
    """Thread-safe JSON file store for AnnotationSessions."""

    def __init__(self, path: str = _DEFAULT_PATH) -> None:
        self._path = path
        self._lock = threading.Lock()
        os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)

    # ------------------------------------------------------------------
    # SessionStorePort implementation
    # ------------------------------------------------------------------

    def load(self, key: str) -> Optional[AnnotationSession]:
        """Load one session; corrupted entries are dropped and reported as absent."""
        with self._lock:
            data = self._read_all()
            raw = data.get(key)
            if raw is None:
                return None
            try:
                return AnnotationSession.model_validate(raw)
            except PydanticValidationError as exc:
                logger.warning("session_store_corrupt_entry", key=key, error=str(exc))
                del data[key]
                self._write_all(data)
                return None

    def save(self, key: str, session: AnnotationSession) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = session.model_dump(mode="json", by_alias=True)
            self._write_all(data)
        logger.debug("session_saved", key=key, cue_count=len(session.cues))

    def clear(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)
        logger.debug("session_cleared", key=key)

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._read_all().keys())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_all(self) -> Dict[str, dict]:
        if not os.path.exists(self._path):
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            logger.warning("session_store_corrupt_file", path=self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, dict]) -> None:
        try:
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as exc:
            logger.error("session_store_write_failed", path=self._path, error=str(exc))
            raise StorageError(f"Failed to write session store: {exc}", context={"path": self._path}) from exc
