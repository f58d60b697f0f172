"""
In-memory session store adapter.

Implements SessionStorePort with a plain dict. Used for tests and single
process development runs.

NOT for production: no persistence across restarts.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from domain.models import AnnotationSession
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.constants import LogScope


logger = get_scoped_logger(LogScope.ADAPTER)


class InMemorySessionStoreAdapter:
    """Dict-backed implementation of SessionStorePort.

    Stores deep copies so callers can never mutate stored state in place.
    """

    def __init__(self) -> None:
        self._store: Dict[str, AnnotationSession] = {}

    # ------------------------------------------------------------------
    # SessionStorePort implementation
    # ------------------------------------------------------------------

    def load(self, key: str) -> Optional[AnnotationSession]:
        session = self._store.get(key)
        return session.model_copy(deep=True) if session is not None else None

    def save(self, key: str, session: AnnotationSession) -> None:
        self._store[key] = session.model_copy(deep=True)
        logger.debug("inmemory_session_saved", key=key, cue_count=len(session.cues))

    def clear(self, key: str) -> None:
        self._store.pop(key, None)

    def list_keys(self) -> List[str]:
        return list(self._store.keys())
