"""
Annotation session service: session lifecycle and cue rating.

Depends only on SessionStorePort; never on concrete adapters.
Sessions are treated as immutable values. Every mutation returns a new
session (``model_copy``) which is then saved under its storage key.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from core_transcript.engine.completion import summarize_session_completion
from core_transcript.engine.navigation import validate_index
from domain.models import (
    AnnotationSession,
    SessionState,
    TranscriptCue,
    is_valid_importance,
)
from ports.session_store import SessionStorePort
from shared_utils.constants import Defaults, ExportNames, LogScope
from shared_utils.error_handler import SessionNotFoundError, ValidationError
from shared_utils.logging_utils import get_scoped_logger
from shared_utils.validation import InputValidator

logger = get_scoped_logger(LogScope.SESSION)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_timestamp(value: str) -> datetime:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Pure session helpers
# ---------------------------------------------------------------------------

def generate_session_id() -> str:
    return str(uuid.uuid4())


def storage_key(session_id: str) -> str:
    """Key a session is stored under: ``transcript-session-<id>``."""
    return f"{ExportNames.STORAGE_KEY_PREFIX}{session_id}"


def _status_for(session: AnnotationSession) -> SessionState:
    summary = summarize_session_completion(session)
    return SessionState.COMPLETE if summary and summary.is_session_complete else SessionState.IN_PROGRESS


def _with_cue_importance(
    session: AnnotationSession,
    index: int,
    importance: Optional[int],
    now: datetime,
) -> AnnotationSession:
    validate_index(session.cues, index)
    cues = list(session.cues)
    cues[index] = cues[index].model_copy(update={"importance": importance})
    updated = session.model_copy(update={
        "cues": cues,
        "last_modified": iso_timestamp(now),
        "exported_at": None,
    })
    return updated.model_copy(update={"status": _status_for(updated)})


def apply_importance(
    session: AnnotationSession,
    index: int,
    importance: int,
    now: Optional[datetime] = None,
) -> AnnotationSession:
    """Return a copy of ``session`` with cue ``index`` rated ``importance``.

    Raises:
        ValidationError: If index is out of range or importance is not 0-3
    """
    if not is_valid_importance(importance):
        raise ValidationError(
            "Importance level must be 0, 1, 2, or 3",
            context={"importance": importance},
        )
    return _with_cue_importance(session, index, importance, now or utc_now())


def clear_importance(
    session: AnnotationSession,
    index: int,
    now: Optional[datetime] = None,
) -> AnnotationSession:
    """Return a copy of ``session`` with cue ``index`` unrated.

    Raises:
        ValidationError: If index is out of range
    """
    return _with_cue_importance(session, index, None, now or utc_now())


def is_session_expired(session: AnnotationSession, now: datetime, expiry_days: int = Defaults.SESSION_EXPIRY_DAYS) -> bool:
    """True when ``last_modified`` is older than the expiry window.

    Unparseable timestamps count as expired.
    """
    try:
        last_modified = parse_iso_timestamp(session.last_modified)
    except ValueError:
        return True
    return now - last_modified > timedelta(days=expiry_days)


# ---------------------------------------------------------------------------
# SessionService
# ---------------------------------------------------------------------------

class SessionService:
    """Creates, mutates and expires annotation sessions through a store."""

    def __init__(
        self,
        store: SessionStorePort,
        clock: Optional[Clock] = None,
        expiry_days: int = Defaults.SESSION_EXPIRY_DAYS,
    ) -> None:
        self.store = store
        self._clock = clock or utc_now
        self.expiry_days = expiry_days

    def create_session(
        self,
        cues: List[TranscriptCue],
        original_file_name: str,
        original_file_content: Optional[str] = None,
        meeting_id: Optional[str] = "",
        annotator: Optional[str] = "",
    ) -> AnnotationSession:
        """Start a new session over freshly parsed cues."""
        now = iso_timestamp(self._clock())
        session = AnnotationSession(
            session_id=generate_session_id(),
            meeting_id=meeting_id or "",
            annotator=annotator or "",
            version=Defaults.SCHEMA_VERSION,
            created_at=now,
            last_modified=now,
            original_file_name=original_file_name,
            original_file_content=original_file_content,
            cues=[cue.model_copy() for cue in cues],
            status=SessionState.INITIALIZED,
        )
        self.store.save(storage_key(session.session_id), session)
        logger.info(
            "session_created",
            session_id=session.session_id,
            cue_count=len(session.cues),
            original_file_name=original_file_name,
        )
        return session

    def get_session(self, session_id: str) -> AnnotationSession:
        """Load a session.

        Raises:
            ValidationError: If session_id is blank
            SessionNotFoundError: If no session is stored under the id
        """
        session_id = InputValidator.validate_non_empty_string(session_id, "session_id")
        session = self.store.load(storage_key(session_id))
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def rate_cue(self, session_id: str, index: int, importance: int) -> AnnotationSession:
        session = apply_importance(self.get_session(session_id), index, importance, self._clock())
        self.store.save(storage_key(session_id), session)
        logger.debug("cue_rated", session_id=session_id, index=index, importance=importance)
        return session

    def clear_rating(self, session_id: str, index: int) -> AnnotationSession:
        session = clear_importance(self.get_session(session_id), index, self._clock())
        self.store.save(storage_key(session_id), session)
        logger.debug("cue_rating_cleared", session_id=session_id, index=index)
        return session

    def mark_exported(self, session_id: str) -> AnnotationSession:
        """Record a successful export on the session."""
        now = iso_timestamp(self._clock())
        session = self.get_session(session_id).model_copy(update={
            "status": SessionState.EXPORTED,
            "exported_at": now,
            "last_modified": now,
        })
        self.store.save(storage_key(session_id), session)
        logger.info("session_exported", session_id=session_id, exported_at=now)
        return session

    def clear_session(self, session_id: str) -> None:
        self.store.clear(storage_key(session_id))
        logger.info("session_cleared", session_id=session_id)

    def cleanup_expired_sessions(self) -> List[str]:
        """Remove expired or unreadable sessions.

        Returns:
            Storage keys that were removed
        """
        now = self._clock()
        removed: List[str] = []
        for key in self.store.list_keys():
            if not key.startswith(ExportNames.STORAGE_KEY_PREFIX):
                continue
            session = self.store.load(key)
            if session is None or is_session_expired(session, now, self.expiry_days):
                self.store.clear(key)
                removed.append(key)

        if removed:
            logger.info("expired_sessions_removed", count=len(removed))
        return removed
