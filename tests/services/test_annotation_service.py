"""
Tests for services.annotation_service.

Uses the in-memory session store adapter and a fixed clock.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from adapters.in_memory_session_store import InMemorySessionStoreAdapter
from domain.models import SessionState
from services.annotation_service import (
    SessionService,
    apply_importance,
    clear_importance,
    is_session_expired,
    iso_timestamp,
    storage_key,
)
from shared_utils.error_handler import SessionNotFoundError, ValidationError


NOW = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


@pytest.fixture()
def store() -> InMemorySessionStoreAdapter:
    return InMemorySessionStoreAdapter()


@pytest.fixture()
def service(store, fixed_clock) -> SessionService:
    return SessionService(store=store, clock=fixed_clock)


@pytest.fixture()
def created(service, session_factory):
    cues = session_factory([None, None, None]).cues
    return service.create_session(
        cues=cues,
        original_file_name="meeting.vtt",
        original_file_content="WEBVTT\n",
        meeting_id="  Weekly  ",
        annotator=None,
    )


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_storage_key(self) -> None:
        assert storage_key("abc") == "transcript-session-abc"

    def test_iso_timestamp(self) -> None:
        assert iso_timestamp(NOW) == "2025-01-02T03:04:05.678Z"

    def test_iso_timestamp_naive_is_utc(self) -> None:
        assert iso_timestamp(datetime(2025, 1, 2)) == "2025-01-02T00:00:00.000Z"

    def test_apply_importance_returns_new_session(self, session_factory) -> None:
        original = session_factory([None, None], exported_at="2025-01-01T00:00:00.000Z")
        updated = apply_importance(original, 0, 2, NOW)

        assert original.cues[0].importance is None
        assert updated.cues[0].importance == 2
        assert updated.last_modified == "2025-01-02T03:04:05.678Z"
        assert updated.exported_at is None
        assert updated.status == SessionState.IN_PROGRESS

    def test_apply_last_rating_completes(self, session_factory) -> None:
        updated = apply_importance(session_factory([1, None]), 1, 0, NOW)
        assert updated.status == SessionState.COMPLETE

    def test_clear_importance_reverts_completion(self, session_factory) -> None:
        updated = clear_importance(session_factory([1, 2], status=SessionState.COMPLETE), 0, NOW)
        assert updated.cues[0].importance is None
        assert updated.status == SessionState.IN_PROGRESS

    @pytest.mark.parametrize("importance", [-1, 4, True, "2", None])
    def test_invalid_importance(self, session_factory, importance) -> None:
        with pytest.raises(ValidationError, match="Importance level"):
            apply_importance(session_factory([None]), 0, importance, NOW)

    def test_invalid_index(self, session_factory) -> None:
        with pytest.raises(ValidationError, match="Invalid cue index"):
            apply_importance(session_factory([None]), 3, 1, NOW)

    def test_expiry(self, session_factory) -> None:
        session = session_factory([], last_modified="2025-01-01T00:00:00.000Z")
        assert is_session_expired(session, datetime(2025, 1, 7, tzinfo=timezone.utc)) is False
        assert is_session_expired(session, datetime(2025, 1, 8, 0, 0, 1, tzinfo=timezone.utc)) is True

    def test_unparseable_timestamp_is_expired(self, session_factory) -> None:
        assert is_session_expired(session_factory([], last_modified="garbage"), NOW) is True


# ---------------------------------------------------------------------------
# SessionService
# ---------------------------------------------------------------------------

class TestSessionService:
    def test_create_session(self, created, store) -> None:
        assert created.status == SessionState.INITIALIZED
        assert created.created_at == "2025-01-02T03:04:05.678Z"
        assert created.last_modified == created.created_at
        assert created.meeting_id == "  Weekly  "
        assert created.annotator == ""
        assert created.version == 1
        assert store.list_keys() == [storage_key(created.session_id)]

    def test_session_ids_are_unique(self, service, session_factory) -> None:
        cues = session_factory([None]).cues
        a = service.create_session(cues, "a.vtt")
        b = service.create_session(cues, "a.vtt")
        assert a.session_id != b.session_id

    def test_get_session(self, service, created) -> None:
        assert service.get_session(created.session_id) == created

    def test_get_missing_session(self, service) -> None:
        with pytest.raises(SessionNotFoundError) as exc_info:
            service.get_session("nope")
        assert exc_info.value.http_status == 404

    def test_get_blank_session_id(self, service) -> None:
        with pytest.raises(ValidationError, match="session_id cannot be empty"):
            service.get_session("   ")

    def test_rate_cue_persists(self, service, created) -> None:
        service.rate_cue(created.session_id, 1, 3)
        stored = service.get_session(created.session_id)
        assert stored.cues[1].importance == 3
        assert stored.status == SessionState.IN_PROGRESS

    def test_rate_all_cues_completes(self, service, created) -> None:
        for index in range(3):
            session = service.rate_cue(created.session_id, index, 1)
        assert session.status == SessionState.COMPLETE

    def test_clear_rating(self, service, created) -> None:
        service.rate_cue(created.session_id, 0, 2)
        session = service.clear_rating(created.session_id, 0)
        assert session.cues[0].importance is None

    def test_invalid_rating_leaves_store_unchanged(self, service, created) -> None:
        with pytest.raises(ValidationError):
            service.rate_cue(created.session_id, 0, 9)
        assert service.get_session(created.session_id).cues[0].importance is None

    def test_mark_exported(self, service, created) -> None:
        session = service.mark_exported(created.session_id)
        assert session.status == SessionState.EXPORTED
        assert session.exported_at == "2025-01-02T03:04:05.678Z"

    def test_rating_after_export_resets_exported_at(self, service, created) -> None:
        service.mark_exported(created.session_id)
        session = service.rate_cue(created.session_id, 0, 1)
        assert session.exported_at is None
        assert session.status == SessionState.IN_PROGRESS

    def test_clear_session(self, service, created) -> None:
        service.clear_session(created.session_id)
        with pytest.raises(SessionNotFoundError):
            service.get_session(created.session_id)

    def test_cleanup_expired_sessions(self, store, session_factory) -> None:
        fresh = session_factory([], session_id="fresh", last_modified="2025-01-01T00:00:00.000Z")
        stale = session_factory([], session_id="stale", last_modified="2024-12-01T00:00:00.000Z")
        store.save(storage_key("fresh"), fresh)
        store.save(storage_key("stale"), stale)
        store.save("unrelated-key", stale)

        service = SessionService(store=store, clock=lambda: NOW, expiry_days=7)
        removed = service.cleanup_expired_sessions()

        assert removed == [storage_key("stale")]
        assert sorted(store.list_keys()) == sorted([storage_key("fresh"), "unrelated-key"])

    def test_works_against_any_store(self, fixed_clock, session_factory) -> None:
        store = MagicMock()
        store.load.return_value = session_factory([None])
        service = SessionService(store=store, clock=fixed_clock)

        service.rate_cue("session-1", 0, 2)

        store.load.assert_called_once_with("transcript-session-session-1")
        saved_key, saved_session = store.save.call_args[0]
        assert saved_key == "transcript-session-session-1"
        assert saved_session.cues[0].importance == 2
