"""
Tests for shared_utils.di_container.

Tests singleton behaviour, lazy initialisation, reset(), and the store and
service accessors.  Settings are patched per test; no AWS calls.
"""

from unittest.mock import patch

import pytest

from adapters.in_memory_session_store import InMemorySessionStoreAdapter
from adapters.json_session_store import JsonSessionStoreAdapter
from adapters.local_archive_store import LocalArchiveStoreAdapter
from adapters.s3_archive_store import S3ArchiveStoreAdapter
from services.annotation_service import SessionService
from services.export_service import ExportService
from services.upload_service import UploadService
from shared_utils.config_loader import Settings
from shared_utils.di_container import DIContainer, get_di_container
from shared_utils.error_handler import ConfigurationError


# ---------------------------------------------------------------------------
# Ensure each test gets a fresh singleton
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_singleton():
    """Reset the DIContainer singleton before and after each test."""
    DIContainer._instance = None
    yield
    DIContainer._instance = None


def _settings(**overrides) -> Settings:
    return Settings(environment="development", **overrides)


# ---------------------------------------------------------------------------
# Singleton behaviour
# ---------------------------------------------------------------------------


class TestSingleton:
    def test_same_instance(self) -> None:
        a = DIContainer()
        b = DIContainer()
        assert a is b

    def test_get_di_container_returns_container(self) -> None:
        c1 = get_di_container()
        c2 = get_di_container()
        assert c1 is c2
        assert isinstance(c1, DIContainer)


# ---------------------------------------------------------------------------
# reset()
# ---------------------------------------------------------------------------


class TestReset:
    def test_reset_clears_dependencies(self) -> None:
        container = DIContainer()
        container._upload_service = "fake"
        container._session_store = "fake"
        container._session_service = "fake"
        container._archive_store = "fake"
        container._export_service = "fake"

        container.reset()

        assert container._upload_service is None
        assert container._session_store is None
        assert container._session_service is None
        assert container._archive_store is None
        assert container._export_service is None


# ---------------------------------------------------------------------------
# Session store
# ---------------------------------------------------------------------------


class TestSessionStore:
    @patch("shared_utils.di_container.get_settings")
    def test_memory_by_default(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _settings()
        store = DIContainer().get_session_store()
        assert isinstance(store, InMemorySessionStoreAdapter)

    @patch("shared_utils.di_container.get_settings")
    def test_json_store(self, mock_get_settings, tmp_path) -> None:
        path = str(tmp_path / "sessions.json")
        mock_get_settings.return_value = _settings(session_store="json", session_store_path=path)
        store = DIContainer().get_session_store()
        assert isinstance(store, JsonSessionStoreAdapter)
        assert store._path == path

    @patch("shared_utils.di_container.get_settings")
    def test_lazy_singleton(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _settings()
        container = DIContainer()
        assert container.get_session_store() is container.get_session_store()


# ---------------------------------------------------------------------------
# Archive store
# ---------------------------------------------------------------------------


class TestArchiveStore:
    @patch("shared_utils.di_container.get_settings")
    def test_local_by_default(self, mock_get_settings, tmp_path) -> None:
        mock_get_settings.return_value = _settings(archive_dir=str(tmp_path))
        store = DIContainer().get_archive_store()
        assert isinstance(store, LocalArchiveStoreAdapter)

    @patch("shared_utils.di_container.get_settings")
    @patch("adapters.s3_archive_store.S3ArchiveStoreAdapter.__init__", return_value=None)
    def test_s3_store(self, mock_init, mock_get_settings) -> None:
        mock_get_settings.return_value = _settings(
            archive_store="s3",
            s3_archive_bucket="annotations-bucket",
            s3_archive_prefix="exports",
        )
        store = DIContainer().get_archive_store()
        assert isinstance(store, S3ArchiveStoreAdapter)
        mock_init.assert_called_once_with(
            bucket="annotations-bucket",
            prefix="exports",
            region="eu-west-2",
            endpoint_url="",
        )

    @patch("shared_utils.di_container.get_settings")
    def test_s3_without_bucket_raises(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _settings(archive_store="s3")
        with pytest.raises(ConfigurationError, match="S3_ARCHIVE_BUCKET"):
            DIContainer().get_archive_store()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class TestServices:
    @patch("shared_utils.di_container.get_settings")
    def test_upload_service_uses_configured_rules(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _settings(vtt_max_cues=12)
        service = DIContainer().get_upload_service()
        assert isinstance(service, UploadService)
        assert service.rules.max_cues == 12

    @patch("shared_utils.di_container.get_settings")
    def test_session_service(self, mock_get_settings) -> None:
        mock_get_settings.return_value = _settings(session_expiry_days=3)
        container = DIContainer()
        service = container.get_session_service()
        assert isinstance(service, SessionService)
        assert service.store is container.get_session_store()
        assert service.expiry_days == 3

    @patch("shared_utils.di_container.get_settings")
    def test_export_service(self, mock_get_settings, tmp_path) -> None:
        mock_get_settings.return_value = _settings(archive_dir=str(tmp_path))
        container = DIContainer()
        service = container.get_export_service()
        assert isinstance(service, ExportService)
        assert service.archive_store is container.get_archive_store()

    @patch("shared_utils.di_container.get_settings")
    def test_services_are_lazy_singletons(self, mock_get_settings, tmp_path) -> None:
        mock_get_settings.return_value = _settings(archive_dir=str(tmp_path))
        container = DIContainer()
        assert container.get_upload_service() is container.get_upload_service()
        assert container.get_session_service() is container.get_session_service()
        assert container.get_export_service() is container.get_export_service()
        mock_get_settings.assert_called()
