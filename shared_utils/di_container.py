"""
Dependency injection container for managing application dependencies.
Centralizes adapter and service creation and lifecycle management.
"""

from typing import Optional
import logging

from domain.models import VTTValidationRules
from shared_utils.config_loader import Settings, get_settings
from shared_utils.constants import ArchiveStoreKind, LogScope, SessionStoreKind
from shared_utils.error_handler import ConfigurationError


logger = logging.getLogger(__name__)


class DIContainer:
    """Singleton dependency injection container."""

    _instance: Optional['DIContainer'] = None

    _upload_service: Optional[object] = None
    _session_store: Optional[object] = None
    _session_service: Optional[object] = None
    _archive_store: Optional[object] = None
    _export_service: Optional[object] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def reset(self):
        """Reset container (useful for testing)."""
        self._upload_service = None
        self._session_store = None
        self._session_service = None
        self._archive_store = None
        self._export_service = None

    def get_settings(self) -> Settings:
        return get_settings()

    def get_validation_rules(self) -> VTTValidationRules:
        """Parser bounds built from current settings."""
        return self.get_settings().validation_rules()

    # ------------------------------------------------------------------
    # Adapter accessors
    # ------------------------------------------------------------------

    def get_session_store(self):
        """Get or create the session store (lazy singleton).

        Uses InMemorySessionStoreAdapter for SESSION_STORE=memory and
        JsonSessionStoreAdapter for SESSION_STORE=json.
        """
        if self._session_store is None:
            settings = self.get_settings()
            if settings.session_store == SessionStoreKind.JSON.value:
                from adapters.json_session_store import JsonSessionStoreAdapter
                self._session_store = JsonSessionStoreAdapter(path=settings.session_store_path)
                logger.info(
                    "Initialized JsonSessionStoreAdapter",
                    extra={"scope": LogScope.CONFIG, "path": settings.session_store_path}
                )
            else:
                from adapters.in_memory_session_store import InMemorySessionStoreAdapter
                self._session_store = InMemorySessionStoreAdapter()
                logger.info(
                    "Initialized InMemorySessionStoreAdapter (local dev)",
                    extra={"scope": LogScope.CONFIG}
                )
        return self._session_store

    def get_archive_store(self):
        """Get or create the archive store (lazy singleton).

        Raises:
            ConfigurationError: If ARCHIVE_STORE=s3 without S3_ARCHIVE_BUCKET.
        """
        if self._archive_store is None:
            settings = self.get_settings()
            if settings.archive_store == ArchiveStoreKind.S3.value:
                if not settings.s3_archive_bucket:
                    raise ConfigurationError(
                        "S3_ARCHIVE_BUCKET is required when ARCHIVE_STORE=s3",
                        context={"archive_store": settings.archive_store}
                    )
                from adapters.s3_archive_store import S3ArchiveStoreAdapter
                self._archive_store = S3ArchiveStoreAdapter(
                    bucket=settings.s3_archive_bucket,
                    prefix=settings.s3_archive_prefix,
                    region=settings.aws_region,
                    endpoint_url=settings.aws_endpoint_url,
                )
                logger.info("Initialized S3ArchiveStoreAdapter", extra={"scope": LogScope.CONFIG})
            else:
                from adapters.local_archive_store import LocalArchiveStoreAdapter
                self._archive_store = LocalArchiveStoreAdapter(archive_dir=settings.archive_dir)
                logger.info("Initialized LocalArchiveStoreAdapter", extra={"scope": LogScope.CONFIG})
        return self._archive_store

    # ------------------------------------------------------------------
    # Service accessors
    # ------------------------------------------------------------------

    def get_upload_service(self):
        """Get or create UploadService (lazy singleton)."""
        if self._upload_service is None:
            from services.upload_service import UploadService

            self._upload_service = UploadService(rules=self.get_validation_rules())
            logger.info("Initialized UploadService")
        return self._upload_service

    def get_session_service(self):
        """Get or create SessionService (lazy singleton)."""
        if self._session_service is None:
            from services.annotation_service import SessionService

            self._session_service = SessionService(
                store=self.get_session_store(),
                expiry_days=self.get_settings().session_expiry_days,
            )
            logger.info("Initialized SessionService")
        return self._session_service

    def get_export_service(self):
        """Get or create ExportService (lazy singleton)."""
        if self._export_service is None:
            from services.export_service import ExportService

            self._export_service = ExportService(archive_store=self.get_archive_store())
            logger.info("Initialized ExportService")
        return self._export_service


# Global singleton instance
_container = DIContainer()


def get_di_container() -> DIContainer:
    """Get global DI container instance."""
    return _container
