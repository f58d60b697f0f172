from pydantic_settings import BaseSettings
from pydantic import field_validator, ConfigDict
from functools import lru_cache
import logging

from domain.models import VTTValidationRules
from shared_utils.constants import (
    ArchiveStoreKind,
    Defaults,
    Environment,
    SessionStoreKind,
    VTTFormat,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration with environment variable precedence.

    Precedence: 1) Environment Variables > 2) .env file > 3) Class defaults
    """
    # Application metadata
    app_name: str = "Transcript Annotation Service"
    app_version: str = "0.1.0"
    app_description: str = "WebVTT cue importance annotation and export"

    # API Base URL Configuration
    api_host: str = "localhost"
    api_port: int = 8000
    api_protocol: str = "http"  # "http" or "https"

    # Environment
    environment: str = Environment.DEVELOPMENT.value
    log_level: str = Defaults.LOG_LEVEL

    # Parser bounds
    vtt_max_file_size: int = Defaults.MAX_FILE_SIZE
    vtt_required_header: str = VTTFormat.HEADER
    vtt_min_cues: int = Defaults.MIN_CUES
    vtt_max_cues: int = Defaults.MAX_CUES
    vtt_max_cue_length: int = Defaults.MAX_CUE_LENGTH

    # Session storage
    session_store: str = SessionStoreKind.MEMORY.value
    session_store_path: str = "data/sessions/sessions.json"
    session_expiry_days: int = Defaults.SESSION_EXPIRY_DAYS

    # Archive storage
    archive_store: str = ArchiveStoreKind.LOCAL.value
    archive_dir: str = "data/exports"
    s3_archive_bucket: str = ""
    s3_archive_prefix: str = "exports"
    aws_region: str = Defaults.AWS_REGION
    aws_endpoint_url: str = ""

    model_config = ConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is recognized."""
        valid_envs = {e.value for e in Environment}
        if v.lower() not in valid_envs:
            raise ValueError(f"environment must be one of {sorted(valid_envs)}, got {v}")
        return v.lower()

    @field_validator('session_store')
    @classmethod
    def validate_session_store(cls, v: str) -> str:
        """Validate session store backend is supported."""
        valid_stores = {s.value for s in SessionStoreKind}
        if v.lower() not in valid_stores:
            raise ValueError(f"session_store must be one of {sorted(valid_stores)}, got {v}")
        return v.lower()

    @field_validator('archive_store')
    @classmethod
    def validate_archive_store(cls, v: str) -> str:
        """Validate archive store backend is supported."""
        valid_stores = {s.value for s in ArchiveStoreKind}
        if v.lower() not in valid_stores:
            raise ValueError(f"archive_store must be one of {sorted(valid_stores)}, got {v}")
        return v.lower()

    def validation_rules(self) -> VTTValidationRules:
        """Build the immutable parser bounds from configured values.

        Raises:
            pydantic.ValidationError: If a configured bound is out of range
        """
        return VTTValidationRules(
            max_file_size=self.vtt_max_file_size,
            required_header=self.vtt_required_header,
            min_cues=self.vtt_min_cues,
            max_cues=self.vtt_max_cues,
            max_cue_length=self.vtt_max_cue_length,
        )

    def get_api_base_url(self) -> str:
        """Get full API base URL constructed from host, port and protocol.

        Returns:
            Full API base URL (e.g., "http://localhost:8000")
        """
        # Don't add port if it's standard (80 for http, 443 for https)
        port_str = "" if (
            (self.api_protocol == "http" and self.api_port == 80) or
            (self.api_protocol == "https" and self.api_port == 443)
        ) else f":{self.api_port}"

        return f"{self.api_protocol}://{self.api_host}{port_str}"


@lru_cache()
def get_settings() -> Settings:
    """Load and cache application settings.

    Returns:
        Validated Settings instance

    Raises:
        ValueError: If settings are invalid
    """
    settings = Settings()

    logger.info(
        "configuration_loaded environment=%s session_store=%s archive_store=%s",
        settings.environment,
        settings.session_store,
        settings.archive_store,
    )

    return settings
