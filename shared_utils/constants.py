"""
Constants management.
Centralized configuration for all magic values, format tokens, and defaults.
"""

from enum import Enum
from typing import Final


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class SessionStoreKind(str, Enum):
    """Supported session store backends."""
    MEMORY = "memory"
    JSON = "json"


class ArchiveStoreKind(str, Enum):
    """Supported archive store backends."""
    LOCAL = "local"
    S3 = "s3"


# Default values
class Defaults:
    """Defaults for parsing limits, storage and logging."""
    MAX_FILE_SIZE: Final[int] = 50_000_000  # 50MB
    MIN_CUES: Final[int] = 1
    MAX_CUES: Final[int] = 10_000
    MAX_CUE_LENGTH: Final[int] = 5_000  # characters
    SESSION_EXPIRY_DAYS: Final[int] = 7
    SCHEMA_VERSION: Final[int] = 1
    LOG_LEVEL: Final[str] = "INFO"
    AWS_REGION: Final[str] = "eu-west-2"


# WebVTT format tokens
class VTTFormat:
    """Tokens of the subtitle format and the export bundle."""
    HEADER: Final[str] = "WEBVTT"
    COMMENT_MARKER: Final[str] = "NOTE"
    TIMING_ARROW: Final[str] = "-->"
    NATIVE_EXTENSION: Final[str] = ".vtt"
    ALTERNATE_EXTENSION: Final[str] = ".txt"
    SUPPORTED_EXTENSIONS: Final[tuple] = (".vtt", ".txt")
    SUPPORTED_MIME_TYPES: Final[tuple] = ("text/vtt", "text/plain")
    SPEAKER_LABEL_MAX_LENGTH: Final[int] = 60


class ExportNames:
    """Fixed names used inside and around the export archive."""
    ANNOTATIONS_ENTRY: Final[str] = "annotations.json"
    FALLBACK_ORIGINAL_FILENAME: Final[str] = "original.vtt"
    FALLBACK_ARCHIVE_PREFIX: Final[str] = "session"
    ARCHIVE_SUFFIX: Final[str] = "-annotations-"
    ARCHIVE_EXTENSION: Final[str] = ".zip"
    STORAGE_KEY_PREFIX: Final[str] = "transcript-session-"


# Logging scopes
class LogScope:
    """Standardized logging scope names."""
    CONFIG = "config_loader"
    API = "api"
    PARSER = "vtt_parser"
    SERIALIZER = "vtt_serializer"
    COMPLETION = "completion"
    EXPORT = "export"
    UPLOAD = "upload"
    SESSION = "session"
    ADAPTER = "adapter"
    ERROR_HANDLER = "error_handler"


# API endpoints and paths
class APIEndpoints:
    """API route definitions."""
    HEALTH = "/health"
    SESSIONS = "/api/v1/sessions"
    SESSION = "/api/v1/sessions/{session_id}"
    SESSION_SUMMARY = "/api/v1/sessions/{session_id}/summary"
    CUE_IMPORTANCE = "/api/v1/sessions/{session_id}/cues/{cue_index}/importance"
    SESSION_EXPORT = "/api/v1/sessions/{session_id}/export"


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes for consistency."""
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    EXPORT_FAILED = "EXPORT_FAILED"
    EXPORT_PENDING = "EXPORT_PENDING"
    EXPORT_NOT_READY = "EXPORT_NOT_READY"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
