"""
Upload service: turns an uploaded file into a ParseResult.

Flow:  filename + raw bytes → pre-validate → decode UTF-8 → parse_vtt.

Progress is reported through an optional callback (0, 25, 50, 100).
``ParseCoordinator`` sits in front of the service for asynchronous readers
and guarantees that only the most recently requested parse is observable.
"""

from __future__ import annotations

from typing import Awaitable, Callable, List, Optional

from core_transcript.parser.vtt_parser import parse_vtt
from domain.models import (
    FileValidationResult,
    ParseErrorType,
    ParseResult,
    UploadOutcome,
    VTTParseError,
    VTTValidationRules,
)
from shared_utils.constants import LogScope, VTTFormat
from shared_utils.logging_utils import get_scoped_logger, log_execution
from shared_utils.validation import InputValidator

logger = get_scoped_logger(LogScope.UPLOAD)

ProgressCallback = Callable[[int], None]

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


# ---------------------------------------------------------------------------
# Pre-validation helpers
# ---------------------------------------------------------------------------

def format_file_size(size: int) -> str:
    """Human-readable size in powers of 1024 (``1.5 KB``, ``50 MB``)."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[exponent]}"


def validate_upload(
    filename: str,
    size: int,
    content_type: Optional[str] = None,
    rules: Optional[VTTValidationRules] = None,
) -> FileValidationResult:
    """Check name, extension, size and MIME type before reading content.

    Errors block the upload; warnings are advisory only.
    """
    rules = rules or VTTValidationRules()
    errors: List[VTTParseError] = []
    warnings: List[str] = []
    name = filename or ""

    if not name.strip():
        errors.append(VTTParseError(
            type=ParseErrorType.INVALID_FORMAT,
            message="File name is required",
        ))

    extension = InputValidator.get_file_extension(name)
    if extension not in VTTFormat.SUPPORTED_EXTENSIONS:
        errors.append(VTTParseError(
            type=ParseErrorType.INVALID_FORMAT,
            message=(
                f"Unsupported file extension: {extension}. "
                f"Expected: {', '.join(VTTFormat.SUPPORTED_EXTENSIONS)}"
            ),
        ))

    if content_type and content_type not in VTTFormat.SUPPORTED_MIME_TYPES:
        warnings.append(
            f"Unexpected MIME type: {content_type}. "
            f"Expected: {', '.join(VTTFormat.SUPPORTED_MIME_TYPES)}"
        )

    if size == 0:
        errors.append(VTTParseError(
            type=ParseErrorType.CORRUPTED_FILE,
            message="File is empty",
        ))
    elif size > rules.max_file_size:
        errors.append(VTTParseError(
            type=ParseErrorType.TOO_LARGE,
            message=(
                f"File size ({format_file_size(size)}) exceeds maximum allowed size "
                f"({format_file_size(rules.max_file_size)})"
            ),
        ))

    if name.strip():
        warnings.extend(InputValidator.filename_warnings(name))

    return FileValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        file_name=name,
        file_size=size,
        content_type=content_type or "",
    )


def decode_content(raw: bytes) -> str:
    """Decode UTF-8 upload bytes, tolerating a leading BOM.

    Raises:
        UnicodeDecodeError: If the bytes are not UTF-8
    """
    return raw.decode("utf-8-sig")


def _failed(filename: str, error_type: ParseErrorType, message: str, warnings: Optional[List[str]] = None) -> UploadOutcome:
    return UploadOutcome(
        filename=filename,
        result=ParseResult(
            success=False,
            errors=[VTTParseError(type=error_type, message=message)],
            warnings=warnings or [],
        ),
    )


# ---------------------------------------------------------------------------
# UploadService
# ---------------------------------------------------------------------------

class UploadService:
    """Validates, decodes and parses uploaded transcript files."""

    def __init__(self, rules: Optional[VTTValidationRules] = None) -> None:
        self.rules = rules or VTTValidationRules()

    @log_execution(scope=LogScope.UPLOAD)
    def parse_upload(
        self,
        filename: str,
        raw: bytes,
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadOutcome:
        """Run the full upload pipeline. Never raises.

        Args:
            filename: Name the user uploaded the file under
            raw: File content
            content_type: Reported MIME type, if any
            on_progress: Called with 0, 25, 50 and 100 as stages complete

        Returns:
            UploadOutcome; ``original_content`` is set only on success
        """
        report = on_progress or (lambda _percent: None)
        report(0)

        try:
            validation = validate_upload(filename, len(raw), content_type, self.rules)
            if not validation.is_valid:
                logger.info(
                    "upload_rejected",
                    filename=filename,
                    error_count=len(validation.errors),
                )
                return UploadOutcome(
                    filename=filename,
                    result=ParseResult(
                        success=False,
                        errors=validation.errors,
                        warnings=validation.warnings,
                    ),
                )
            report(25)

            try:
                text = decode_content(raw)
            except UnicodeDecodeError as exc:
                logger.warning("upload_decode_failed", filename=filename, error=str(exc))
                return _failed(
                    filename,
                    ParseErrorType.CORRUPTED_FILE,
                    "File is not valid UTF-8 text",
                    validation.warnings,
                )
            report(50)

            result = parse_vtt(text, self.rules)
            if validation.warnings:
                result = result.model_copy(update={"warnings": validation.warnings + result.warnings})
            report(100)

        except Exception as exc:
            logger.error("upload_unexpected_failure", filename=filename, error=str(exc))
            return _failed(filename, ParseErrorType.CORRUPTED_FILE, f"Failed to read file: {exc}")

        logger.info(
            "upload_parsed",
            filename=filename,
            success=result.success,
            cue_count=len(result.cues or []),
            warning_count=len(result.warnings),
        )
        return UploadOutcome(
            filename=filename,
            result=result,
            original_content=text if result.success else None,
        )


# ---------------------------------------------------------------------------
# Stale-result suppression
# ---------------------------------------------------------------------------

class ParseCoordinator:
    """Serializes parse requests so only the latest one is observable.

    Each request takes a generation token. When a read resolves after a newer
    request was issued, its outcome is discarded.
    """

    def __init__(self, upload_service: Optional[UploadService] = None) -> None:
        self._upload_service = upload_service or UploadService()
        self._generation = 0
        self._latest: Optional[UploadOutcome] = None

    @property
    def latest(self) -> Optional[UploadOutcome]:
        return self._latest

    def begin(self) -> int:
        """Issue the next generation token."""
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    async def parse(
        self,
        filename: str,
        read: Callable[[], Awaitable[bytes]],
        content_type: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[UploadOutcome]:
        """Read and parse one upload.

        Returns:
            The outcome, or None when a newer request superseded this one
        """
        token = self.begin()

        try:
            raw = await read()
        except Exception as exc:
            logger.warning("upload_read_failed", filename=filename, error=str(exc))
            outcome = _failed(filename, ParseErrorType.CORRUPTED_FILE, f"Failed to read file: {exc}")
        else:
            outcome = self._upload_service.parse_upload(filename, raw, content_type, on_progress)

        if not self.is_current(token):
            logger.info("stale_parse_discarded", filename=filename, generation=token, latest=self._generation)
            return None

        outcome = outcome.model_copy(update={"generation": token})
        self._latest = outcome
        return outcome
