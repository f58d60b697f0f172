"""
Export service: packages an annotation session into a downloadable archive.

Flow:  session → project rated cues → annotations.json
                → original text (stored copy, else re-serialized with importance)
                → ZIP with exactly two entries → optional archive store.

Every failure inside packaging surfaces as a single ExportError; partial
artifacts are never returned.
"""

from __future__ import annotations

import io
import json
import threading
import zipfile
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Set, Tuple

from core_transcript.engine.completion import export_control_for, summarize_session_completion
from core_transcript.parser.serializer import serialize_vtt
from domain.models import (
    AnnotationExportData,
    AnnotationSession,
    ExportResult,
    ImportanceAnnotation,
    TranscriptCue,
    generate_importance_notes,
)
from ports.archive_store import ArchiveStorePort
from services.annotation_service import iso_timestamp, utc_now
from shared_utils.constants import Defaults, ExportNames, LogScope, VTTFormat
from shared_utils.error_handler import (
    AppException,
    ExportError,
    ExportInProgressError,
    ExportNotReadyError,
)
from shared_utils.logging_utils import get_scoped_logger, log_execution
from shared_utils.validation import InputValidator

logger = get_scoped_logger(LogScope.EXPORT)

ArchiveEntry = Tuple[str, str]


# ---------------------------------------------------------------------------
# Packaging helpers (pure functions)
# ---------------------------------------------------------------------------

def resolve_version(version: object) -> int:
    """Positive integer versions pass through; anything else becomes 1."""
    if isinstance(version, int) and not isinstance(version, bool) and version > 0:
        return version
    return Defaults.SCHEMA_VERSION


def project_annotations(cues: Sequence[TranscriptCue], timestamp: str) -> List[ImportanceAnnotation]:
    """One annotation per rated cue, ids ``A1..AK`` dense over rated cues only."""
    annotations: List[ImportanceAnnotation] = []
    for cue in cues:
        if cue.importance is None:
            continue
        annotations.append(ImportanceAnnotation(
            annotation_id=f"A{len(annotations) + 1}",
            start_ms=cue.start_ms,
            end_ms=cue.end_ms,
            importance=cue.importance,
            notes=generate_importance_notes(cue.importance),
            timestamp=timestamp,
        ))
    return annotations


def derive_original_filename(original_file_name: object) -> str:
    name = InputValidator.sanitize_optional_string(original_file_name)
    return name or ExportNames.FALLBACK_ORIGINAL_FILENAME


def ensure_vtt_extension(filename: str) -> str:
    """Keep ``.vtt``, rewrite ``.txt`` to ``.vtt``, otherwise swap in ``.vtt``."""
    lower = filename.lower()
    if lower.endswith(VTTFormat.NATIVE_EXTENSION):
        return filename
    if lower.endswith(VTTFormat.ALTERNATE_EXTENSION):
        return filename[: -len(VTTFormat.ALTERNATE_EXTENSION)] + VTTFormat.NATIVE_EXTENSION
    return InputValidator.replace_extension(filename, VTTFormat.NATIVE_EXTENSION)


def derive_archive_prefix(meeting_id: str, original_filename: str) -> str:
    """Meeting id, else file stem, sanitized; ``session`` when nothing usable remains."""
    preferred = meeting_id or InputValidator.remove_extension(original_filename) or ExportNames.FALLBACK_ARCHIVE_PREFIX
    return InputValidator.sanitize_filename_segment(preferred) or ExportNames.FALLBACK_ARCHIVE_PREFIX


def archive_timestamp(created_at: str) -> str:
    """``2025-01-02T03:04:05.678Z`` becomes ``2025-01-02T03-04-05``."""
    return created_at.replace(":", "-").replace(".", "-")[:19]


def archive_filename(prefix: str, created_at: str) -> str:
    return f"{prefix}{ExportNames.ARCHIVE_SUFFIX}{archive_timestamp(created_at)}{ExportNames.ARCHIVE_EXTENSION}"


def build_archive(entries: Sequence[ArchiveEntry], modified_at: datetime) -> bytes:
    """Deflate-compressed ZIP of flat text entries, stamped ``modified_at``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries:
            info = zipfile.ZipInfo(name, date_time=modified_at.timetuple()[:6])
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, content.encode("utf-8"))
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# ExportService
# ---------------------------------------------------------------------------

class ExportService:
    """Builds export bundles and keeps at most one export in flight per session."""

    def __init__(
        self,
        archive_store: Optional[ArchiveStorePort] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.archive_store = archive_store
        self._clock = clock or utc_now
        self._lock = threading.Lock()
        self._pending: Set[str] = set()

    def is_pending(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._pending

    @log_execution(scope=LogScope.EXPORT)
    def build_export(self, session: AnnotationSession) -> ExportResult:
        """Package a session. Reads the session, never mutates it.

        Raises:
            ExportError: On any failure, carrying the root cause message
        """
        try:
            exported_at = self._clock()
            created_at = iso_timestamp(exported_at)

            annotations = project_annotations(session.cues, created_at)
            payload = AnnotationExportData(
                meeting_id=InputValidator.sanitize_optional_string(session.meeting_id),
                annotator=InputValidator.sanitize_optional_string(session.annotator),
                version=resolve_version(session.version),
                created_at=created_at,
                importance_annotations=annotations,
            )
            annotation_json = json.dumps(payload.model_dump(by_alias=True), indent=2, ensure_ascii=False)

            if session.original_file_content is not None:
                original_text = session.original_file_content
            else:
                original_text = serialize_vtt(session.cues, include_importance=True)

            safe_original_name = derive_original_filename(session.original_file_name)
            original_filename = ensure_vtt_extension(safe_original_name)
            prefix = derive_archive_prefix(payload.meeting_id, safe_original_name)

            archive_bytes = build_archive(
                [
                    (ExportNames.ANNOTATIONS_ENTRY, annotation_json),
                    (original_filename, original_text),
                ],
                exported_at,
            )
        except Exception as exc:
            logger.error("export_build_failed", session_id=session.session_id, error=str(exc))
            raise ExportError(
                f"Failed to export annotations: {exc}",
                session_id=session.session_id,
            ) from exc

        filename = archive_filename(prefix, created_at)
        logger.info(
            "export_built",
            session_id=session.session_id,
            filename=filename,
            annotation_count=len(annotations),
            size_bytes=len(archive_bytes),
        )
        return ExportResult(
            annotation_json=annotation_json,
            original_text=original_text,
            archive_bytes=archive_bytes,
            filename=filename,
            original_filename=original_filename,
            created_at=created_at,
            annotation_count=len(annotations),
        )

    def export_session(self, session: AnnotationSession) -> ExportResult:
        """Export a ready session and hand the archive to the archive store.

        Raises:
            ExportInProgressError: If an export for this session is pending
            ExportNotReadyError: If the export control is disabled
            ExportError: If packaging fails
        """
        session_id = session.session_id
        with self._lock:
            if session_id in self._pending:
                raise ExportInProgressError(session_id)
            control = export_control_for(summarize_session_completion(session))
            if control.disabled:
                raise ExportNotReadyError(
                    control.tooltip or control.label,
                    state=control.state.value,
                    session_id=session_id,
                )
            self._pending.add(session_id)

        try:
            result = self.build_export(session)
            if self.archive_store is not None:
                location = self.archive_store.store_archive(session_id, result.filename, result.archive_bytes)
                result = result.model_copy(update={"location": location})
            return result
        except AppException:
            raise
        except Exception as exc:
            logger.error("export_delivery_failed", session_id=session_id, error=str(exc))
            raise ExportError(f"Failed to export annotations: {exc}", session_id=session_id) from exc
        finally:
            with self._lock:
                self._pending.discard(session_id)
