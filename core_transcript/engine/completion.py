"""
Completion and export-readiness evaluation.

Both functions are pure over their inputs and are recomputed after every cue
mutation, so derived state cannot drift from the cue collection.
"""

from typing import List, Optional

from domain.models import (
    AnnotationSession,
    CompletionSummary,
    ExportControlState,
    ExportControlViewModel,
    ImportanceLevel,
    ImportanceLevelCounts,
)
from shared_utils.constants import LogScope
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.COMPLETION)

DEFAULT_EXPORT_LABEL = "Export annotations"
DEFAULT_DESCRIPTION_ID = "export-control-helper"
PENDING_EXPORT_LABEL = "Preparing export..."

_LEVEL_FIELDS = {
    ImportanceLevel.NOISE.value: "noise",
    ImportanceLevel.OPTIONAL.value: "optional",
    ImportanceLevel.IMPORTANT.value: "important",
    ImportanceLevel.CRITICAL.value: "critical",
}


def summarize_session_completion(session: Optional[AnnotationSession]) -> Optional[CompletionSummary]:
    """Derive rating progress and metadata readiness for a session.

    Args:
        session: Session to summarize, or None when no session is active

    Returns:
        CompletionSummary, or None for no session
    """
    if session is None:
        return None

    total_cues = len(session.cues)
    rated_cues = 0
    remaining_cue_indices: List[int] = []
    counts = {field: 0 for field in _LEVEL_FIELDS.values()}

    for index, cue in enumerate(session.cues):
        if cue.importance is None:
            remaining_cue_indices.append(index)
            continue
        rated_cues += 1
        field = _LEVEL_FIELDS.get(cue.importance)
        if field is not None:
            counts[field] += 1

    remaining_cue_count = max(total_cues - rated_cues, 0)
    # Half-up rounding in integer arithmetic (round() would round 12.5 to 12)
    progress_percentage = (rated_cues * 200 + total_cues) // (2 * total_cues) if total_cues > 0 else 0

    missing_metadata_fields: List[str] = []
    if not (session.original_file_name or "").strip():
        missing_metadata_fields.append("originalFileName")

    return CompletionSummary(
        total_cues=total_cues,
        rated_cues=rated_cues,
        remaining_cue_count=remaining_cue_count,
        remaining_cue_indices=remaining_cue_indices,
        progress_percentage=progress_percentage,
        importance_levels=ImportanceLevelCounts(**counts),
        is_session_complete=total_cues > 0 and remaining_cue_count == 0,
        metadata_ready=not missing_metadata_fields,
        missing_metadata_fields=missing_metadata_fields,
    )


def build_export_control(
    is_session_complete: bool,
    remaining_cue_count: int,
    metadata_ready: bool,
    pending: bool = False,
    base_label: str = DEFAULT_EXPORT_LABEL,
    description_id: str = DEFAULT_DESCRIPTION_ID,
) -> ExportControlViewModel:
    """Export control state. Priority: incomplete cues, missing metadata, pending, ready."""
    if not is_session_complete:
        cue_label = "cue" if remaining_cue_count == 1 else "cues"
        return ExportControlViewModel(
            state=ExportControlState.INCOMPLETE_CUES,
            disabled=True,
            label=base_label,
            tooltip=f"Annotate {remaining_cue_count} more {cue_label} to export",
            description_id=description_id,
        )

    if not metadata_ready:
        return ExportControlViewModel(
            state=ExportControlState.MISSING_METADATA,
            disabled=True,
            label=base_label,
            tooltip="Original file metadata missing; confirm upload before exporting.",
            description_id=description_id,
        )

    if pending:
        return ExportControlViewModel(
            state=ExportControlState.PENDING,
            disabled=True,
            label=PENDING_EXPORT_LABEL,
            description_id=description_id,
        )

    return ExportControlViewModel(
        state=ExportControlState.READY,
        disabled=False,
        label=base_label,
        tooltip="Download JSON + original VTT as a ZIP archive.",
        description_id=description_id,
    )


def export_control_for(summary: Optional[CompletionSummary], pending: bool = False) -> ExportControlViewModel:
    """Export control derived from a completion summary (None means no session)."""
    if summary is None:
        return build_export_control(
            is_session_complete=False,
            remaining_cue_count=0,
            metadata_ready=False,
            pending=pending,
        )
    control = build_export_control(
        is_session_complete=summary.is_session_complete,
        remaining_cue_count=summary.remaining_cue_count,
        metadata_ready=summary.metadata_ready,
        pending=pending,
    )
    logger.debug("export_control_evaluated", state=control.state.value, disabled=control.disabled)
    return control
