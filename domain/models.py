"""
Pure domain models for the transcript annotation system.

Data flow:
  Raw WebVTT text → TranscriptCue (one timed line, parsed)
                  → ParseResult (cues + classified errors/warnings)
                  → AnnotationSession (cues rated one at a time)
                  → CompletionSummary (derived readiness state)
                  → AnnotationExportData + ExportResult (archive bundle)

Field names are snake_case in Python; every model serializes with camelCase
aliases (``model_dump(by_alias=True)``) to match the exported JSON schema.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared_utils.constants import Defaults, VTTFormat


class CamelModel(BaseModel):
    """Base model serializing with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Importance levels
# ---------------------------------------------------------------------------


class ImportanceLevel(int, Enum):
    """Importance scale applied to each cue."""

    NOISE = 0
    OPTIONAL = 1
    IMPORTANT = 2
    CRITICAL = 3


IMPORTANCE_NOTES: Dict[int, str] = {
    ImportanceLevel.NOISE.value: "Noise/non-informative",
    ImportanceLevel.OPTIONAL.value: "Optional background context",
    ImportanceLevel.IMPORTANT.value: "Important information/evidence",
    ImportanceLevel.CRITICAL.value: "Critical decision/commitment",
}


class ImportanceLevelConfig(BaseModel):
    """Display metadata for one importance level."""

    level: int
    label: str
    description: str
    shortcut: str


IMPORTANCE_CONFIG: List[ImportanceLevelConfig] = [
    ImportanceLevelConfig(
        level=0,
        label="Noise",
        description="Small talk, fillers, chit-chat, non-informative",
        shortcut="0",
    ),
    ImportanceLevelConfig(
        level=1,
        label="Optional",
        description="Minor background, explanations, low-value repetitions",
        shortcut="1",
    ),
    ImportanceLevelConfig(
        level=2,
        label="Important",
        description="Core comparisons, key evidence, plan actions, critical questions",
        shortcut="2",
    ),
    ImportanceLevelConfig(
        level=3,
        label="Critical",
        description="Decisions / commitments / hard results / key risk confirmations",
        shortcut="3",
    ),
]


def is_valid_importance(value: object) -> bool:
    """True for the integers 0-3 (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value in IMPORTANCE_NOTES


def get_importance_config(level: int) -> ImportanceLevelConfig:
    """Look up display metadata for an importance level.

    Raises:
        ValueError: If the level is not 0-3
    """
    for config in IMPORTANCE_CONFIG:
        if config.level == level:
            return config
    raise ValueError(f"Invalid importance level: {level}")


def generate_importance_notes(importance: int) -> str:
    """Fixed note text for an importance level.

    Raises:
        ValueError: If the level is not 0-3
    """
    if not is_valid_importance(importance):
        raise ValueError(f"Invalid importance level: {importance}")
    return IMPORTANCE_NOTES[importance]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParseErrorType(str, Enum):
    """Classification of parse failures."""

    INVALID_FORMAT = "INVALID_FORMAT"
    CORRUPTED_FILE = "CORRUPTED_FILE"
    TOO_LARGE = "TOO_LARGE"
    NO_CUES = "NO_CUES"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"
    # Reserved: empty cues are reported as warnings and never raise this kind.
    EMPTY_CUE = "EMPTY_CUE"


class VTTParseError(CamelModel):
    """One classified parse failure."""

    type: ParseErrorType
    message: str
    line_number: Optional[int] = None
    details: Optional[str] = None


class VTTValidationRules(CamelModel):
    """Immutable bounds passed by value into every parse call."""

    model_config = ConfigDict(frozen=True)

    max_file_size: int = Field(default=Defaults.MAX_FILE_SIZE, gt=0)
    required_header: str = Field(default=VTTFormat.HEADER, min_length=1)
    min_cues: int = Field(default=Defaults.MIN_CUES, ge=0)
    max_cues: int = Field(default=Defaults.MAX_CUES, gt=0)
    max_cue_length: int = Field(default=Defaults.MAX_CUE_LENGTH, gt=0)


class TranscriptCue(CamelModel):
    """One timed line of transcript. Only ``importance`` changes after parsing."""

    id: str
    start_ms: int
    end_ms: int
    text: str
    speaker: Optional[str] = None
    importance: Optional[int] = None


def validate_transcript_cue(cue: TranscriptCue) -> List[str]:
    """Field-level checks for a cue.

    Returns:
        Human-readable problems; empty when the cue is valid.
    """
    errors: List[str] = []

    if not cue.id:
        errors.append("Cue ID is required")

    if cue.start_ms < 0:
        errors.append("Start time must be a non-negative number")

    if cue.end_ms <= 0:
        errors.append("End time must be a positive number")

    if cue.end_ms <= cue.start_ms:
        errors.append("End time must be greater than start time")

    if not cue.text or not cue.text.strip():
        errors.append("Cue text cannot be empty")

    if cue.importance is not None and not is_valid_importance(cue.importance):
        errors.append("Importance level must be 0, 1, 2, or 3")

    return errors


class ParseResult(CamelModel):
    """Outcome of one parse attempt.

    ``cues`` is populated only on success; a result can succeed with warnings.
    """

    success: bool
    cues: Optional[List[TranscriptCue]] = None
    errors: List[VTTParseError] = []
    warnings: List[str] = []

    @property
    def first_error(self) -> Optional[VTTParseError]:
        return self.errors[0] if self.errors else None


class FileValidationResult(CamelModel):
    """Pre-parse checks on an uploaded file's name, size and type."""

    is_valid: bool
    errors: List[VTTParseError] = []
    warnings: List[str] = []
    file_name: str = ""
    file_size: int = 0
    content_type: str = ""


class UploadOutcome(CamelModel):
    """Parse result of one upload plus the decoded source text."""

    filename: str
    result: ParseResult
    original_content: Optional[str] = None
    generation: int = 0


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class SessionState(str, Enum):
    """Session lifecycle states."""

    INITIALIZED = "initialized"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    EXPORTED = "exported"


class AnnotationSession(CamelModel):
    """Working state for one annotator's pass over one uploaded file.

    ``cues`` is the single source of truth; annotations are always projected
    from it and never stored alongside.
    """

    session_id: str
    meeting_id: Optional[str] = ""
    annotator: Optional[str] = ""
    version: Optional[int] = Defaults.SCHEMA_VERSION
    created_at: str  # ISO 8601
    last_modified: str  # ISO 8601
    original_file_name: Optional[str] = ""
    original_file_content: Optional[str] = None
    cues: List[TranscriptCue] = []
    status: SessionState = SessionState.INITIALIZED
    exported_at: Optional[str] = None  # ISO 8601


class ImportanceLevelCounts(CamelModel):
    """Rated-cue tally per importance level."""

    noise: int = 0
    optional: int = 0
    important: int = 0
    critical: int = 0


class CompletionSummary(CamelModel):
    """Derived readiness state of a session."""

    total_cues: int
    rated_cues: int
    remaining_cue_count: int
    remaining_cue_indices: List[int] = []
    progress_percentage: int
    importance_levels: ImportanceLevelCounts
    is_session_complete: bool
    metadata_ready: bool
    missing_metadata_fields: List[str] = []


class ExportControlState(str, Enum):
    """Which condition drives the export control, in priority order."""

    INCOMPLETE_CUES = "incomplete_cues"
    MISSING_METADATA = "missing_metadata"
    PENDING = "pending"
    READY = "ready"


class ExportControlViewModel(CamelModel):
    """Label, disabled flag and explanation for the export control."""

    state: ExportControlState
    disabled: bool
    label: str
    tooltip: Optional[str] = None
    description_id: str


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class ImportanceAnnotation(CamelModel):
    """Export-time projection of one rated cue."""

    annotation_id: str
    start_ms: int
    end_ms: int
    importance: int
    notes: str
    timestamp: str  # ISO 8601


class AnnotationExportData(CamelModel):
    """The annotations.json payload. Field order is the serialized key order."""

    meeting_id: str
    annotator: str
    version: int
    created_at: str  # ISO 8601, export time
    importance_annotations: List[ImportanceAnnotation] = []


class ExportResult(BaseModel):
    """Artifacts of one successful export."""

    annotation_json: str
    original_text: str
    archive_bytes: bytes
    filename: str
    original_filename: str
    created_at: str
    annotation_count: int = 0
    location: Optional[str] = None


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class StatisticsSummary(CamelModel):
    total_cues: int
    annotated_cues: int
    completion_percentage: float
    session_duration_minutes: int


class LevelTimeDistribution(CamelModel):
    level: int
    total_duration: float  # seconds
    percentage: float


class QualityMetrics(CamelModel):
    average_importance: float
    critical_moments: int
    noisy_content: int


class SessionStatistics(CamelModel):
    """Distribution and quality figures for a session."""

    summary: StatisticsSummary
    importance_distribution: Dict[int, int]
    time_distribution: List[LevelTimeDistribution]
    quality_metrics: QualityMetrics
