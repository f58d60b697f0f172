"""
Cue navigation helpers for the annotation controller.

All functions take the cue list and the current index and return the new
index; they never mutate the cues.
"""

from typing import Optional, Sequence

from domain.models import TranscriptCue
from shared_utils.error_handler import ValidationError


def validate_index(cues: Sequence[TranscriptCue], index: int) -> int:
    """Return index when it addresses a cue.

    Raises:
        ValidationError: If index is out of range
    """
    if isinstance(index, bool) or not isinstance(index, int) or index < 0 or index >= len(cues):
        raise ValidationError("Invalid cue index", context={"index": index, "cue_count": len(cues)})
    return index


def next_index(cues: Sequence[TranscriptCue], current: int) -> int:
    if not cues:
        return 0
    return min(current + 1, len(cues) - 1)


def previous_index(cues: Sequence[TranscriptCue], current: int) -> int:
    return max(current - 1, 0)


def first_unrated_index(cues: Sequence[TranscriptCue]) -> Optional[int]:
    for index, cue in enumerate(cues):
        if cue.importance is None:
            return index
    return None


def next_unrated_index(cues: Sequence[TranscriptCue], current: int) -> int:
    """Index of the next unrated cue after current, or current when none."""
    for index in range(current + 1, len(cues)):
        if cues[index].importance is None:
            return index
    return current


def previous_unrated_index(cues: Sequence[TranscriptCue], current: int) -> int:
    """Index of the closest unrated cue before current, or current when none."""
    for index in range(min(current, len(cues)) - 1, -1, -1):
        if cues[index].importance is None:
            return index
    return current
