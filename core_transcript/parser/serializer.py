"""
Rendering transcript cues back to WebVTT text.

Lossy inverse of the parser: markup removed during cleaning is not restored,
so callers needing byte fidelity should keep the original file text.
"""

from typing import List, Sequence

from core_transcript.parser.timecodes import format_timestamp
from domain.models import TranscriptCue
from shared_utils.constants import LogScope, VTTFormat
from shared_utils.logging_utils import get_scoped_logger


logger = get_scoped_logger(LogScope.SERIALIZER)


def importance_comment(importance: int) -> str:
    return f"{VTTFormat.COMMENT_MARKER}: Importance Level {importance}"


def cue_text_line(cue: TranscriptCue) -> str:
    """Cue text with its speaker label re-attached."""
    return f"{cue.speaker}: {cue.text}" if cue.speaker else cue.text


def serialize_vtt(cues: Sequence[TranscriptCue], include_importance: bool = False) -> str:
    """Render cues in input order as WebVTT.

    Args:
        cues: Cues assumed already valid
        include_importance: Emit a NOTE line with the rating of each rated cue

    Returns:
        WebVTT text: header, then per cue a sequence number, timing line,
        optional NOTE, text line and a blank separator.
    """
    lines: List[str] = [VTTFormat.HEADER, ""]

    for number, cue in enumerate(cues, start=1):
        lines.append(str(number))
        lines.append(
            f"{format_timestamp(cue.start_ms)} {VTTFormat.TIMING_ARROW} {format_timestamp(cue.end_ms)}"
        )
        if include_importance and cue.importance is not None:
            lines.append(importance_comment(cue.importance))
        lines.append(cue_text_line(cue))
        lines.append("")

    result = "\n".join(lines)
    logger.debug(
        "vtt_serialized",
        cue_count=len(cues),
        include_importance=include_importance,
        text_length=len(result),
    )
    return result
