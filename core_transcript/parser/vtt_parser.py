"""
WebVTT parsing into structured transcript cues.

Parses the subset of WebVTT used for transcripts: a header line, optional
cue identifiers, timing lines and text. Cue settings after the end timestamp
are ignored; NOTE lines are comments. Well-formed-but-invalid input never
raises: every problem becomes an entry in ParseResult.errors or .warnings.
"""

import re
from typing import List, Optional, Tuple

from core_transcript.parser.speakers import extract_speaker
from core_transcript.parser.timecodes import parse_timestamp
from domain.models import (
    ParseErrorType,
    ParseResult,
    TranscriptCue,
    VTTParseError,
    VTTValidationRules,
    validate_transcript_cue,
)
from shared_utils.constants import LogScope, VTTFormat
from shared_utils.error_handler import TimestampError
from shared_utils.logging_utils import ContextualLogger


logger = ContextualLogger(scope=LogScope.PARSER)

# Timestamp-shaped tokens either side of the arrow; trailing cue settings ignored
TIMING_PATTERN: re.Pattern = re.compile(r"^(\d\S*?)\s*-->\s*(\d\S*)(?:\s+.*)?$")

_TAG_PATTERN = re.compile(r"<[^>]*>")
_BRACE_PATTERN = re.compile(r"\{[^}]*\}")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def clean_cue_text(text: str) -> str:
    """Strip tag markup and brace directives, collapse whitespace."""
    text = _TAG_PATTERN.sub("", text)
    text = _BRACE_PATTERN.sub("", text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def generate_cue_id(index: int, start_ms: int) -> str:
    """Deterministic cue id from ordinal position and start time."""
    return f"cue_{index + 1}_{start_ms}"


def _is_comment(line: str) -> bool:
    return line.startswith(VTTFormat.COMMENT_MARKER)


def _match_timing(line: str) -> Optional[re.Match]:
    return TIMING_PATTERN.match(line)


def _find_header(lines: List[str]) -> Tuple[int, str]:
    """Index and content of the first non-empty line, or (len(lines), "")."""
    for index, line in enumerate(lines):
        if line:
            return index, line
    return len(lines), ""


def _overlap_warnings(cues: List[TranscriptCue]) -> List[str]:
    warnings: List[str] = []
    for current, following in zip(cues, cues[1:]):
        if current.end_ms > following.start_ms:
            warnings.append(
                f"Overlapping cues detected: {current.id} ({current.end_ms}ms) "
                f"overlaps with {following.id} ({following.start_ms}ms)"
            )
    return warnings


class VTTParser:
    """Line-scanning parser for WebVTT transcript files.

    One instance holds the bounds for a run of parses; ``parse`` itself keeps
    no state between calls.
    """

    def __init__(self, rules: Optional[VTTValidationRules] = None) -> None:
        self.rules = rules or VTTValidationRules()

    def parse(self, content: str) -> ParseResult:
        """Parse file text into cues plus classified errors and warnings.

        Args:
            content: Full text of the uploaded file

        Returns:
            ParseResult; ``success`` is True only when no errors were recorded
        """
        try:
            return self._parse(content)
        except Exception as e:
            logger.error("vtt_parse_unexpected_failure", error=str(e), error_type=type(e).__name__)
            return ParseResult(
                success=False,
                errors=[VTTParseError(
                    type=ParseErrorType.CORRUPTED_FILE,
                    message=f"Failed to parse VTT file: {e}",
                )],
            )

    def _parse(self, content: str) -> ParseResult:
        rules = self.rules
        errors: List[VTTParseError] = []
        warnings: List[str] = []
        cues: List[TranscriptCue] = []

        if not content or not content.strip():
            return ParseResult(
                success=False,
                errors=[VTTParseError(
                    type=ParseErrorType.CORRUPTED_FILE,
                    message="File content is empty",
                )],
            )

        size = len(content.encode("utf-8"))
        if size > rules.max_file_size:
            return ParseResult(
                success=False,
                errors=[VTTParseError(
                    type=ParseErrorType.TOO_LARGE,
                    message=f"File size exceeds maximum allowed size ({size}/{rules.max_file_size} bytes)",
                )],
            )

        lines = [line.strip() for line in content.lstrip("\ufeff").splitlines()]
        logger.debug("parsing_vtt_text", line_count=len(lines))

        header_index, header_line = _find_header(lines)
        if header_line.startswith(rules.required_header):
            current = header_index + 1
        else:
            errors.append(VTTParseError(
                type=ParseErrorType.INVALID_FORMAT,
                message=f'File must start with "{rules.required_header}" header',
                line_number=header_index + 1,
            ))
            # Keep scanning from the first content line so later errors surface too
            current = header_index

        cue_index = 0
        while current < len(lines):
            line = lines[current]
            if not line or _is_comment(line):
                current += 1
                continue

            timing = _match_timing(line)
            if timing is None:
                # Cue identifier or stray text outside a block
                current += 1
                continue

            timing_line_number = current + 1
            start_text, end_text = timing.group(1), timing.group(2)
            try:
                start_ms = parse_timestamp(start_text, line_number=timing_line_number)
                end_ms = parse_timestamp(end_text, line_number=timing_line_number)
            except TimestampError as e:
                errors.append(VTTParseError(
                    type=ParseErrorType.INVALID_TIMESTAMP,
                    message=f"Failed to parse timing: {e.message}",
                    line_number=timing_line_number,
                    details=line,
                ))
                current += 1
                continue

            if start_ms >= end_ms:
                errors.append(VTTParseError(
                    type=ParseErrorType.INVALID_TIMESTAMP,
                    message="Start time must be less than end time",
                    line_number=timing_line_number,
                    details=f"Start: {start_text}, End: {end_text}",
                ))
                current += 1
                continue

            current += 1
            text_start_line = current + 1
            text_lines: List[str] = []
            while current < len(lines) and lines[current] and not _match_timing(lines[current]):
                if not _is_comment(lines[current]):
                    text_lines.append(lines[current])
                current += 1

            speaker, content_lines = extract_speaker(text_lines)
            text = clean_cue_text(" ".join(content_lines))

            if not text:
                warnings.append(f"Empty cue text at line {text_start_line}")
                continue

            if len(text) > rules.max_cue_length:
                warnings.append(
                    f"Cue text exceeds maximum length ({len(text)}/{rules.max_cue_length}) "
                    f"at line {text_start_line}"
                )

            cue = TranscriptCue(
                id=generate_cue_id(cue_index, start_ms),
                start_ms=start_ms,
                end_ms=end_ms,
                text=text,
                speaker=speaker,
            )

            problems = validate_transcript_cue(cue)
            if problems:
                errors.append(VTTParseError(
                    type=ParseErrorType.INVALID_FORMAT,
                    message=f"Invalid cue: {', '.join(problems)}",
                    line_number=timing_line_number,
                    details=f"Cue ID: {cue.id}",
                ))
                continue

            cues.append(cue)
            cue_index += 1

        if not cues:
            errors.append(VTTParseError(
                type=ParseErrorType.NO_CUES,
                message="No valid cues found in file",
            ))
        elif len(cues) < rules.min_cues:
            errors.append(VTTParseError(
                type=ParseErrorType.NO_CUES,
                message=f"File must contain at least {rules.min_cues} cue(s), found {len(cues)}",
            ))

        if len(cues) > rules.max_cues:
            errors.append(VTTParseError(
                type=ParseErrorType.TOO_LARGE,
                message=f"File contains too many cues ({len(cues)}/{rules.max_cues})",
            ))

        cues.sort(key=lambda cue: cue.start_ms)
        warnings.extend(_overlap_warnings(cues))

        success = not errors
        logger.info(
            "vtt_parsed",
            success=success,
            cue_count=len(cues),
            error_count=len(errors),
            warning_count=len(warnings),
        )

        return ParseResult(
            success=success,
            cues=cues if success else None,
            errors=errors,
            warnings=warnings,
        )


def parse_vtt(content: str, rules: Optional[VTTValidationRules] = None) -> ParseResult:
    """Parse WebVTT text with the given bounds (defaults when omitted)."""
    return VTTParser(rules).parse(content)
