"""
Speaker label extraction from the first text line of a cue.

Matchers are tried in order and the first match wins:
    <v Alice>Hello          voice tag
    Alice: Hello           colon label (1-60 chars)
    [Alice] Hello          bracket label (1-60 chars)
"""

import re
from typing import Callable, List, NamedTuple, Optional, Tuple

from shared_utils.constants import VTTFormat


class SpeakerMatch(NamedTuple):
    """Speaker name and the text left on the same line."""
    speaker: str
    remainder: str


SpeakerMatcher = Callable[[str], Optional[SpeakerMatch]]

VOICE_TAG_PATTERN: re.Pattern = re.compile(r"^<v(?:\.[^\s>]*)?\s+([^>]+)>(.*)$", re.IGNORECASE)
COLON_LABEL_PATTERN: re.Pattern = re.compile(r"^([\w .,'\"\-()]+):\s*(.*)$")
BRACKET_LABEL_PATTERN: re.Pattern = re.compile(r"^\[([^\]]+)\]\s*(.*)$")


def _bounded(speaker: str) -> bool:
    return 0 < len(speaker) <= VTTFormat.SPEAKER_LABEL_MAX_LENGTH


def match_voice_tag(line: str) -> Optional[SpeakerMatch]:
    match = VOICE_TAG_PATTERN.match(line)
    if not match:
        return None
    speaker = match.group(1).strip()
    if not speaker:
        return None
    return SpeakerMatch(speaker, match.group(2).strip())


def match_colon_label(line: str) -> Optional[SpeakerMatch]:
    match = COLON_LABEL_PATTERN.match(line)
    if not match:
        return None
    speaker = match.group(1).strip()
    if not _bounded(speaker):
        return None
    return SpeakerMatch(speaker, match.group(2).strip())


def match_bracket_label(line: str) -> Optional[SpeakerMatch]:
    match = BRACKET_LABEL_PATTERN.match(line)
    if not match:
        return None
    speaker = match.group(1).strip()
    if not _bounded(speaker):
        return None
    return SpeakerMatch(speaker, match.group(2).strip())


SPEAKER_MATCHERS: Tuple[SpeakerMatcher, ...] = (
    match_voice_tag,
    match_colon_label,
    match_bracket_label,
)


def extract_speaker(
    text_lines: List[str],
    matchers: Tuple[SpeakerMatcher, ...] = SPEAKER_MATCHERS,
) -> Tuple[Optional[str], List[str]]:
    """Split a speaker label off the first text line.

    Args:
        text_lines: Raw cue text lines
        matchers: Ordered matchers; the first non-None result is used

    Returns:
        (speaker or None, remaining text lines). The first line is dropped
        when nothing but the label was on it.
    """
    if not text_lines:
        return None, list(text_lines)

    remaining = list(text_lines)
    for matcher in matchers:
        found = matcher(remaining[0])
        if found is None:
            continue
        if found.remainder:
            remaining[0] = found.remainder
        else:
            remaining.pop(0)
        return found.speaker, remaining

    return None, remaining
