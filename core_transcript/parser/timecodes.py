"""
Conversion between WebVTT timestamps and integer millisecond offsets.

Accepted input: ``HH:MM:SS.mmm``, ``MM:SS.mmm`` or ``SS.mmm`` with a 1-3 digit
fraction (``.5`` is 500ms). Output is always the canonical zero-padded
``HH:MM:SS.mmm``.
"""

import re
from typing import Optional

from shared_utils.error_handler import TimestampError


TIMESTAMP_PATTERN: re.Pattern = re.compile(
    r"^(?:(?:(\d+):)?(\d{1,2}):)?(\d{1,2})\.(\d{1,3})$"
)

_MS_PER_SECOND = 1000
_MS_PER_MINUTE = 60 * _MS_PER_SECOND
_MS_PER_HOUR = 60 * _MS_PER_MINUTE


def parse_timestamp(text: str, line_number: Optional[int] = None) -> int:
    """Decode a timestamp into milliseconds.

    Args:
        text: Timestamp text, surrounding whitespace ignored
        line_number: Source line reported on failure

    Returns:
        Millisecond offset

    Raises:
        TimestampError: If the text is not a valid timestamp
    """
    match = TIMESTAMP_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise TimestampError(
            f"Invalid timestamp: {text!r}",
            line_number=line_number,
            context={"timestamp": text},
        )

    hours, minutes, seconds, fraction = match.groups()
    minutes_value = int(minutes or 0)
    seconds_value = int(seconds)
    if minutes is not None and minutes_value > 59:
        raise TimestampError(
            f"Invalid timestamp: minutes out of range in {text!r}",
            line_number=line_number,
            context={"timestamp": text},
        )
    if (minutes is not None or hours is not None) and seconds_value > 59:
        raise TimestampError(
            f"Invalid timestamp: seconds out of range in {text!r}",
            line_number=line_number,
            context={"timestamp": text},
        )

    milliseconds = int(fraction.ljust(3, "0"))
    return (
        int(hours or 0) * _MS_PER_HOUR
        + minutes_value * _MS_PER_MINUTE
        + seconds_value * _MS_PER_SECOND
        + milliseconds
    )


def format_timestamp(milliseconds: int) -> str:
    """Encode milliseconds as ``HH:MM:SS.mmm``.

    Raises:
        TimestampError: If milliseconds is negative
    """
    if milliseconds < 0:
        raise TimestampError(
            f"Cannot format negative offset: {milliseconds}",
            context={"milliseconds": milliseconds},
        )

    hours, remainder = divmod(int(milliseconds), _MS_PER_HOUR)
    minutes, remainder = divmod(remainder, _MS_PER_MINUTE)
    seconds, ms = divmod(remainder, _MS_PER_SECOND)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{ms:03d}"
