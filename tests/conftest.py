"""
Root conftest.py: shared fixtures for the entire test suite.

Guidelines:
    • No __init__.py in test sub-directories (avoids shadowing root packages).
    • pytest.ini_options lives in pyproject.toml with pythonpath=["."].
    • Markers: integration.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional

import pytest

from domain.models import (
    AnnotationSession,
    SessionState,
    TranscriptCue,
    VTTValidationRules,
)


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")


# ---------------------------------------------------------------------------
# Sample transcript content
# ---------------------------------------------------------------------------

SAMPLE_VTT = """WEBVTT

1
00:00:00.000 --> 00:00:02.000
Alice: Good morning everyone.

2
00:00:02.500 --> 00:00:05.000
<v Bob>We shipped the release on Friday.</v>

3
00:00:05.000 --> 00:00:08.250
[Carol] Next step is the budget review.
"""

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


@pytest.fixture()
def sample_vtt() -> str:
    """Three-cue transcript with one speaker label of each style."""
    return SAMPLE_VTT


@pytest.fixture()
def rules() -> VTTValidationRules:
    return VTTValidationRules()


@pytest.fixture()
def fixed_clock() -> Callable[[], datetime]:
    """Clock frozen at 2025-01-02T03:04:05.678Z."""
    return lambda: FIXED_NOW


def make_cue(index: int, start_ms: int, end_ms: int, importance: Optional[int] = None, **overrides) -> TranscriptCue:
    fields = {
        "id": f"cue_{index + 1}_{start_ms}",
        "start_ms": start_ms,
        "end_ms": end_ms,
        "text": f"Line {index + 1}",
        "importance": importance,
    }
    fields.update(overrides)
    return TranscriptCue(**fields)


def make_session(importances: List[Optional[int]], **overrides) -> AnnotationSession:
    """Session with one 1-second cue per entry in ``importances``."""
    cues = [
        make_cue(i, i * 1000, i * 1000 + 1000, importance)
        for i, importance in enumerate(importances)
    ]
    fields = {
        "session_id": "session-1",
        "meeting_id": "Weekly Sync",
        "annotator": "reviewer",
        "version": 1,
        "created_at": "2025-01-01T00:00:00.000Z",
        "last_modified": "2025-01-01T00:30:00.000Z",
        "original_file_name": "meeting.vtt",
        "cues": cues,
        "status": SessionState.IN_PROGRESS,
    }
    fields.update(overrides)
    return AnnotationSession(**fields)


@pytest.fixture()
def session_factory() -> Callable[..., AnnotationSession]:
    return make_session


@pytest.fixture()
def cue_factory() -> Callable[..., TranscriptCue]:
    return make_cue
