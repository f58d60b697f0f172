"""
Session statistics: importance distribution, time spent per level and
simple quality indicators.
"""

from datetime import datetime

from domain.models import (
    AnnotationSession,
    ImportanceLevel,
    LevelTimeDistribution,
    QualityMetrics,
    SessionStatistics,
    StatisticsSummary,
)


def _parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def session_duration_minutes(session: AnnotationSession) -> int:
    """Minutes between creation and last modification (0 when unparseable)."""
    try:
        elapsed = _parse_iso(session.last_modified) - _parse_iso(session.created_at)
    except ValueError:
        return 0
    return round(elapsed.total_seconds() / 60)


def session_statistics(session: AnnotationSession) -> SessionStatistics:
    """Compute distribution and quality figures over rated cues."""
    levels = [level.value for level in ImportanceLevel]
    total_cues = len(session.cues)
    rated = [cue for cue in session.cues if cue.importance is not None]

    completion = (len(rated) / total_cues * 100) if total_cues > 0 else 0.0

    distribution = {level: 0 for level in levels}
    for cue in rated:
        if cue.importance in distribution:
            distribution[cue.importance] += 1

    time_distribution = []
    for level in levels:
        at_level = [cue for cue in rated if cue.importance == level]
        duration_seconds = sum(cue.end_ms - cue.start_ms for cue in at_level) / 1000
        percentage = (len(at_level) / len(rated) * 100) if rated else 0.0
        time_distribution.append(LevelTimeDistribution(
            level=level,
            total_duration=duration_seconds,
            percentage=percentage,
        ))

    average = sum(cue.importance for cue in rated) / len(rated) if rated else 0.0

    return SessionStatistics(
        summary=StatisticsSummary(
            total_cues=total_cues,
            annotated_cues=len(rated),
            completion_percentage=round(completion, 2),
            session_duration_minutes=session_duration_minutes(session),
        ),
        importance_distribution=distribution,
        time_distribution=time_distribution,
        quality_metrics=QualityMetrics(
            average_importance=round(average, 2),
            critical_moments=distribution[ImportanceLevel.CRITICAL.value],
            noisy_content=distribution[ImportanceLevel.NOISE.value],
        ),
    )
