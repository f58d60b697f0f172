"""
Tests for core_transcript.engine.statistics.
"""

from core_transcript.engine.statistics import session_duration_minutes, session_statistics


class TestSessionStatistics:
    def test_summary(self, session_factory) -> None:
        stats = session_statistics(session_factory([0, 3, 3, None]))
        assert stats.summary.total_cues == 4
        assert stats.summary.annotated_cues == 3
        assert stats.summary.completion_percentage == 75.0
        assert stats.summary.session_duration_minutes == 30

    def test_distribution_covers_all_levels(self, session_factory) -> None:
        stats = session_statistics(session_factory([0, 3, 3, None]))
        assert stats.importance_distribution == {0: 1, 1: 0, 2: 0, 3: 2}

    def test_time_distribution(self, session_factory) -> None:
        stats = session_statistics(session_factory([0, 3, 3, None]))
        critical = stats.time_distribution[3]
        assert critical.level == 3
        assert critical.total_duration == 2.0
        assert critical.model_dump(by_alias=True)["totalDuration"] == 2.0
        assert round(critical.percentage, 2) == 66.67

    def test_quality_metrics(self, session_factory) -> None:
        stats = session_statistics(session_factory([0, 3, 3, None]))
        assert stats.quality_metrics.average_importance == 2.0
        assert stats.quality_metrics.critical_moments == 2
        assert stats.quality_metrics.noisy_content == 1

    def test_unrated_session(self, session_factory) -> None:
        stats = session_statistics(session_factory([None, None]))
        assert stats.summary.completion_percentage == 0.0
        assert stats.quality_metrics.average_importance == 0.0
        assert all(entry.percentage == 0.0 for entry in stats.time_distribution)

    def test_empty_session(self, session_factory) -> None:
        stats = session_statistics(session_factory([]))
        assert stats.summary.total_cues == 0
        assert stats.summary.completion_percentage == 0.0

    def test_unparseable_timestamps_give_zero_duration(self, session_factory) -> None:
        assert session_duration_minutes(session_factory([], created_at="not a date")) == 0

    def test_serializes_with_camel_case(self, session_factory) -> None:
        body = session_statistics(session_factory([1])).model_dump(by_alias=True)
        assert "qualityMetrics" in body
        assert "sessionDurationMinutes" in body["summary"]
