"""
Tests for shared_utils.validation.

Covers the InputValidator checks and the filename helpers used for uploads
and archive naming.
"""

import pytest

from shared_utils.validation import InputValidator
from shared_utils.error_handler import ValidationError


# ---------------------------------------------------------------------------
# validate_non_empty_string
# ---------------------------------------------------------------------------


class TestValidateNonEmptyString:
    def test_success(self) -> None:
        assert InputValidator.validate_non_empty_string("hello", "field") == "hello"

    def test_strips_whitespace(self) -> None:
        assert InputValidator.validate_non_empty_string("  hello  ", "field") == "hello"

    def test_empty_raises(self) -> None:
        with pytest.raises(ValidationError, match="cannot be empty"):
            InputValidator.validate_non_empty_string("", "name")

    def test_whitespace_only_raises(self) -> None:
        with pytest.raises(ValidationError, match="cannot be empty"):
            InputValidator.validate_non_empty_string("   ", "test_field")

    def test_non_string_raises(self) -> None:
        with pytest.raises(ValidationError, match="must be a string"):
            InputValidator.validate_non_empty_string(123, "field")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# get_file_extension
# ---------------------------------------------------------------------------


class TestGetFileExtension:
    def test_lower_cases(self) -> None:
        assert InputValidator.get_file_extension("Meeting.VTT") == ".vtt"

    def test_last_extension_only(self) -> None:
        assert InputValidator.get_file_extension("notes.backup.txt") == ".txt"

    def test_no_extension(self) -> None:
        assert InputValidator.get_file_extension("transcript") == ""


# ---------------------------------------------------------------------------
# sanitize_filename
# ---------------------------------------------------------------------------


class TestSanitizeFilename:
    def test_clean_filename(self) -> None:
        assert InputValidator.sanitize_filename("meeting.vtt") == "meeting.vtt"

    def test_removes_bad_chars(self) -> None:
        assert InputValidator.sanitize_filename('file|with*bad:chars.vtt') == "filewithbadchars.vtt"

    def test_traversal_double_dot_raises(self) -> None:
        with pytest.raises(ValidationError, match="Invalid filename"):
            InputValidator.sanitize_filename("test/../file.vtt")

    def test_traversal_leading_dot_raises(self) -> None:
        with pytest.raises(ValidationError, match="Invalid filename"):
            InputValidator.sanitize_filename("../etc/passwd")

    def test_removes_path_separators(self) -> None:
        result = InputValidator.sanitize_filename("path/to\\file.vtt")
        assert "/" not in result
        assert "\\" not in result

    def test_too_long_raises(self) -> None:
        with pytest.raises(ValidationError, match="too long"):
            InputValidator.sanitize_filename("a" * 256 + ".vtt")

    def test_custom_max_length(self) -> None:
        with pytest.raises(ValidationError, match="too long"):
            InputValidator.sanitize_filename("longname.vtt", max_length=5)


# ---------------------------------------------------------------------------
# sanitize_optional_string
# ---------------------------------------------------------------------------


class TestSanitizeOptionalString:
    def test_trims(self) -> None:
        assert InputValidator.sanitize_optional_string("  Weekly Sync ") == "Weekly Sync"

    @pytest.mark.parametrize("value", [None, 42, ["a"], "   "])
    def test_blank_or_non_string(self, value) -> None:
        assert InputValidator.sanitize_optional_string(value) == ""


# ---------------------------------------------------------------------------
# sanitize_filename_segment
# ---------------------------------------------------------------------------


class TestSanitizeFilenameSegment:
    def test_collapses_runs_to_one_hyphen(self) -> None:
        assert InputValidator.sanitize_filename_segment("Team   Sync #1") == "team-sync-1"

    def test_trims_hyphens(self) -> None:
        assert InputValidator.sanitize_filename_segment("--Q3 review!!") == "q3-review"

    def test_keeps_underscores(self) -> None:
        assert InputValidator.sanitize_filename_segment("stand_up") == "stand_up"

    def test_may_be_empty(self) -> None:
        assert InputValidator.sanitize_filename_segment("!!!") == ""


# ---------------------------------------------------------------------------
# remove_extension / replace_extension
# ---------------------------------------------------------------------------


class TestExtensions:
    def test_remove_extension(self) -> None:
        assert InputValidator.remove_extension("meeting.notes.vtt") == "meeting.notes"

    def test_remove_extension_keeps_dotfile(self) -> None:
        assert InputValidator.remove_extension(".hidden") == ".hidden"

    def test_remove_extension_without_dot(self) -> None:
        assert InputValidator.remove_extension("meeting") == "meeting"

    def test_replace_extension(self) -> None:
        assert InputValidator.replace_extension("meeting.srt", ".vtt") == "meeting.vtt"

    def test_replace_extension_appends_when_missing(self) -> None:
        assert InputValidator.replace_extension("meeting", ".vtt") == "meeting.vtt"


# ---------------------------------------------------------------------------
# filename_warnings
# ---------------------------------------------------------------------------


class TestFilenameWarnings:
    def test_clean_name_has_no_warnings(self) -> None:
        assert InputValidator.filename_warnings("team-sync_01.vtt") == []

    def test_spaces_warn_twice(self) -> None:
        warnings = InputValidator.filename_warnings("team sync.vtt")
        assert len(warnings) == 2
        assert "spaces" in warnings[0]
        assert "special characters" in warnings[1]

    def test_special_characters(self) -> None:
        warnings = InputValidator.filename_warnings("team#sync.vtt")
        assert warnings == ["File name contains special characters that may cause issues."]
