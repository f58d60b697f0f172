"""
Input validation and sanitization utilities.
Provides checks for request values and the filename sanitizers used when
naming exported archives.
"""

from typing import List
import re

from shared_utils.error_handler import ValidationError


_UNSAFE_SEGMENT_RUN = re.compile(r"[^a-zA-Z0-9\-_]+")
_TRAILING_EXTENSION = re.compile(r"\.[^/.]+$")


class InputValidator:
    """Utility class for input validation."""

    @staticmethod
    def validate_non_empty_string(value: str, field_name: str) -> str:
        """Validate non-empty string.

        Args:
            value: String to validate
            field_name: Name of field for error messages

        Returns:
            Validated string

        Raises:
            ValidationError: If validation fails
        """
        if not isinstance(value, str):
            raise ValidationError(f"{field_name} must be a string")

        if not value or not value.strip():
            raise ValidationError(f"{field_name} cannot be empty")

        return value.strip()

    @staticmethod
    def get_file_extension(filename: str) -> str:
        """Lower-cased extension including the dot, or "" when absent."""
        dot = filename.rfind(".")
        return filename[dot:].lower() if dot >= 0 else ""

    @staticmethod
    def sanitize_filename(filename: str, max_length: int = 255) -> str:
        """Sanitize an uploaded filename to prevent path traversal.

        Raises:
            ValidationError: If validation fails
        """
        filename = filename.replace('\\', '').replace('/', '')
        filename = re.sub(r'[<>:"|?*]', '', filename)

        if '..' in filename or filename.startswith('.'):
            raise ValidationError("Invalid filename format")

        if len(filename) > max_length:
            raise ValidationError(f"Filename too long (max {max_length} characters)")

        return filename

    @staticmethod
    def sanitize_optional_string(value: object) -> str:
        """Trimmed string, or "" for None, non-strings and blanks."""
        if not isinstance(value, str):
            return ""
        return value.strip()

    @staticmethod
    def sanitize_filename_segment(raw: str) -> str:
        """Reduce text to a lower-case ``[a-z0-9-_]`` segment.

        Every run of other characters becomes one hyphen; leading and
        trailing hyphens are removed. May return "".
        """
        return _UNSAFE_SEGMENT_RUN.sub("-", raw).strip("-").lower()

    @staticmethod
    def remove_extension(filename: str) -> str:
        """Drop the last extension; dotfiles and extensionless names are kept."""
        dot = filename.rfind(".")
        if dot <= 0:
            return filename
        return filename[:dot]

    @staticmethod
    def replace_extension(filename: str, extension: str) -> str:
        """Strip a trailing extension (if any) and append ``extension``."""
        return f"{_TRAILING_EXTENSION.sub('', filename)}{extension}"

    @staticmethod
    def filename_warnings(filename: str) -> List[str]:
        """Advisories about characters that travel badly between systems."""
        warnings: List[str] = []
        if " " in filename:
            warnings.append("File name contains spaces. Consider using underscores or hyphens instead.")
        if not re.fullmatch(r"[a-zA-Z0-9._\-]+", filename):
            warnings.append("File name contains special characters that may cause issues.")
        return warnings
