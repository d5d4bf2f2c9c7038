"""Custom exceptions for the discography pipeline.

Every error raised here is fatal: a catalog is published fully correct or
not at all, so nothing in the library catches these to carry on.
"""


class DiscographyError(Exception):
    """Base exception for discography errors."""
    pass


class SchemaError(DiscographyError):
    """Raised when a document object has unexpected, missing or mistyped keys."""
    pass


class FormatError(DiscographyError):
    """Raised for malformed values: dates, lyric lines, timestamps, identifiers."""
    pass


class IntegrityError(DiscographyError):
    """Raised when records contradict each other (slugs, ordering, inheritance)."""
    pass


class MissingSourceError(DiscographyError):
    """Raised when a source file (audio, lyrics, artwork, document) is absent."""
    pass


class ValidationError(DiscographyError):
    """Raised when decoded audio disagrees with the declared metadata."""
    pass


class ExternalToolError(DiscographyError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ConfigurationError(DiscographyError):
    """Raised when there's an error in the workspace configuration."""
    pass
