"""Custom exception hierarchy for textanchor resolution and configuration."""


class TextAnchorError(Exception):
    """Base exception for all textanchor errors.

    All textanchor-specific exceptions inherit from this class, enabling
    centralized exception handling by callers of the resolver.
    """

    pass


class ConfigError(TextAnchorError):
    """Exception raised for configuration errors.

    This exception is raised when configuration loading or parsing fails.
    It includes field-specific information to help users identify and fix
    configuration issues.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class FileNotFoundError(TextAnchorError):
    """Exception raised when an input or configuration file is not found.

    Attributes:
        path: Path to the file that was not found
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str) -> None:
        """Initialize FileNotFoundError with path and message.

        Args:
            path: Path to the file that was not found
            message: Descriptive error message, optionally with suggestions
        """
        self.path = path
        self.message = message
        super().__init__(f"File not found: {path}\n{message}")


class ParseError(TextAnchorError):
    """Exception raised when a model response has no usable structured block.

    Fatal for the document being resolved: no partial annotated document is
    produced.

    Attributes:
        reason: Short description of why parsing failed
        excerpt: Leading part of the offending content, if any
    """

    EXCERPT_LENGTH = 80

    def __init__(self, reason: str, content: str | None = None) -> None:
        """Create a parse error.

        Args:
            reason: Short description of why parsing failed
            content: The content that could not be parsed
        """
        self.reason = reason
        self.excerpt = None
        message = f"Failed to parse model response: {reason}"
        if content:
            self.excerpt = content[: self.EXCERPT_LENGTH]
            message += f"\n  Content: {self.excerpt!r}"
        super().__init__(message)


class RecordDefectError(TextAnchorError):
    """Exception raised for a single malformed extraction record.

    Recoverable: the parser drops the record and records a warning.

    Attributes:
        reason: WarningReason value naming the defect
        message: Human-readable description
    """

    def __init__(self, reason: str, message: str) -> None:
        """Create a record defect with its reason code."""
        self.reason = reason
        self.message = message
        super().__init__(message)
