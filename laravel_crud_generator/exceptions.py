"""
Custom exception hierarchy for the Laravel CRUD generator.

Every error carries a context mapping (always including the offending file
path where there is one) and recovery suggestions, so the CLI can surface
failures verbatim. "Already exists" conditions are never raised: they are
reported as skipped steps by the orchestrator.
"""

from typing import Dict, Any, Optional, List


class CrudGeneratorError(Exception):
    """
    Base exception for all CRUD generator errors.

    Provides rich context and error recovery guidance.
    """

    default_suggestions: List[str] = []
    default_error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or list(self.default_suggestions)
        self.error_code = error_code or self.default_error_code

    @property
    def path(self) -> Optional[str]:
        """The file the error refers to, if any."""
        return self.context.get("path")

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [super().__str__()]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class _FileError(CrudGeneratorError):
    """Errors tied to one file on disk."""

    def __init__(self, message: str, path: Any = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if path is not None:
            context['path'] = str(path)
        super().__init__(message, context=context, **kwargs)


class ConfigurationError(CrudGeneratorError):
    """Raised when configuration is invalid or missing."""

    default_error_code = "CONFIG_ERROR"
    default_suggestions = [
        "Check the configuration file syntax",
        "Verify the command line options",
    ]

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if config_file:
            context['config_file'] = str(config_file)
        super().__init__(message, context=context, **kwargs)


class InvalidNameError(CrudGeneratorError):
    """Raised when an entity name cannot be turned into identifiers."""

    default_error_code = "INVALID_NAME"
    default_suggestions = [
        "Use letters, digits, underscores or hyphens, starting with a letter",
        "Pass the singular entity name, e.g. 'product' or 'order_item'",
    ]

    def __init__(self, message: str, name: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if name is not None:
            context['name'] = repr(name)
        super().__init__(message, context=context, **kwargs)


class SchemaFileNotFoundError(_FileError):
    """Raised when a schema was requested but its file does not exist."""

    default_error_code = "SCHEMA_NOT_FOUND"
    default_suggestions = [
        "Schema paths are resolved relative to the project root",
        "Check the --schema option",
    ]


class SchemaFormatError(_FileError):
    """Raised when a schema source is present but malformed."""

    default_error_code = "SCHEMA_FORMAT_ERROR"
    default_suggestions = [
        "The schema must map model names to flat 'field: rule' mappings",
        "Rules are pipe-delimited strings such as 'nullable|integer'",
        "Use at most one nullability token and one type token per rule",
    ]

    def __init__(self, message: str, path: Any = None, field: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if field:
            context['field'] = field
        super().__init__(message, path=path, context=context, **kwargs)


class ModelFileNotFoundError(_FileError):
    """Raised when the model file to patch does not exist."""

    default_error_code = "MODEL_NOT_FOUND"
    default_suggestions = [
        "Run 'php artisan make:model' first or allow stub creation",
    ]


class MigrationFileNotFoundError(_FileError):
    """Raised when the create-table migration for a model is missing."""

    default_error_code = "MIGRATION_NOT_FOUND"
    default_suggestions = [
        "Run 'php artisan make:model -m' first or allow stub creation",
        "Check that the migration name matches create_<table>_table",
    ]


class AnchorNotFoundError(_FileError):
    """Raised when the structural pattern to patch at is absent."""

    default_error_code = "ANCHOR_NOT_FOUND"
    default_suggestions = [
        "The file may have been edited away from its generated shape",
        "Restore the expected structure or add the code by hand",
    ]

    def __init__(self, message: str, path: Any = None, anchor: str = None, **kwargs):
        context = kwargs.pop('context', None) or {}
        if anchor:
            context['anchor'] = anchor
        super().__init__(message, path=path, context=context, **kwargs)


class FileEncodingError(_FileError):
    """Raised when a file to patch is not valid UTF-8."""

    default_error_code = "FILE_ENCODING_ERROR"
    default_suggestions = [
        "Re-save the file as UTF-8",
        "Check that the path points at a PHP source file",
    ]


class RouteFileNotFoundError(_FileError):
    """Raised when the API route file does not exist."""

    default_error_code = "ROUTE_FILE_NOT_FOUND"
    default_suggestions = [
        "Check the --api-route option",
        "Run 'php artisan install:api' to create routes/api.php",
    ]
