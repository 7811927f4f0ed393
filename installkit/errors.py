"""Exceptions and error formatting utilities.

User-facing errors use the 'Error: ' prefix and are printed with click.echo
in addition to being logged.

Error Style Guide:
- Field errors use structured format: '<entity> field '<field>' <issue>'
- Use present tense: 'must be', 'is required'
- Include actionable hints where helpful
"""

from typing import NoReturn

from .exit_codes import RunOutcome


class InstallerError(Exception):
    """Base class for installer configuration errors."""


class ConfigError(InstallerError):
    """Raised when the installer configuration cannot be loaded."""


class NoAnswerFileError(InstallerError):
    """Raised when the referenced answers file does not exist."""


class UnknownModuleError(InstallerError):
    """Raised when a module is referenced that is not part of the model."""

    def __init__(self, name: str, detail: str | None = None):
        self.name = name
        message = f"Module '{name}' not found"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ManifestError(InstallerError):
    """Raised when a module's parameter definitions are malformed."""


class DefaultsError(InstallerError):
    """Raised when the default values file cannot be loaded."""


class InstallerExit(Exception):
    """Carries the run outcome to the single top-level exit point."""

    def __init__(self, outcome: RunOutcome):
        self.outcome = outcome
        super().__init__(outcome.message or str(outcome.code))


def exit_with(code: int | str, message: str = "") -> NoReturn:
    """Stop the run with the given symbolic or numeric exit code."""
    raise InstallerExit(RunOutcome.of(code, message))


def format_error(message: str) -> str:
    """Format an error message with consistent prefix.

    Examples:
        >>> format_error("answers file not found")
        'Error: answers file not found'
    """
    return f"Error: {message}"


def format_field_error(entity: str, field: str, issue: str) -> str:
    """Format a field validation error with structured format.

    Examples:
        >>> format_field_error("Parameter 'ntp::server'", "type", "must be one of string, boolean")
        "Parameter 'ntp::server' field 'type' must be one of string, boolean"
    """
    return f"{entity} field '{field}' {issue}"


def format_suggestion(message: str, suggestion: str) -> str:
    """Format an error message with a helpful suggestion.

    Examples:
        >>> format_suggestion("config file not found", "set INSTALLKIT_CONFIG")
        'Error: config file not found. Hint: set INSTALLKIT_CONFIG'
    """
    return f"{format_error(message)}. Hint: {suggestion}"


__all__ = [
    "InstallerError",
    "ConfigError",
    "NoAnswerFileError",
    "UnknownModuleError",
    "ManifestError",
    "DefaultsError",
    "InstallerExit",
    "exit_with",
    "format_error",
    "format_field_error",
    "format_suggestion",
]
