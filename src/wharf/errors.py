"""Errors raised by the publish pipeline.

Service wrappers define their own errors next to the code that raises them
(``GitError``, ``CompilerError``, ``ConfigError``); this module holds the
pipeline-level ones the CLI reports on.
"""

from .models.validation import ValidationError


class WharfError(Exception):
    """Base exception for publish pipeline failures."""


class AbortError(WharfError):
    """Raised when a validation step makes further checking meaningless."""


class ValidationFailed(WharfError):
    """Raised when one or more validation checks reported problems."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} validation error(s)")


class RegistryError(WharfError):
    """Registry could not be reached or returned an unusable response."""


class OfflineError(RegistryError):
    """A network call was attempted while running offline."""


class SubmissionError(RegistryError):
    """Registry rejected the publish request."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(
            f"Registry rejected the publish request (HTTP {status_code}):\n{body}"
        )


class JobTimeoutError(RegistryError):
    """Job did not finish within the configured number of polls."""
