"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and the
specialized subclasses raised by the GPA report pipeline. Every pipeline stage
fails fast with one of these and lets it propagate unchanged; only the runner
and CLI boundary catch them, log ``to_dict()`` and turn them into a status.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'MALFORMED_PERIOD'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and may be retried.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.
    transient : bool
        True if the error is transient.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'}, transient=True)
    >>> e.code
    'CODE'
    """

    __slots__ = ("code", "message", "context", "transient")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class DataValidationError(AppError):
    """Raised for data that fails schema or content validation."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        code: str = "DATA_VALIDATION_ERROR",
    ) -> None:
        super().__init__(code, message, context=context, transient=False)


class ExternalServiceError(AppError):
    """Raised for unexpected failures from an external service."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = True,
        code: str = "EXTERNAL_SERVICE_ERROR",
    ) -> None:
        super().__init__(code, message, context=context, transient=transient)


class SourceUnavailableError(ExternalServiceError):
    """Raised when the tabular source cannot be retrieved (network, IO, timeout)."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            message, context=context, transient=True, code="SOURCE_UNAVAILABLE"
        )


class MalformedInputError(DataValidationError):
    """Raised when content cannot be read as delimited tabular data."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, context=context, code="MALFORMED_INPUT")


class DuplicateColumnNameError(DataValidationError):
    """Raised when two source columns normalize to the same name."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, context=context, code="DUPLICATE_COLUMN_NAME")


class MalformedPeriodError(DataValidationError):
    """Raised when the period field is absent or not exactly five characters."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, context=context, code="MALFORMED_PERIOD")


class UnrecognizedGpaError(DataValidationError):
    """Raised in strict mode for GPA labels outside the bracket list."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, context=context, code="UNRECOGNIZED_GPA")
