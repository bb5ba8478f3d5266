"""
Case Export Exceptions

Custom exceptions for the case normalization and rendering pipeline.
Pipeline-stage failures propagate to the caller; per-field failures
(FieldWriteFailed) are raised and absorbed inside the filler.
"""


class CaseExportError(Exception):
    """Base exception for all case export errors."""

    status_code = 500

    def __init__(self, message: str, cause: Exception = None):
        self.cause = cause
        super().__init__(message)


class ConfigurationError(CaseExportError):
    """
    Raised when export configuration is invalid.

    This includes YAML syntax errors in form schemas and field names
    that do not match any canonical case field.
    """
    pass


class InputNotFound(CaseExportError):
    """Raised when a case identifier does not resolve to a record."""

    status_code = 404

    def __init__(self, message: str, case_id=None):
        self.case_id = case_id
        super().__init__(message)


class ExportRequestError(CaseExportError):
    """Raised when an export request is missing required input."""

    status_code = 400


class TemplateNotFound(CaseExportError):
    """Raised when neither the fillable nor the base PDF template exists."""

    def __init__(self, message: str, paths=None):
        self.paths = list(paths or [])
        super().__init__(message)


class FieldWriteFailed(CaseExportError):
    """
    Raised when a single form field could not be written.

    Never escapes the form filler: it is logged and the field skipped.
    """
    def __init__(self, message: str, field_name: str = None, cause: Exception = None):
        self.field_name = field_name
        super().__init__(message, cause=cause)


class RenderEngineUnavailable(CaseExportError):
    """Raised when the headless browser cannot be launched."""

    status_code = 503


class RenderTimeout(CaseExportError):
    """Raised when headless rendering does not finish within its bound."""

    status_code = 504


class RenderFailed(CaseExportError):
    """Raised for any other headless rendering failure."""
    pass


class ConversionFailed(CaseExportError):
    """
    Raised when the external office conversion fails.

    Covers a non-zero exit, a missing output file, a missing
    executable and a timeout.
    """

    status_code = 502

    def __init__(self, message: str, returncode: int = None, stderr: str = None, cause: Exception = None):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, cause=cause)
