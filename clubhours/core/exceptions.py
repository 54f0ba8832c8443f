# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain exceptions, mapped to HTTP responses by the handlers in ``main``."""
from enum import Enum


class ClubHoursError(Exception):
    """Base class for errors raised by the service layer."""


class ValidationCode(str, Enum):
    BAD_DATE_FORMAT = "BAD_DATE_FORMAT"
    MISSING_DESCRIPTION = "MISSING_DESCRIPTION"
    INVALID_HOURS = "INVALID_HOURS"
    YEAR_OUT_OF_RANGE = "YEAR_OUT_OF_RANGE"
    DUPLICATE_FOR_DATE = "DUPLICATE_FOR_DATE"


class WorkHourValidationError(ClubHoursError):
    """A work-hour submission was rejected before anything was written."""

    def __init__(self, code: ValidationCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class NotFoundError(ClubHoursError):
    """Member or entry is absent, or belongs to another member."""

    def __init__(self, message: str = "Eintrag nicht gefunden"):
        super().__init__(message)
        self.message = message


class UpstreamError(ClubHoursError):
    """The Records Service failed or answered with something unusable."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Records Service error during {operation}: {detail}")
        self.operation = operation
        self.detail = detail


class AuthenticationError(ClubHoursError):
    """Credentials or tokens could not be verified."""

    def __init__(self, message: str = "Nicht autorisiert"):
        super().__init__(message)
        self.message = message
