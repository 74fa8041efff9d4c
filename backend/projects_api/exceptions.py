"""
Projects API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the error envelope with the matching HTTP status code.
Who:   Raised by the procedure gateway, the result-tree assembler and the
       domain services; caught by the global handlers.

Exception Hierarchy:
    ProjectsApiError (base)
    ├── ValidationError              → 400 Bad Request (never reaches the database)
    ├── NotFoundError                → 404 Not Found
    ├── ConflictError                → 409 Conflict (duplicate reported by a procedure)
    ├── BusinessRuleViolation        → 422 Unprocessable Entity (SQL error >= 50000)
    └── InfrastructureError          → 500 Internal Server Error
        ├── ProcedureContractViolation  (result sets / columns missing)
        └── EmailDeliveryError          (SMTP failed after retries)

Message policy:
    message:  safe to return to the client. For BusinessRuleViolation it is
              the database message verbatim; for InfrastructureError it is
              always generic.
    context:  debug detail, logged server-side and recorded in the error
              log table, never returned in a response.
"""

from typing import Any, Dict, Optional

# SQL Server reserves error numbers below 50000 for its own messages;
# RAISERROR/THROW from a procedure uses 50000 and above.
BUSINESS_ERROR_THRESHOLD = 50000


class ProjectsApiError(Exception):
    """
    Base exception for all Projects API errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProjectsApiError):
    """
    Raised when client input fails validation.

    When:    Missing email, non-positive project number, nil login code,
             or a request body FastAPI could not parse.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ProjectsApiError):
    """
    Raised when an expected row is absent.

    When:    A "get by id" procedure returned no rows, or a parent-only scan
             was empty. This is a legitimate outcome, not a failure.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(ProjectsApiError):
    """
    Raised when a procedure reports that the row already exists.

    HTTP:    409 Conflict
    Message: The procedure's own message, returned verbatim.
    """

    def __init__(
        self,
        message: str = "The record already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class BusinessRuleViolation(ProjectsApiError):
    """
    Raised when the database refuses an operation on business grounds.

    When:    The procedure THROWs with an error number >= 50000, or returns a
             status message other than SUCCESS for an update/delete.
    HTTP:    422 Unprocessable Entity
    Message: The database message verbatim (driver prefixes stripped).
    """

    def __init__(
        self,
        message: str = "The operation was rejected by a business rule",
        error_number: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if error_number is not None:
            ctx["error_number"] = error_number
        super().__init__(message=message, context=ctx)
        self.error_number = error_number


class InfrastructureError(ProjectsApiError):
    """
    Raised when something below the business layer failed.

    When:    Connection refused, login failed, timeout, SQL error < 50000,
             token configuration missing.
    HTTP:    500 Internal Server Error

    Attributes:
        source: Recorded in the error log table ("SQL" for database
                failures, "Controller" for everything else).
    """

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        source: str = "SQL",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.source = source


class ProcedureContractViolation(InfrastructureError):
    """
    Raised when a procedure's output does not match what the caller reads.

    When:    Fewer result sets than the declared links reference, a link column
             missing from a result set, or a row that does not fit its schema.
    HTTP:    500 Internal Server Error (it is a deployment mismatch, not a
             client problem)
    """

    def __init__(
        self,
        procedure: str = "unknown",
        detail: str = "result sets did not match the expected shape",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["procedure"] = procedure
        ctx["detail"] = detail
        super().__init__(source="SQL", context=ctx)
        self.procedure = procedure
        self.detail = detail


class EmailDeliveryError(InfrastructureError):
    """
    Raised when the OTP email could not be delivered after all retries.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "The verification email could not be sent. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, source="Controller", context=context)
