"""
Custom exception hierarchy for TicketPilot.
Provides structured error handling with proper HTTP status codes.
"""

from typing import Any, Optional


class TicketPilotError(Exception):
    """Base exception for all TicketPilot errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        body: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(TicketPilotError):
    """Error in application configuration."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details=details,
            status_code=500,
        )


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(TicketPilotError):
    """Request validation failed."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=details,
            status_code=400,
        )


class InvalidRequestError(ValidationError):
    """Invalid request parameters."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message=message, details=details)
        self.code = "INVALID_REQUEST"


class CredentialMissingError(TicketPilotError):
    """A vendor credential the operation needs has not been configured."""

    def __init__(self, credential: str, message: str) -> None:
        super().__init__(
            message=message,
            code="CREDENTIAL_MISSING",
            details={"credential": credential},
            status_code=400,
        )


# =============================================================================
# Authentication Errors (401)
# =============================================================================


class AuthenticationError(TicketPilotError):
    """Authentication failed."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(
            message=message,
            code="AUTHENTICATION_REQUIRED",
            status_code=401,
        )


# =============================================================================
# Not Found Errors (404)
# =============================================================================


class NotFoundError(TicketPilotError):
    """Requested resource not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        super().__init__(
            message=message or f"{resource_type} not found",
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
            status_code=404,
        )


# =============================================================================
# External Service Errors (502)
# =============================================================================


class ExternalServiceError(TicketPilotError):
    """Error communicating with external service."""

    def __init__(
        self,
        service_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code="EXTERNAL_SERVICE_ERROR",
            details={"service": service_name, **(details or {})},
            status_code=502,
        )


class LLMError(ExternalServiceError):
    """Error communicating with the language model provider."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(service_name="LLM", message=message, details=details)
        self.code = "LLM_ERROR"


class JiraError(ExternalServiceError):
    """The Jira REST API rejected a call or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        extra = dict(details or {})
        if status_code is not None:
            extra["jira_status"] = status_code
        super().__init__(service_name="Jira", message=message, details=extra)
        self.code = "JIRA_ERROR"


class DatabaseError(ExternalServiceError):
    """Error communicating with database."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(service_name="Database", message=message, details=details)
        self.code = "DATABASE_ERROR"


# =============================================================================
# Pipeline Errors (500)
# =============================================================================


class GenerationFailedError(TicketPilotError):
    """Ticket drafts could not be produced from the document."""

    def __init__(self, reason: Optional[str] = None) -> None:
        # The reason stays server-side; callers only see the generic message
        super().__init__(
            message="Failed to process document",
            code="GENERATION_FAILED",
            status_code=500,
        )
        self.reason = reason


class ProjectConfigError(TicketPilotError):
    """Project configuration could not be fetched from Jira."""

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(
            message="Failed to fetch Jira project configuration",
            code="PROJECT_CONFIG_FAILED",
            status_code=500,
        )
        self.reason = reason
