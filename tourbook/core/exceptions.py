from typing import Any, Optional, Dict


class BaseError(Exception):
    """Base exception class for the application"""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Exception raised when an entity is not found"""

    def __init__(self, entity: str, id: Any):
        super().__init__(
            message=f"{entity} with id {id} not found",
            status_code=404,
            details={"entity": entity, "id": id}
        )


class ValidationError(BaseError):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class AuthenticationError(BaseError):
    """Exception raised for authentication errors"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=401)


class ExternalServiceError(BaseError):
    """Exception raised when external service fails"""

    def __init__(self, service: str, message: str, upstream_status: Optional[int] = None):
        details: Dict[str, Any] = {"service": service}
        if upstream_status is not None:
            details["upstream_status"] = upstream_status
        super().__init__(
            message=f"External service error: {message}",
            status_code=503,
            details=details
        )
