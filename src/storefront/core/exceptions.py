from typing import Optional, Dict, Any, List
from decimal import Decimal
import traceback
import sys


class BaseAPIException(Exception):
    def __init__(self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Internal/debug message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.replace('Error', '').upper()
        self.details = details or {}

        # Capture stack trace for debugging
        self.traceback = traceback.format_exc() if sys.exc_info()[0] else None

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(BaseAPIException):
    """Raised when input is empty or malformed"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, 400, "INVALID_INPUT", details)


class NotFoundError(BaseAPIException):
    """Raised when a requested resource is not found"""

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message += f" with ID: {resource_id}"
        super().__init__(message, 404, "NOT_FOUND")


class CouponNotFoundError(BaseAPIException):
    """Raised when the backend does not recognise a coupon code"""

    def __init__(self, code: str, message: Optional[str] = None):
        super().__init__(
            message or "Invalid coupon code",
            404,
            "COUPON_NOT_FOUND",
            {"code": code}
        )


class BelowMinimumError(BaseAPIException):
    """Raised when the cart subtotal is below a coupon's minimum purchase"""

    def __init__(self, code: str, minimum: Decimal, subtotal: Decimal, minimum_display: Optional[str] = None):
        message = f"Minimum purchase of {minimum_display or minimum} required to use coupon {code}"
        details = {"code": code, "min_purchase": str(minimum), "subtotal": str(subtotal)}
        super().__init__(message, 422, "BELOW_MINIMUM", details)


class ConflictError(BaseAPIException):
    """Raised when there's a conflict with the current state"""

    def __init__(self, message: str = "Resource conflict", conflict_field: Optional[str] = None):
        details = {"conflict_field": conflict_field} if conflict_field else {}
        super().__init__(message, 409, "CONFLICT", details)


class ExternalServiceError(BaseAPIException):
    """Raised when external service calls fail"""

    def __init__(self, service_name: str, message: str = "External service unavailable",
                 status_code: int = 502, error_code: str = "EXTERNAL_SERVICE_ERROR"):
        details = {"service": service_name}
        super().__init__(message, status_code, error_code, details)


class NetworkFailureError(ExternalServiceError):
    """Raised when the backend is unreachable or times out"""

    def __init__(self, service_name: str = "storefront-backend", message: str = "Unable to reach the store. Please try again."):
        super().__init__(service_name, message, 503, "NETWORK_FAILURE")


class PersistenceError(BaseAPIException):
    """Raised when the cart snapshot store cannot be written or read"""

    def __init__(self, message: str = "Cart storage operation failed", operation: Optional[str] = None):
        # Don't expose internal storage details to users
        user_message = "Your cart could not be saved. It will remain available for this session."
        details = {"operation": operation} if operation else {}
        super().__init__(
            user_message,
            500,
            "PERSISTENCE_FAILURE",
            details,
            internal_message=message  # Keep original message for logging
        )
