"""
Custom Exceptions for the CRM voice service
Provides structured error handling across the application
"""

from typing import Optional, Dict, Any


class CrmVoiceException(Exception):
    """Base exception for all CRM voice errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


# Authentication
class AuthenticationError(CrmVoiceException):
    """Raised when staff authentication fails"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            error_code="AUTH_FAILED",
            details=details,
            status_code=401
        )


class StaffNotFoundError(AuthenticationError):
    """Raised when a token names a staff member that does not exist"""

    def __init__(self, staff_id: str):
        super().__init__(
            message="Staff member not found",
            details={"staff_id": staff_id}
        )


# Webhook Exceptions
class WebhookError(CrmVoiceException):
    """Base exception for webhook errors"""
    pass


class WebhookValidationError(WebhookError):
    """Raised when a provider webhook signature is missing or invalid"""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(
            message=message,
            error_code="WEBHOOK_VALIDATION_FAILED",
            status_code=403
        )


# Call Exceptions
class CallError(CrmVoiceException):
    """Base exception for call-related errors"""
    pass


class InvalidPhoneNumberError(CallError):
    """Raised when phone number is invalid"""

    def __init__(self, phone_number: str):
        super().__init__(
            message=f"Invalid phone number format: {phone_number}",
            error_code="INVALID_PHONE_NUMBER",
            details={
                "phone_number": phone_number,
                "hint": "Use E.164 format (e.g., +14155551234)"
            },
            status_code=400
        )


class CallInitiationError(CallError):
    """Raised when click-to-call initiation fails"""

    def __init__(self, message: str, phone_number: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CALL_INITIATION_FAILED",
            details={"phone_number": phone_number} if phone_number else {},
            status_code=502
        )


# Service Exceptions
class ServiceError(CrmVoiceException):
    """Base exception for external service errors"""
    pass


class VoiceTokenError(ServiceError):
    """Raised when a softphone access token cannot be issued"""

    def __init__(self, message: str = "Twilio voice credentials are not configured"):
        super().__init__(
            message=message,
            error_code="VOICE_TOKEN_UNAVAILABLE",
            status_code=503
        )


class DocumentStoreError(ServiceError):
    """Raised when the document store is unavailable or an operation fails"""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(
            message=f"Document store error: {message}",
            error_code="DOCUMENT_STORE_ERROR",
            details={"operation": operation} if operation else {},
            status_code=503
        )
