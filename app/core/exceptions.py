from typing import Optional, Any

class OnboardingError(Exception):
    """
    Base exception for the onboarding application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ResourceNotFoundError(OnboardingError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class AuthenticationError(OnboardingError):
    """
    Raised when authentication fails (bad credentials, missing token).
    """
    def __init__(self, message: str = "Authentication failed", code: str = "AUTHENTICATION_FAILED", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=401, details=details)

class TokenExpiredError(AuthenticationError):
    def __init__(self, message: str = "Token expired", details: Optional[Any] = None):
        super().__init__(message, code="TOKEN_EXPIRED", details=details)

class TokenInvalidError(AuthenticationError):
    def __init__(self, message: str = "Invalid token", details: Optional[Any] = None):
        super().__init__(message, code="TOKEN_INVALID", details=details)

class ForbiddenError(OnboardingError):
    """
    Raised when a valid principal is not allowed to perform the action.
    """
    def __init__(self, message: str = "Access denied", code: str = "FORBIDDEN", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=403, details=details)

class InvalidTransitionError(ForbiddenError):
    """
    Raised when an onboarding action is not defined for the user's current status.
    """
    def __init__(self, message: str = "Action not allowed at the current onboarding step", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TRANSITION", details=details)

class ValidationError(OnboardingError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

class InvalidPinError(OnboardingError):
    """
    Raised when a submitted PIN does not match the stored one.
    """
    def __init__(self, message: str = "Invalid PIN. Contact admin.", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_PIN", status_code=400, details=details)

class DuplicateEmailError(OnboardingError):
    def __init__(self, message: str = "Email already in use", details: Optional[Any] = None):
        super().__init__(message, code="DUPLICATE_EMAIL", status_code=409, details=details)

class ConcurrentUpdateError(OnboardingError):
    """
    Raised when a user record changed between read and write.
    """
    def __init__(self, message: str = "User record was modified concurrently, please retry", details: Optional[Any] = None):
        super().__init__(message, code="CONCURRENT_UPDATE", status_code=409, details=details)
