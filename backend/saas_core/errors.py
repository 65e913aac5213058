"""Error kinds raised by the workflows and rendered by the API layer."""


class ServiceError(Exception):
    """Base error with a stable code and a message that is safe to return."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    code = "validation_error"
    message = "Invalid request body"


class EmailConflict(ServiceError):
    status_code = 409
    code = "email_conflict"
    message = "Email already exists"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"
    message = "Could not validate credentials"


class InvalidCredentials(Unauthenticated):
    code = "invalid_credentials"
    message = "Invalid email or password"


class InvalidRefreshToken(Unauthenticated):
    code = "invalid_refresh_token"
    message = "Invalid refresh token"


class RefreshTokenExpired(Unauthenticated):
    code = "refresh_token_expired"
    message = "Refresh token expired"


class InvalidVerificationToken(ServiceError):
    status_code = 400
    code = "invalid_verification_token"
    message = "Invalid or expired verification token"


class Forbidden(ServiceError):
    status_code = 403
    code = "forbidden"
    message = "Permission denied"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"
    message = "Resource not found"


class InternalError(ServiceError):
    pass


class DefaultPlanMissing(InternalError):
    code = "default_plan_missing"
