"""
Centralized error handling and user-friendly error messages.
"""
import logging
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""
    code = "server_error"

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed required field."""
    code = "validation_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=400, details=details)


class NotFoundError(AppError):
    """Resource not found error."""
    code = "not_found"

    def __init__(self, message: str = "Resource not found", details: dict | None = None):
        super().__init__(message, status_code=404, details=details)


class UnauthorizedError(AppError):
    """No (valid) credentials supplied."""
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized access", details: dict | None = None):
        super().__init__(message, status_code=401, details=details)


class AuthorizationError(AppError):
    """Actor is not permitted to perform the action."""
    code = "forbidden"

    def __init__(self, message: str = "Access forbidden", details: dict | None = None):
        super().__init__(message, status_code=403, details=details)


class DuplicateError(AppError):
    """Record already exists."""
    code = "duplicate"

    def __init__(self, message: str = "This record already exists", details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class InvalidTransitionError(AppError):
    """Requested status change violates the application state machine."""
    code = "invalid_transition"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=409, details=details)


class StoreError(AppError):
    """Document or blob store failure (network, quota, constraint...)."""
    code = "store_error"

    def __init__(self, message: str = "Storage operation failed", details: dict | None = None):
        super().__init__(message, status_code=503, details=details)


# User-friendly error messages
ERROR_MESSAGES = {
    # Authentication
    "invalid_credentials": "Invalid email or password. Please try again.",
    "email_exists": "An account with this email already exists. Please login instead.",
    "weak_password": "Password must be at least 6 characters long.",
    "session_expired": "Your session has expired. Please login again.",
    "role_mismatch": "Role mismatch. Please select the correct account type.",

    # File uploads
    "file_too_large": "File is too large. Maximum size is 5MB.",
    "invalid_file_type": "Invalid file type. Please upload a PDF, DOC or DOCX file.",
    "invalid_image_type": "Invalid image type. Please upload a PNG, JPG, GIF or WEBP file.",
    "upload_failed": "Failed to store your file. Please try again.",

    # Jobs
    "job_not_found": "Job posting not found or has been removed.",
    "job_closed": "This job posting is no longer accepting applications.",
    "job_forbidden": "You can only manage your own job postings.",
    "invalid_job_data": "Job information is incomplete. Please fill in all required fields.",

    # Applications
    "already_applied": "You have already applied to this job.",
    "application_not_found": "Application not found.",
    "no_resume": "Please upload your resume before applying.",
    "application_forbidden": "You don't have permission to change this application.",
    "withdraw_recruiter_only_candidate": "Only the applicant can withdraw an application.",
    "terminal_status": "This application has already been closed and can no longer change.",
    "schedule_required": "Please choose an interview date and time.",
    "invalid_schedule": "Invalid interview schedule. Please check the date and time.",

    # Profiles
    "profile_forbidden": "You can only edit your own profile.",
    "recruiter_profile_incomplete": "Full name, company name and position are required.",
    "avatar_too_large": "Image is too large. Maximum size is 2MB.",
    "invalid_phone": "Invalid phone number format.",

    # General
    "unauthorized": "Please login to access this feature.",
    "forbidden": "You don't have permission to access this resource.",
    "not_found": "The requested resource was not found.",
    "server_error": "Something went wrong on our end. Please try again later.",
    "database_error": "Database connection issue. Please try again later.",
    "validation_error": "Please check your input and try again.",
}


def get_error_message(error_key: str, default: str | None = None) -> str:
    """Get a user-friendly error message."""
    return ERROR_MESSAGES.get(error_key, default or ERROR_MESSAGES["server_error"])


def create_error_response(
    status_code: int,
    message: str,
    details: dict | None = None,
    code: str | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    content = {
        "success": False,
        "error": message,
    }
    if code:
        content["code"] = code
    if details:
        content["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content
    )


def app_error_response(exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", type(exc).__name__, exc.message)
    else:
        logger.info("%s: %s", type(exc).__name__, exc.message)
    return create_error_response(exc.status_code, exc.message, exc.details, code=exc.code)
