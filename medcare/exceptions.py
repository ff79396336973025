import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for failures that map onto the JSON error envelope."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)


# =========================
# Taxonomy
# =========================
class ValidationError(APIError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation errors"


class AuthenticationError(APIError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"
    default_message = "Authentication required"


class AuthorizationError(APIError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFoundError(APIError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(APIError):
    status_code = 400
    code = "CONFLICT"
    default_message = "Conflicting resource state"


class InternalError(APIError):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


# =========================
# Authentication
# =========================
class MissingTokenError(AuthenticationError):
    code = "MISSING_TOKEN"
    default_message = "Access token required"


class TokenExpiredError(AuthenticationError):
    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class UserNotFoundError(AuthenticationError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"


class AuthenticationServiceError(InternalError):
    code = "AUTHENTICATION_ERROR"
    default_message = "Authentication error"


# =========================
# Booking
# =========================
class DoctorNotFoundError(NotFoundError):
    code = "DOCTOR_NOT_FOUND"
    default_message = "Doctor not found"


class PastDateRejectedError(ValidationError):
    code = "PAST_DATE_REJECTED"
    default_message = "Appointment must be scheduled for a future date"


class OutsideWorkingHoursError(ValidationError):
    code = "OUTSIDE_WORKING_HOURS"
    default_message = "Appointment time must be within doctor's working hours"


class SlotAlreadyBookedError(ConflictError):
    code = "SLOT_ALREADY_BOOKED"
    default_message = "This time slot is already booked"


class PatientDoubleBookingError(ConflictError):
    code = "PATIENT_DOUBLE_BOOKING"
    default_message = "You already have an appointment at this time"


class AlreadyTerminalError(ConflictError):
    code = "ALREADY_TERMINAL"
    default_message = "Appointment can no longer change status"


class DuplicateEmailError(ConflictError):
    code = "DUPLICATE_EMAIL"
    default_message = "User with this email already exists"


# =========================
# Envelope helpers
# =========================
def create_error_response(message: str, code: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None) -> dict:
    """Create a standardized error response"""
    body: Dict[str, Any] = {"success": False, "message": message}
    if code:
        body["code"] = code
    if errors:
        body["errors"] = errors
    return body


def create_success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """Create a standardized success response"""
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


# =========================
# Handlers
# =========================
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.message, exc.code, exc.errors),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    message = "Route not found" if exc.status_code == 404 and exc.detail == "Not Found" else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(message),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        # Drop the leading "body"/"query"/"path" segment from the location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=400,
        content=create_error_response(ValidationError.default_message, ValidationError.code, errors),
    )
