from fastapi import APIRouter, Depends
import logging

from ..core.config import settings
from ..application.identity import IdentityContext, Role
from ..application.services.auth_service import AuthService
from ..dependencies import get_auth_service, get_current_user
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.auth.auth import (
    RegisterRequest, LoginRequest, ChangePasswordRequest,
    ForgotPasswordRequest, ResetPasswordRequest,
)
from ..schemas.users.user import user_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        result = auth_service.register(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
            role=payload.type or Role.PATIENT,
        )
        return create_success_response(
            {"user": user_to_dict(result.user), "token": result.token},
            "User registered successfully",
        )
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Registration error: {e}", exc_info=True)
        raise InternalError("Registration failed")


@router.post("/login")
def login(payload: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        result = auth_service.login(payload.email, payload.password)
        return create_success_response(
            {"user": user_to_dict(result.user), "token": result.token},
            "Login successful",
        )
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Login error: {e}", exc_info=True)
        raise InternalError("Login failed")


@router.get("/profile")
def get_profile(
    current_user: IdentityContext = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        return create_success_response(user_to_dict(auth_service.profile(current_user.user_id)))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get profile error: {e}", exc_info=True)
        raise InternalError("Failed to get profile")


@router.put("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    current_user: IdentityContext = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        auth_service.change_password(current_user.user_id, payload.current_password, payload.new_password)
        return create_success_response(message="Password changed successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Change password error: {e}", exc_info=True)
        raise InternalError("Failed to change password")


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        token, expires_at = auth_service.forgot_password(payload.email)
        data = None
        if settings.DEBUG:
            # No mail transport is wired up; expose the token only for local testing
            data = {"resetToken": token, "resetTokenExpiry": expires_at}
        return create_success_response(data, "Password reset instructions sent to your email")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Forgot password error: {e}", exc_info=True)
        raise InternalError("Failed to process forgot password request")


@router.post("/reset-password")
def reset_password(payload: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)):
    try:
        auth_service.reset_password(payload.token, payload.new_password)
        return create_success_response(message="Password reset successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Reset password error: {e}", exc_info=True)
        raise InternalError("Failed to reset password")
