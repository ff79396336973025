from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from ..application.identity import IdentityContext, Role
from ..application.services.user_service import UserService
from ..dependencies import get_current_user, get_user_service, require_roles
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.users.user import UpdateProfileRequest, UpdateUserRequest, user_to_dict
from ..schemas.common.common import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
def list_users(
    search: Optional[str] = Query(None),
    type: Optional[Role] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    try:
        users, total = user_service.list_users(current_user, search, type, page, limit)
        return create_success_response({
            "users": [user_to_dict(u) for u in users],
            "pagination": pagination_meta(page, limit, total),
        })
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get users error: {e}", exc_info=True)
        raise InternalError("Failed to get users")


@router.get("/profile/me")
def get_my_profile(
    current_user: IdentityContext = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return create_success_response(user_to_dict(user_service.get_user(current_user, current_user.user_id)))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get profile error: {e}", exc_info=True)
        raise InternalError("Failed to get profile")


@router.put("/profile/me")
def update_my_profile(
    payload: UpdateProfileRequest,
    current_user: IdentityContext = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    try:
        user = user_service.update_profile(current_user, payload.name, payload.phone)
        return create_success_response(user_to_dict(user), "Profile updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update profile error: {e}", exc_info=True)
        raise InternalError("Failed to update profile")


@router.get("/stats/overview")
def user_stats(
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return create_success_response(user_service.stats(current_user))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get user stats error: {e}", exc_info=True)
        raise InternalError("Failed to get user statistics")


@router.get("/{user_id}")
def get_user(
    user_id: int,
    current_user: IdentityContext = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
):
    try:
        return create_success_response(user_to_dict(user_service.get_user(current_user, user_id)))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get user {user_id} error: {e}", exc_info=True)
        raise InternalError("Failed to get user")


@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: UpdateUserRequest,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    try:
        fields = {"name": payload.name, "email": payload.email, "phone": payload.phone, "role": payload.type}
        user = user_service.update_user(current_user, user_id, fields)
        return create_success_response(user_to_dict(user), "User updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update user {user_id} error: {e}", exc_info=True)
        raise InternalError("Failed to update user")


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    try:
        user_service.delete_user(current_user, user_id)
        return create_success_response(message="User deleted successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Delete user {user_id} error: {e}", exc_info=True)
        raise InternalError("Failed to delete user")
