from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from ..application.identity import IdentityContext, Role
from ..application.services.facility_service import FacilityService
from ..dependencies import get_lab_service, require_roles
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.facilities.facility import LabCreate, LabUpdate
from ..schemas.common.common import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/labs", tags=["Labs"])


@router.get("")
def get_labs(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    lab_service: FacilityService = Depends(get_lab_service),
):
    try:
        labs, total = lab_service.list_facilities(search, page, limit)
        return create_success_response({"labs": labs, "pagination": pagination_meta(page, limit, total)})
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get labs error: {e}", exc_info=True)
        raise InternalError("Failed to get labs")


@router.get("/{lab_id}")
def get_lab(lab_id: int, lab_service: FacilityService = Depends(get_lab_service)):
    try:
        return create_success_response(lab_service.get_facility(lab_id))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get lab {lab_id} error: {e}", exc_info=True)
        raise InternalError("Failed to get lab")


@router.post("", status_code=201)
def create_lab(
    payload: LabCreate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    lab_service: FacilityService = Depends(get_lab_service),
):
    try:
        lab = lab_service.create_facility(current_user, payload.model_dump())
        return create_success_response(lab, "Lab created successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Create lab error: {e}", exc_info=True)
        raise InternalError("Failed to create lab")


@router.put("/{lab_id}")
def update_lab(
    lab_id: int,
    payload: LabUpdate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    lab_service: FacilityService = Depends(get_lab_service),
):
    try:
        lab = lab_service.update_facility(current_user, lab_id, payload.model_dump())
        return create_success_response(lab, "Lab updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update lab {lab_id} error: {e}", exc_info=True)
        raise InternalError("Failed to update lab")


@router.delete("/{lab_id}")
def delete_lab(
    lab_id: int,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    lab_service: FacilityService = Depends(get_lab_service),
):
    try:
        lab_service.delete_facility(current_user, lab_id)
        return create_success_response(message="Lab deleted successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Delete lab {lab_id} error: {e}", exc_info=True)
        raise InternalError("Failed to delete lab")
