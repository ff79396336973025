from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from ..application.identity import IdentityContext, Role
from ..application.services.facility_service import FacilityService
from ..dependencies import get_clinic_service, require_roles
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.facilities.facility import ClinicCreate, ClinicUpdate
from ..schemas.common.common import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clinics", tags=["Clinics"])


@router.get("")
def get_clinics(
    search: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    specialization: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    clinic_service: FacilityService = Depends(get_clinic_service),
):
    try:
        clinics, total = clinic_service.list_facilities(
            search, page, limit, contains={"city": city, "specialization": specialization}
        )
        return create_success_response({"clinics": clinics, "pagination": pagination_meta(page, limit, total)})
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get clinics error: {e}", exc_info=True)
        raise InternalError("Failed to get clinics")


@router.get("/{clinic_id}")
def get_clinic(clinic_id: int, clinic_service: FacilityService = Depends(get_clinic_service)):
    try:
        return create_success_response(clinic_service.get_facility(clinic_id))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get clinic {clinic_id} error: {e}", exc_info=True)
        raise InternalError("Failed to get clinic")


@router.post("", status_code=201)
def create_clinic(
    payload: ClinicCreate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    clinic_service: FacilityService = Depends(get_clinic_service),
):
    try:
        clinic = clinic_service.create_facility(current_user, payload.model_dump())
        return create_success_response(clinic, "Clinic created successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Create clinic error: {e}", exc_info=True)
        raise InternalError("Failed to create clinic")


@router.put("/{clinic_id}")
def update_clinic(
    clinic_id: int,
    payload: ClinicUpdate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    clinic_service: FacilityService = Depends(get_clinic_service),
):
    try:
        clinic = clinic_service.update_facility(current_user, clinic_id, payload.model_dump())
        return create_success_response(clinic, "Clinic updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update clinic {clinic_id} error: {e}", exc_info=True)
        raise InternalError("Failed to update clinic")


@router.delete("/{clinic_id}")
def delete_clinic(
    clinic_id: int,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    clinic_service: FacilityService = Depends(get_clinic_service),
):
    try:
        clinic_service.delete_facility(current_user, clinic_id)
        return create_success_response(message="Clinic deactivated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Delete clinic {clinic_id} error: {e}", exc_info=True)
        raise InternalError("Failed to deactivate clinic")
