from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from ..application.identity import IdentityContext, Role
from ..application.services.hospital_service import HospitalService
from ..dependencies import get_hospital_service, require_roles
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.hospitals.hospital import HospitalCreate, HospitalUpdate
from ..schemas.common.common import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hospitals", tags=["Hospitals"])


@router.get("")
def get_hospitals(
    city: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    hospital_service: HospitalService = Depends(get_hospital_service),
):
    try:
        hospitals, total = hospital_service.list_hospitals(city, search, page, limit)
        return create_success_response({"hospitals": hospitals, "pagination": pagination_meta(page, limit, total)})
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving hospitals: {e}", exc_info=True)
        raise InternalError("Failed to get hospitals")


@router.get("/{hospital_id}")
def get_hospital(hospital_id: int, hospital_service: HospitalService = Depends(get_hospital_service)):
    try:
        return create_success_response(hospital_service.get_hospital(hospital_id))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving hospital {hospital_id}: {e}", exc_info=True)
        raise InternalError("Failed to get hospital")


@router.get("/{hospital_id}/doctors")
def get_hospital_doctors(
    hospital_id: int,
    specialization: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    hospital_service: HospitalService = Depends(get_hospital_service),
):
    try:
        doctors, total = hospital_service.list_doctors(hospital_id, specialization, page, limit)
        return create_success_response({"doctors": doctors, "pagination": pagination_meta(page, limit, total)})
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving doctors for hospital {hospital_id}: {e}", exc_info=True)
        raise InternalError("Failed to get hospital doctors")


@router.post("", status_code=201)
def create_hospital(
    hospital_data: HospitalCreate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    hospital_service: HospitalService = Depends(get_hospital_service),
):
    try:
        hospital = hospital_service.create_hospital(current_user, hospital_data.model_dump())
        return create_success_response(hospital, "Hospital created successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error creating hospital: {e}", exc_info=True)
        raise InternalError("Failed to create hospital")


@router.put("/{hospital_id}")
def update_hospital(
    hospital_id: int,
    hospital_data: HospitalUpdate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    hospital_service: HospitalService = Depends(get_hospital_service),
):
    try:
        hospital = hospital_service.update_hospital(current_user, hospital_id, hospital_data.model_dump())
        return create_success_response(hospital, "Hospital updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error updating hospital {hospital_id}: {e}", exc_info=True)
        raise InternalError("Failed to update hospital")


@router.delete("/{hospital_id}")
def delete_hospital(
    hospital_id: int,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    hospital_service: HospitalService = Depends(get_hospital_service),
):
    try:
        hospital_service.delete_hospital(current_user, hospital_id)
        return create_success_response(message="Hospital deleted successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error deleting hospital {hospital_id}: {e}", exc_info=True)
        raise InternalError("Failed to delete hospital")
