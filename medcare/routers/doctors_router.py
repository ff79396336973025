from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from ..application.identity import IdentityContext, Role
from ..application.services.doctor_service import DoctorService
from ..dependencies import get_doctor_service, require_roles
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.doctors.doctor import DoctorCreate, DoctorUpdate
from ..schemas.common.common import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/doctors", tags=["Doctors"])


@router.get("")
def get_doctors(
    specialization: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    try:
        doctors, total = doctor_service.list_doctors(specialization, search, page, limit)
        return create_success_response({"doctors": doctors, "pagination": pagination_meta(page, limit, total)})
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving doctors: {e}", exc_info=True)
        raise InternalError("Failed to get doctors")


@router.get("/specializations/list")
def get_specializations(doctor_service: DoctorService = Depends(get_doctor_service)):
    try:
        return create_success_response(doctor_service.list_specializations())
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving specializations: {e}", exc_info=True)
        raise InternalError("Failed to get specializations")


@router.get("/{doctor_id}")
def get_doctor(doctor_id: int, doctor_service: DoctorService = Depends(get_doctor_service)):
    try:
        return create_success_response(doctor_service.get_doctor(doctor_id))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving doctor {doctor_id}: {e}", exc_info=True)
        raise InternalError("Failed to get doctor")


@router.post("", status_code=201)
def create_doctor(
    doctor_data: DoctorCreate,
    current_user: IdentityContext = Depends(require_roles(Role.DOCTOR, Role.ADMIN)),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    try:
        doctor = doctor_service.create_doctor(current_user, doctor_data.model_dump())
        return create_success_response(doctor, "Doctor profile created successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error creating doctor: {e}", exc_info=True)
        raise InternalError("Failed to create doctor profile")


@router.put("/{doctor_id}")
def update_doctor(
    doctor_id: int,
    doctor_data: DoctorUpdate,
    current_user: IdentityContext = Depends(require_roles(Role.DOCTOR, Role.ADMIN)),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    try:
        doctor = doctor_service.update_doctor(current_user, doctor_id, doctor_data.model_dump())
        return create_success_response(doctor, "Doctor profile updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error updating doctor {doctor_id}: {e}", exc_info=True)
        raise InternalError("Failed to update doctor profile")


@router.delete("/{doctor_id}")
def delete_doctor(
    doctor_id: int,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    doctor_service: DoctorService = Depends(get_doctor_service),
):
    try:
        doctor_service.delete_doctor(current_user, doctor_id)
        return create_success_response(message="Doctor deleted successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Error deleting doctor {doctor_id}: {e}", exc_info=True)
        raise InternalError("Failed to delete doctor")
