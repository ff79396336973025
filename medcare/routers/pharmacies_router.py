from typing import Optional
from fastapi import APIRouter, Depends, Query
import logging

from ..application.identity import IdentityContext, Role
from ..application.services.facility_service import FacilityService
from ..dependencies import get_pharmacy_service, require_roles
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.facilities.facility import PharmacyCreate, PharmacyUpdate
from ..schemas.common.common import pagination_meta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pharmacies", tags=["Pharmacies"])


@router.get("")
def get_pharmacies(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    pharmacy_service: FacilityService = Depends(get_pharmacy_service),
):
    try:
        pharmacies, total = pharmacy_service.list_facilities(search, page, limit)
        return create_success_response({"pharmacies": pharmacies, "pagination": pagination_meta(page, limit, total)})
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get pharmacies error: {e}", exc_info=True)
        raise InternalError("Failed to get pharmacies")


@router.get("/{pharmacy_id}")
def get_pharmacy(pharmacy_id: int, pharmacy_service: FacilityService = Depends(get_pharmacy_service)):
    try:
        return create_success_response(pharmacy_service.get_facility(pharmacy_id))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get pharmacy {pharmacy_id} error: {e}", exc_info=True)
        raise InternalError("Failed to get pharmacy")


@router.post("", status_code=201)
def create_pharmacy(
    payload: PharmacyCreate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    pharmacy_service: FacilityService = Depends(get_pharmacy_service),
):
    try:
        pharmacy = pharmacy_service.create_facility(current_user, payload.model_dump())
        return create_success_response(pharmacy, "Pharmacy created successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Create pharmacy error: {e}", exc_info=True)
        raise InternalError("Failed to create pharmacy")


@router.put("/{pharmacy_id}")
def update_pharmacy(
    pharmacy_id: int,
    payload: PharmacyUpdate,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    pharmacy_service: FacilityService = Depends(get_pharmacy_service),
):
    try:
        pharmacy = pharmacy_service.update_facility(current_user, pharmacy_id, payload.model_dump())
        return create_success_response(pharmacy, "Pharmacy updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update pharmacy {pharmacy_id} error: {e}", exc_info=True)
        raise InternalError("Failed to update pharmacy")


@router.delete("/{pharmacy_id}")
def delete_pharmacy(
    pharmacy_id: int,
    current_user: IdentityContext = Depends(require_roles(Role.ADMIN)),
    pharmacy_service: FacilityService = Depends(get_pharmacy_service),
):
    try:
        pharmacy_service.delete_facility(current_user, pharmacy_id)
        return create_success_response(message="Pharmacy deleted successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Delete pharmacy {pharmacy_id} error: {e}", exc_info=True)
        raise InternalError("Failed to delete pharmacy")
