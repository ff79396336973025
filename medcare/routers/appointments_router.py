from dataclasses import asdict
from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
import logging

from ..application.identity import IdentityContext
from ..application.services.appointments_service import AppointmentsService
from ..dependencies import get_appointments_service, get_current_user
from ..exceptions import APIError, InternalError, create_success_response
from ..schemas.appointments.appointment import (
    AppointmentCreate, AppointmentStatusUpdate, CancelAppointmentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


@router.get("")
def get_appointments(
    status: Optional[str] = Query(None),
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appointments = appt_service.list_for(current_user, status)
        return create_success_response([asdict(a) for a in appointments])
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get appointments error: {e}", exc_info=True)
        raise InternalError("Failed to get appointments")


@router.get("/stats/overview")
def appointment_stats(
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        return create_success_response(appt_service.stats(current_user))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get appointment stats error: {e}", exc_info=True)
        raise InternalError("Failed to get appointment statistics")


@router.get("/{appointment_id}")
def get_appointment(
    appointment_id: int,
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        return create_success_response(asdict(appt_service.get(current_user, appointment_id)))
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Get appointment {appointment_id} error: {e}", exc_info=True)
        raise InternalError("Failed to get appointment")


@router.post("", status_code=201)
def book_appointment(
    payload: AppointmentCreate,
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = appt_service.book(current_user.user_id, payload.doctor_id, payload.appointment_date, payload.reason)
        return create_success_response(asdict(appt), "Appointment booked successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Book appointment error: {e}", exc_info=True)
        raise InternalError("Failed to book appointment")


@router.put("/{appointment_id}")
def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = appt_service.update_status(current_user, appointment_id, payload.status)
        return create_success_response(asdict(appt), "Appointment updated successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Update appointment {appointment_id} error: {e}", exc_info=True)
        raise InternalError("Failed to update appointment")


@router.put("/{appointment_id}/cancel")
def cancel_appointment(
    appointment_id: int,
    payload: Optional[CancelAppointmentRequest] = Body(None),
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        reason = payload.reason if payload else None
        appt = appt_service.cancel(current_user, appointment_id, reason)
        return create_success_response(asdict(appt), "Appointment cancelled successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Cancel appointment {appointment_id} error: {e}", exc_info=True)
        raise InternalError("Failed to cancel appointment")


@router.delete("/{appointment_id}")
def delete_appointment(
    appointment_id: int,
    current_user: IdentityContext = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt_service.delete(current_user, appointment_id)
        return create_success_response(message="Appointment deleted successfully")
    except APIError:
        raise
    except Exception as e:
        logger.error(f"Delete appointment {appointment_id} error: {e}", exc_info=True)
        raise InternalError("Failed to delete appointment")
