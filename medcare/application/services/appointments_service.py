from dataclasses import dataclass, field
from typing import Callable, List, Optional, Dict, Any
from datetime import datetime
import logging

from ..identity import IdentityContext, Role
from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from .auth_gate import authorize
from ...exceptions import (
    AlreadyTerminalError,
    AuthorizationError,
    DoctorNotFoundError,
    NotFoundError,
    OutsideWorkingHoursError,
    PastDateRejectedError,
    PatientDoubleBookingError,
    SlotAlreadyBookedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SCHEDULED = "scheduled"
COMPLETED = "completed"
CANCELLED = "cancelled"
VALID_STATUSES = (SCHEDULED, COMPLETED, CANCELLED)
TERMINAL_STATUSES = (COMPLETED, CANCELLED)


def _hour_of(value: str) -> int:
    """Hour component of an ``HH:MM`` working-hour string."""
    return int(value.split(":")[0])


def normalize_slot(value: datetime) -> datetime:
    """Slots are naive local wall-clock times with whole-second precision."""
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.replace(microsecond=0)


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    clock: Callable[[], datetime] = field(default=datetime.now)

    def book(self, patient_id: int, doctor_id: int, appointment_datetime: datetime, reason: str) -> AppointmentDto:
        doctor = self.repo.get_doctor(doctor_id)
        if not doctor or not doctor.is_active:
            raise DoctorNotFoundError()

        slot = normalize_slot(appointment_datetime)
        if slot <= self.clock():
            raise PastDateRejectedError()

        # Working hours apply to the wall clock the caller submitted, whatever its offset
        if not _hour_of(doctor.open_hour) <= appointment_datetime.hour < _hour_of(doctor.close_hour):
            raise OutsideWorkingHoursError()

        if self.repo.find_doctor_conflict(doctor_id, slot):
            raise SlotAlreadyBookedError()

        if self.repo.find_patient_conflict(patient_id, slot):
            raise PatientDoubleBookingError()

        appt = self.repo.create(patient_id, doctor_id, slot, reason)
        logger.info(f"Appointment {appt.id} booked with doctor {doctor_id} for {slot.isoformat()}")
        return appt

    # ------------------------
    # Access rules
    # ------------------------
    def _is_assigned_doctor(self, context: IdentityContext, appt: AppointmentDto) -> bool:
        if context.role != Role.DOCTOR:
            return False
        return appt.doctor_id in self.repo.doctor_ids_for_user(context.user_id)

    def _can_view(self, context: IdentityContext, appt: AppointmentDto) -> bool:
        if context.role == Role.ADMIN or appt.patient_id == context.user_id:
            return True
        return self._is_assigned_doctor(context, appt)

    def _get_or_404(self, appointment_id: int) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt

    # ------------------------
    # Queries
    # ------------------------
    def list_for(self, context: IdentityContext, status: Optional[str] = None) -> List[AppointmentDto]:
        if status is not None and status not in VALID_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {list(VALID_STATUSES)}")
        if context.role == Role.ADMIN:
            return self.repo.list(status=status)
        if context.role == Role.DOCTOR:
            return self.repo.list(doctor_ids=self.repo.doctor_ids_for_user(context.user_id), status=status)
        return self.repo.list(patient_id=context.user_id, status=status)

    def get(self, context: IdentityContext, appointment_id: int) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        if not self._can_view(context, appt):
            raise AuthorizationError()
        return appt

    def stats(self, context: IdentityContext) -> Dict[str, Any]:
        authorize(context, (Role.DOCTOR, Role.ADMIN))
        doctor_ids = None
        if context.role == Role.DOCTOR:
            doctor_ids = self.repo.doctor_ids_for_user(context.user_id)
        return self.repo.stats(doctor_ids, self.clock().date())

    # ------------------------
    # Status machine
    # ------------------------
    def cancel(self, context: IdentityContext, appointment_id: int, reason: Optional[str] = None) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        if appt.status == CANCELLED:
            raise AlreadyTerminalError("Appointment is already cancelled")
        if appt.status == COMPLETED:
            raise AlreadyTerminalError("Cannot cancel completed appointment")
        if not self._can_view(context, appt):
            raise AuthorizationError("Access denied. You can only cancel your own appointments.")
        logger.info(f"Appointment {appointment_id} cancelled by user {context.user_id}")
        return self.repo.update_status(appointment_id, CANCELLED, notes=reason)

    def complete(self, context: IdentityContext, appointment_id: int) -> AppointmentDto:
        appt = self._get_or_404(appointment_id)
        if context.role != Role.ADMIN and not self._is_assigned_doctor(context, appt):
            raise AuthorizationError("Only the assigned doctor or an admin can complete an appointment")
        if appt.status in TERMINAL_STATUSES:
            raise AlreadyTerminalError(f"Appointment is already {appt.status}")
        logger.info(f"Appointment {appointment_id} completed by user {context.user_id}")
        return self.repo.update_status(appointment_id, COMPLETED)

    def update_status(self, context: IdentityContext, appointment_id: int, status: str) -> AppointmentDto:
        if status not in VALID_STATUSES:
            raise ValidationError("Invalid status provided.")
        if status == CANCELLED:
            return self.cancel(context, appointment_id)
        if status == COMPLETED:
            return self.complete(context, appointment_id)

        appt = self._get_or_404(appointment_id)
        if not self._can_view(context, appt):
            raise AuthorizationError()
        if appt.status != SCHEDULED:
            raise AlreadyTerminalError(f"Appointment is already {appt.status}")
        return appt

    def delete(self, context: IdentityContext, appointment_id: int) -> None:
        authorize(context, (Role.ADMIN,))
        if not self.repo.delete(appointment_id):
            raise NotFoundError("Appointment not found")
        logger.info(f"Appointment {appointment_id} deleted by admin {context.user_id}")
