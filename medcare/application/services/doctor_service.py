from dataclasses import dataclass
from typing import Optional, List, Tuple, Dict, Any
import logging

from ..identity import IdentityContext, Role
from ..ports.record_store import RecordStore
from ..ports.appointments_repo import AppointmentsRepository
from .auth_gate import authorize
from ...exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _check_hours(open_hour: str, close_hour: str) -> None:
    if int(open_hour.split(":")[0]) >= int(close_hour.split(":")[0]):
        raise ValidationError("Opening hour must be before closing hour")


@dataclass
class DoctorService:
    store: RecordStore
    appointments: AppointmentsRepository

    def list_doctors(self, specialization: Optional[str], search: Optional[str], page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        return self.store.list(
            contains={"specialization": specialization},
            search=search,
            search_fields=("name", "specialization"),
            page=page,
            limit=limit,
            order_by="name",
        )

    def list_specializations(self) -> List[str]:
        return self.store.distinct_values("specialization")

    def get_doctor(self, doctor_id: int) -> Dict[str, Any]:
        doctor = self.store.get(doctor_id)
        if not doctor:
            raise NotFoundError("Doctor not found")
        doctor["appointments_count"] = self.appointments.count_for_doctor(doctor_id)
        return doctor

    def create_doctor(self, context: IdentityContext, values: Dict[str, Any]) -> Dict[str, Any]:
        authorize(context, (Role.DOCTOR, Role.ADMIN))
        values = {k: v for k, v in values.items() if v is not None}
        if values.get("email") and self.store.exists("email", values["email"]):
            raise ConflictError("Email is already taken by another doctor")
        if context.role == Role.DOCTOR:
            # A doctor can only create their own profile
            values["user_id"] = context.user_id
        _check_hours(values.get("open_hour", "09:00"), values.get("close_hour", "17:00"))
        doctor = self.store.create(values)
        logger.info(f"Doctor {doctor['id']} created by user {context.user_id}")
        return doctor

    def update_doctor(self, context: IdentityContext, doctor_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.store.get(doctor_id)
        if not existing:
            raise NotFoundError("Doctor not found")
        if context.role != Role.ADMIN and not (context.role == Role.DOCTOR and existing.get("user_id") == context.user_id):
            raise AuthorizationError()

        values = {k: v for k, v in values.items() if v is not None}
        if context.role != Role.ADMIN:
            values.pop("user_id", None)
        if not values:
            raise ValidationError("No valid fields to update")
        if values.get("email") and self.store.exists("email", values["email"], exclude_id=doctor_id):
            raise ConflictError("Email is already taken by another doctor")
        _check_hours(values.get("open_hour", existing["open_hour"]), values.get("close_hour", existing["close_hour"]))
        return self.store.update(doctor_id, values)

    def delete_doctor(self, context: IdentityContext, doctor_id: int) -> None:
        authorize(context, (Role.ADMIN,))
        if not self.store.delete(doctor_id):
            raise NotFoundError("Doctor not found")
        logger.info(f"Doctor {doctor_id} deleted by admin {context.user_id}")
