from datetime import datetime, date, timedelta
from typing import List, Optional, Dict, Any
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Appointment, Doctor, User
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    DoctorDto,
)
from .....exceptions import SlotAlreadyBookedError, PatientDoubleBookingError


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _enriched(self):
        return (
            select(Appointment, User.name, User.email, Doctor.name, Doctor.specialization)
            .join(User, User.id == Appointment.patient_id, isouter=True)
            .join(Doctor, Doctor.id == Appointment.doctor_id, isouter=True)
        )

    def _appt_to_dto(self, row) -> AppointmentDto:
        a, patient_name, patient_email, doctor_name, doctor_specialization = row
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_datetime=a.appointment_datetime,
            reason=a.reason,
            status=a.status,
            notes=a.notes,
            created_at=a.created_at,
            updated_at=a.updated_at,
            patient_name=patient_name,
            patient_email=patient_email,
            doctor_name=doctor_name,
            doctor_specialization=doctor_specialization,
        )

    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return None
        return DoctorDto(
            id=d.id,
            name=d.name,
            specialization=d.specialization,
            user_id=d.user_id,
            open_hour=d.open_hour,
            close_hour=d.close_hour,
            is_active=bool(d.is_active),
        )

    def doctor_ids_for_user(self, user_id: int) -> List[int]:
        return list(self.session.exec(select(Doctor.id).where(Doctor.user_id == user_id)).all())

    def find_doctor_conflict(self, doctor_id: int, appointment_datetime: datetime) -> bool:
        existing = self.session.exec(
            select(Appointment.id)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_datetime == appointment_datetime)
            .where(Appointment.status != "cancelled")
        ).first()
        return existing is not None

    def find_patient_conflict(self, patient_id: int, appointment_datetime: datetime) -> bool:
        existing = self.session.exec(
            select(Appointment.id)
            .where(Appointment.patient_id == patient_id)
            .where(Appointment.appointment_datetime == appointment_datetime)
            .where(Appointment.status != "cancelled")
        ).first()
        return existing is not None

    def create(self, patient_id: int, doctor_id: int, appointment_datetime: datetime, reason: str) -> AppointmentDto:
        appt = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_datetime=appointment_datetime,
            reason=reason,
            status="scheduled",
        )
        self.session.add(appt)
        try:
            self.session.commit()
        except IntegrityError:
            # Another request took the slot between the availability check and the insert
            self.session.rollback()
            if self.find_doctor_conflict(doctor_id, appointment_datetime):
                raise SlotAlreadyBookedError()
            if self.find_patient_conflict(patient_id, appointment_datetime):
                raise PatientDoubleBookingError()
            raise
        self.session.refresh(appt)
        return self.get_by_id(appt.id)

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        row = self.session.exec(self._enriched().where(Appointment.id == appointment_id)).first()
        return self._appt_to_dto(row) if row else None

    def list(self, patient_id: Optional[int] = None, doctor_ids: Optional[List[int]] = None, status: Optional[str] = None) -> List[AppointmentDto]:
        query = self._enriched()
        if patient_id is not None:
            query = query.where(Appointment.patient_id == patient_id)
        if doctor_ids is not None:
            if not doctor_ids:
                return []
            query = query.where(Appointment.doctor_id.in_(doctor_ids))
        if status:
            query = query.where(Appointment.status == status)
        rows = self.session.exec(query.order_by(Appointment.appointment_datetime.desc())).all()
        return [self._appt_to_dto(r) for r in rows]

    def update_status(self, appointment_id: int, status: str, notes: Optional[str] = None) -> Optional[AppointmentDto]:
        a = self.session.exec(select(Appointment).where(Appointment.id == appointment_id)).first()
        if not a:
            return None
        a.status = status
        if notes:
            a.notes = notes
        a.updated_at = datetime.utcnow()
        self.session.add(a)
        self.session.commit()
        return self.get_by_id(appointment_id)

    def delete(self, appointment_id: int) -> bool:
        a = self.session.exec(select(Appointment).where(Appointment.id == appointment_id)).first()
        if not a:
            return False
        self.session.delete(a)
        self.session.commit()
        return True

    def count_for_doctor(self, doctor_id: int) -> int:
        total = self.session.exec(
            select(func.count()).select_from(Appointment).where(Appointment.doctor_id == doctor_id)
        ).one()
        return int(total)

    def _count_between(self, conditions, start: date, end: date) -> int:
        total = self.session.exec(
            select(func.count())
            .select_from(Appointment)
            .where(*conditions)
            .where(Appointment.appointment_datetime >= datetime.combine(start, datetime.min.time()))
            .where(Appointment.appointment_datetime < datetime.combine(end, datetime.min.time()))
        ).one()
        return int(total)

    def stats(self, doctor_ids: Optional[List[int]], today: date) -> Dict[str, Any]:
        conditions = []
        if doctor_ids is not None:
            conditions.append(Appointment.doctor_id.in_(doctor_ids or [-1]))

        status_rows = self.session.exec(
            select(Appointment.status, func.count())
            .where(*conditions)
            .group_by(Appointment.status)
        ).all()

        week_start = today - timedelta(days=today.weekday())
        month_start = today.replace(day=1)
        next_month = (month_start + timedelta(days=32)).replace(day=1)
        return {
            "statusStats": [{"status": status, "count": int(count)} for status, count in status_rows],
            "today": self._count_between(conditions, today, today + timedelta(days=1)),
            "thisWeek": self._count_between(conditions, week_start, week_start + timedelta(days=7)),
            "thisMonth": self._count_between(conditions, month_start, next_month),
        }
