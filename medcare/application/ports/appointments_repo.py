from dataclasses import dataclass
from typing import List, Optional, Dict, Any
from datetime import datetime, date


@dataclass
class DoctorDto:
    id: int
    name: str
    specialization: Optional[str]
    user_id: Optional[int]
    open_hour: str
    close_hour: str
    is_active: bool


@dataclass
class AppointmentDto:
    id: int
    patient_id: int
    doctor_id: int
    appointment_datetime: datetime
    reason: str
    status: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    patient_name: Optional[str] = None
    patient_email: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None


class AppointmentsRepository:
    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        ...

    def doctor_ids_for_user(self, user_id: int) -> List[int]:
        ...

    def find_doctor_conflict(self, doctor_id: int, appointment_datetime: datetime) -> bool:
        ...

    def find_patient_conflict(self, patient_id: int, appointment_datetime: datetime) -> bool:
        ...

    def create(self, patient_id: int, doctor_id: int, appointment_datetime: datetime, reason: str) -> AppointmentDto:
        ...

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def list(self, patient_id: Optional[int] = None, doctor_ids: Optional[List[int]] = None, status: Optional[str] = None) -> List[AppointmentDto]:
        ...

    def update_status(self, appointment_id: int, status: str, notes: Optional[str] = None) -> Optional[AppointmentDto]:
        ...

    def delete(self, appointment_id: int) -> bool:
        ...

    def count_for_doctor(self, doctor_id: int) -> int:
        ...

    def stats(self, doctor_ids: Optional[List[int]], today: date) -> Dict[str, Any]:
        ...
