from dataclasses import dataclass
from typing import Optional, List, Tuple, Dict, Any

from ..identity import IdentityContext, Role
from ..ports.record_store import RecordStore
from .auth_gate import authorize
from ...exceptions import NotFoundError, ValidationError


@dataclass
class HospitalService:
    store: RecordStore
    doctors: Optional[RecordStore] = None

    def list_hospitals(self, city: Optional[str], search: Optional[str], page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        return self.store.list(
            contains={"city": city},
            search=search,
            search_fields=("name", "address", "city"),
            page=page,
            limit=limit,
            order_by="name",
        )

    def get_hospital(self, hospital_id: int) -> Dict[str, Any]:
        hospital = self.store.get(hospital_id)
        if not hospital:
            raise NotFoundError("Hospital not found")
        return hospital

    def list_doctors(self, hospital_id: int, specialization: Optional[str], page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        self.get_hospital(hospital_id)
        return self.doctors.list(
            filters={"hospital_id": hospital_id, "is_active": True},
            contains={"specialization": specialization},
            page=page,
            limit=limit,
            order_by="name",
        )

    def create_hospital(self, context: IdentityContext, values: Dict[str, Any]) -> Dict[str, Any]:
        authorize(context, (Role.ADMIN,))
        return self.store.create({k: v for k, v in values.items() if v is not None})

    def update_hospital(self, context: IdentityContext, hospital_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        authorize(context, (Role.ADMIN,))
        values = {k: v for k, v in values.items() if v is not None}
        if not values:
            raise ValidationError("No valid fields to update")
        hospital = self.store.update(hospital_id, values)
        if not hospital:
            raise NotFoundError("Hospital not found")
        return hospital

    def delete_hospital(self, context: IdentityContext, hospital_id: int) -> None:
        authorize(context, (Role.ADMIN,))
        if not self.store.delete(hospital_id):
            raise NotFoundError("Hospital not found")
