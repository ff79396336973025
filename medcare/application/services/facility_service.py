from dataclasses import dataclass
from typing import Optional, List, Tuple, Dict, Any, Sequence
import logging

from ..identity import IdentityContext, Role
from ..ports.record_store import RecordStore
from .auth_gate import authorize
from ...exceptions import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class FacilityService:
    """Public directory of one facility kind (pharmacies, labs, clinics); writes are admin only.

    ``soft_delete`` facilities carry an ``is_active`` flag: delete clears it and
    inactive rows disappear from public reads.
    """

    store: RecordStore
    label: str
    search_fields: Sequence[str] = ("name", "address")
    unique_name: bool = True
    soft_delete: bool = False

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label} not found")

    def _check_name(self, name: Optional[str], exclude_id: Optional[int] = None) -> None:
        if self.unique_name and name and self.store.exists("name", name, exclude_id=exclude_id):
            raise ConflictError(f"{self.label} with this name already exists")

    def list_facilities(
        self,
        search: Optional[str],
        page: int,
        limit: int,
        contains: Optional[Dict[str, str]] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        return self.store.list(
            filters={"is_active": True} if self.soft_delete else None,
            contains=contains,
            search=search,
            search_fields=self.search_fields,
            page=page,
            limit=limit,
            order_by="name",
        )

    def get_facility(self, facility_id: int) -> Dict[str, Any]:
        facility = self.store.get(facility_id)
        if not facility or (self.soft_delete and not facility.get("is_active")):
            raise self._not_found()
        return facility

    def create_facility(self, context: IdentityContext, values: Dict[str, Any]) -> Dict[str, Any]:
        authorize(context, (Role.ADMIN,))
        values = {k: v for k, v in values.items() if v is not None}
        self._check_name(values.get("name"))
        facility = self.store.create(values)
        logger.info(f"{self.label} {facility['id']} created by admin {context.user_id}")
        return facility

    def update_facility(self, context: IdentityContext, facility_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        authorize(context, (Role.ADMIN,))
        values = {k: v for k, v in values.items() if v is not None}
        if not values:
            raise ValidationError("No valid fields to update")
        if not self.store.get(facility_id):
            raise self._not_found()
        self._check_name(values.get("name"), exclude_id=facility_id)
        return self.store.update(facility_id, values)

    def delete_facility(self, context: IdentityContext, facility_id: int) -> None:
        authorize(context, (Role.ADMIN,))
        if self.soft_delete:
            self.get_facility(facility_id)
            self.store.update(facility_id, {"is_active": False})
        elif not self.store.delete(facility_id):
            raise self._not_found()
        logger.info(f"{self.label} {facility_id} removed by admin {context.user_id}")
