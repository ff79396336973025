from datetime import datetime
from typing import Optional, List, Tuple, Dict, Any, Sequence, Type
from sqlalchemy import func, or_
from sqlmodel import Session, SQLModel, select

from .....application.ports.record_store import RecordStore


class SqlRecordStore(RecordStore):
    """Single-table store used by the plain directory resources (doctors, hospitals, facilities)."""

    def __init__(self, session: Session, model: Type[SQLModel]):
        self.session = session
        self.model = model

    def _column(self, name: str):
        column = getattr(self.model, name, None)
        if column is None:
            raise ValueError(f"{self.model.__name__} has no column {name!r}")
        return column

    def _get(self, record_id: int):
        return self.session.get(self.model, record_id)

    def get(self, record_id: int) -> Optional[Dict[str, Any]]:
        row = self._get(record_id)
        return row.model_dump() if row else None

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        contains: Optional[Dict[str, str]] = None,
        search: Optional[str] = None,
        search_fields: Sequence[str] = (),
        page: int = 1,
        limit: int = 10,
        order_by: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        conditions = []
        for name, value in (filters or {}).items():
            if value is not None:
                conditions.append(self._column(name) == value)
        for name, value in (contains or {}).items():
            if value:
                conditions.append(self._column(name).ilike(f"%{value}%"))
        if search and search_fields:
            pattern = f"%{search}%"
            conditions.append(or_(*[self._column(f).ilike(pattern) for f in search_fields]))

        query = select(self.model).where(*conditions)
        query = query.order_by(self._column(order_by or "id"))
        rows = self.session.exec(query.offset((page - 1) * limit).limit(limit)).all()
        total = self.session.exec(select(func.count()).select_from(self.model).where(*conditions)).one()
        return [r.model_dump() for r in rows], int(total)

    def create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        row = self.model(**values)
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row.model_dump()

    def update(self, record_id: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = self._get(record_id)
        if not row:
            return None
        for key, value in values.items():
            self._column(key)
            setattr(row, key, value)
        if "updated_at" in self.model.model_fields:
            row.updated_at = datetime.utcnow()
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row.model_dump()

    def delete(self, record_id: int) -> bool:
        row = self._get(record_id)
        if not row:
            return False
        self.session.delete(row)
        self.session.commit()
        return True

    def exists(self, field: str, value: Any, exclude_id: Optional[int] = None) -> bool:
        query = select(self.model.id).where(self._column(field) == value)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        return self.session.exec(query).first() is not None

    def distinct_values(self, field: str) -> List[str]:
        column = self._column(field)
        rows = self.session.exec(
            select(column).where(column.is_not(None)).where(column != "").distinct().order_by(column)
        ).all()
        return list(rows)
