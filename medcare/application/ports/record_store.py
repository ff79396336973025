from typing import Protocol, Optional, List, Tuple, Dict, Any, Sequence


class RecordStore(Protocol):
    """Generic per-entity store: one table, plain dict records."""

    def get(self, record_id: int) -> Optional[Dict[str, Any]]:
        ...

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
        ...

    def create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update(self, record_id: int, values: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def delete(self, record_id: int) -> bool:
        ...

    def exists(self, field: str, value: Any, exclude_id: Optional[int] = None) -> bool:
        ...

    def distinct_values(self, field: str) -> List[str]:
        ...
