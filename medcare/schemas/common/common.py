# medcare/schemas/common/common.py
from typing import Dict, Any
import math

def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }
