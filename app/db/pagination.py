# File: app/db/pagination.py
import math

from sqlalchemy.orm import Query

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def paginate(q: Query, page: int = 1, limit: int = DEFAULT_LIMIT) -> dict:
    """Run a query one page at a time; page is 1-indexed."""
    total = q.count()
    items = q.offset((page - 1) * limit).limit(limit).all()
    return {
        "data": items,
        "meta": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": math.ceil(total / limit),
        },
    }
