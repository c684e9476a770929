from dataclasses import dataclass
from typing import Any

from sqlalchemy import func
from sqlmodel import select

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class PageRequest:
    """0-indexed page window plus the column to order by."""

    page: int = 0
    size: int = 20
    sort_field: str = "created_at"
    sort_direction: str = DESC


def parse_sort(sort: str) -> tuple[str, str]:
    """Split ``"field,dir"``; anything but ``asc`` means descending."""
    parts = sort.split(",", 1)
    field = parts[0].strip()
    direction = ASC if len(parts) == 2 and parts[1].strip().lower() == ASC else DESC
    return field, direction


def paginate(
    *,
    session,
    query,
    page: int = 0,
    size: int = 20,
) -> dict[str, Any]:
    if page < 0:
        page = 0

    if size < 1:
        size = 20

    total = session.exec(
        select(func.count()).select_from(query.order_by(None).subquery())
    ).one()

    results = session.exec(
        query.offset(page * size).limit(size)
    ).all()

    return {
        "total_elements": total,
        "total_pages": (total + size - 1) // size,
        "page": page,
        "size": size,
        "results": results,
    }
