"""
Small shared helpers: ids, clock, pagination.
"""
import math
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select

from app.config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Naive UTC now; every stored timestamp is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None or dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def clamp_page(page: Optional[int], limit: Optional[int]):
    """Normalize page/limit query values to 1-based page and bounded limit."""
    page = max(int(page or 1), 1)
    limit = int(limit or DEFAULT_PAGE_LIMIT)
    limit = min(max(limit, 1), MAX_PAGE_LIMIT)
    return page, limit


def paginate(db, stmt, page: Optional[int], limit: Optional[int]):
    """
    Run a select with offset/limit and count the full result.

    Args:
        db: SQLAlchemy session
        stmt: select() statement, already filtered and ordered
        page: 1-based page number
        limit: page size

    Returns:
        (items, {"current": page, "pages": n, "total": total})
    """
    page, limit = clamp_page(page, limit)
    total = db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    items = db.scalars(stmt.offset((page - 1) * limit).limit(limit)).unique().all()
    return items, {
        "current": page,
        "pages": math.ceil(total / limit) if total else 0,
        "total": total,
    }
