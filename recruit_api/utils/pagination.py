"""Pagination utilities for list endpoints."""

import math
from dataclasses import dataclass

from sqlalchemy.orm import Query as SQLAlchemyQuery


# Pagination limits
DEFAULT_PAGE = 1
DEFAULT_TEAM_LIMIT = 10
DEFAULT_TRANSFER_LIMIT = 20
MAX_PER_PAGE = 100


@dataclass
class PaginationParams:
    """Page-based pagination parameters."""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for total rows, 0 when there are none."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


def paginate_query(
    query: SQLAlchemyQuery, offset: int, limit: int
) -> tuple[list, int]:
    """
    Apply offset/limit to a SQLAlchemy query.

    Returns:
        (items, total_count) where total_count ignores pagination
    """
    total = query.order_by(None).count()
    items = query.offset(offset).limit(limit).all()
    return items, total
