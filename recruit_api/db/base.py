from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


def utcnow() -> datetime:
    """Timezone-aware now(), used as the Python-side timestamp default."""
    return datetime.now(timezone.utc)
