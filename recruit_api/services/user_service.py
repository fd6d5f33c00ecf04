"""User lookups. Users are provisioned elsewhere; this service only reads them."""

from uuid import UUID

from sqlalchemy.orm import Session

from recruit_api.db.models import User
from recruit_api.services.errors import NotFoundError


def get_user(db: Session, user_id: UUID) -> User | None:
    """Get a user by ID."""
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def require_user(db: Session, user_id: UUID) -> User:
    """Get a user by ID or raise NotFoundError."""
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError(f"User with ID {user_id} not found")
    return user


def create_user(
    db: Session,
    name: str,
    email: str,
    phone: str | None = None,
) -> User:
    """Create a user (admin bootstrap only; normal provisioning is external)."""
    user = User(name=name.strip(), email=email.strip().lower(), phone=phone)
    db.add(user)
    db.flush()
    return user
