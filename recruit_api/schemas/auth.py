"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency; user_id is the actor
    passed explicitly into every service call.
    """
    user_id: UUID
    email: str
    display_name: str
