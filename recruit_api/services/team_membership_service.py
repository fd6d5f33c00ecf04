"""Team membership management (user <-> team links)."""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from recruit_api.core.structured_logging import build_log_context
from recruit_api.db.models import Team, User, UserTeam
from recruit_api.services import user_service
from recruit_api.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def get_membership(db: Session, team_id: UUID, user_id: UUID) -> UserTeam | None:
    """Get the membership row for (user, team), if any."""
    return db.get(UserTeam, (user_id, team_id))


def is_member(db: Session, team_id: UUID, user_id: UUID) -> bool:
    return get_membership(db, team_id, user_id) is not None


def _require_team(db: Session, team_id: UUID) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise NotFoundError(f"Team with ID {team_id} not found")
    return team


def assign_user(
    db: Session,
    team_id: UUID,
    user_id: UUID,
    actor_id: UUID,
) -> UserTeam:
    """
    Add a user to a team.

    Raises:
        NotFoundError: team or user does not exist
        ConflictError: user is already assigned to the team
    """
    _require_team(db, team_id)
    user_service.require_user(db, user_id)

    if is_member(db, team_id, user_id):
        raise ConflictError(f"User {user_id} is already assigned to team {team_id}")

    membership = UserTeam(user_id=user_id, team_id=team_id)
    try:
        with db.begin_nested():
            db.add(membership)
    except IntegrityError:
        # Concurrent assign won the race on the composite key
        raise ConflictError(f"User {user_id} is already assigned to team {team_id}")

    logger.info(
        "User assigned to team",
        extra=build_log_context(user_id=str(actor_id), team_id=str(team_id)),
    )
    return membership


def remove_user(
    db: Session,
    team_id: UUID,
    user_id: UUID,
    actor_id: UUID,
) -> None:
    """
    Remove a user from a team.

    Raises:
        NotFoundError: team or user does not exist, or user is not assigned
    """
    _require_team(db, team_id)
    user_service.require_user(db, user_id)

    membership = get_membership(db, team_id, user_id)
    if not membership:
        raise NotFoundError(f"User {user_id} is not assigned to team {team_id}")

    db.delete(membership)
    db.flush()

    logger.info(
        "User removed from team",
        extra=build_log_context(user_id=str(actor_id), team_id=str(team_id)),
    )


def get_team_members(db: Session, team_id: UUID) -> list[UserTeam]:
    """List a team's membership rows with user details, ordered by user name."""
    _require_team(db, team_id)

    return (
        db.query(UserTeam)
        .join(User, UserTeam.user_id == User.id)
        .options(joinedload(UserTeam.user))
        .filter(UserTeam.team_id == team_id)
        .order_by(User.name.asc())
        .all()
    )
