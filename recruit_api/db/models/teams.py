"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import datetime

from sqlalchemy import (
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recruit_api.db.base import Base, utcnow
from recruit_api.db.enums import DEFAULT_TRANSFER_STATUS

if TYPE_CHECKING:
    from recruit_api.db.models import Candidate, Project, User


class Team(Base):
    """
    A recruitment team.

    Team names are globally unique. Lead, head and manager are optional
    references to users. A team owns its membership rows.
    """

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    lead_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    head_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    manager_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    # Relationships
    lead: Mapped["User | None"] = relationship(foreign_keys=[lead_id])
    head: Mapped["User | None"] = relationship(foreign_keys=[head_id])
    manager: Mapped["User | None"] = relationship(foreign_keys=[manager_id])
    members: Mapped[list["UserTeam"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
    )
    projects: Mapped[list["Project"]] = relationship(back_populates="team")
    candidates: Mapped[list["Candidate"]] = relationship(back_populates="team")


class UserTeam(Base):
    """
    Team membership: the user currently belongs to the team.

    The composite primary key allows at most one row per (user, team).
    """

    __tablename__ = "user_teams"
    __table_args__ = (Index("idx_user_teams_team", "team_id"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    team: Mapped["Team"] = relationship(back_populates="members")
    user: Mapped["User"] = relationship()


class TeamTransferRequest(Base):
    """
    Request to move a user's membership from one team to another.

    Created pending, then approved or rejected exactly once, and kept as
    history. References to teams and users never cascade. The partial
    unique index keeps at most one pending request per user.
    """

    __tablename__ = "team_transfer_requests"
    __table_args__ = (
        Index("idx_transfer_requests_from_team", "from_team_id", "status"),
        Index("idx_transfer_requests_to_team", "to_team_id", "status"),
        Index(
            "uq_transfer_requests_pending_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    from_team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False
    )
    to_team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False
    )
    requested_by: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_TRANSFER_STATUS.value,
        server_default=text(f"'{DEFAULT_TRANSFER_STATUS.value}'"),
        nullable=False,
    )

    # Decision tracking (set for both approvals and rejections)
    approved_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    decision_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship(foreign_keys=[user_id])
    from_team: Mapped["Team"] = relationship(foreign_keys=[from_team_id])
    to_team: Mapped["Team"] = relationship(foreign_keys=[to_team_id])
    requester: Mapped["User"] = relationship(foreign_keys=[requested_by])
    approver: Mapped["User | None"] = relationship(foreign_keys=[approved_by])
