"""SQLAlchemy ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid
from datetime import date, datetime

from sqlalchemy import (
    JSON,
    Date,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from recruit_api.db.base import Base, utcnow

if TYPE_CHECKING:
    from recruit_api.db.models import Team, User


class Client(Base):
    """Hiring client a project is run for."""

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )


class Project(Base):
    """
    A recruitment project (a client's hiring drive).

    A team with projects cannot be deleted.
    """

    __tablename__ = "projects"
    __table_args__ = (Index("idx_projects_team_created", "team_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(30), default="active", nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    team_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    team: Mapped["Team | None"] = relationship(back_populates="projects")
    client: Mapped["Client | None"] = relationship()
    candidate_projects: Mapped[list["CandidateProject"]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )


class Candidate(Base):
    """A job seeker moving through one or more project pipelines."""

    __tablename__ = "candidates"
    __table_args__ = (Index("idx_candidates_team", "team_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    contact: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    current_status: Mapped[str] = mapped_column(String(50), default="new", nullable=False)
    total_experience: Mapped[float | None] = mapped_column(Float, nullable=True)
    skills: Mapped[list] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), default=list, nullable=False
    )
    team_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    recruiter_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    # Relationships
    team: Mapped["Team | None"] = relationship(back_populates="candidates")
    recruiter: Mapped["User | None"] = relationship()
    candidate_projects: Mapped[list["CandidateProject"]] = relationship(
        back_populates="candidate",
        cascade="all, delete-orphan",
    )


class CandidateProject(Base):
    """Candidate nominated to a project, with pipeline status."""

    __tablename__ = "candidate_projects"
    __table_args__ = (
        Index("idx_candidate_projects_project", "project_id", "status"),
        Index("idx_candidate_projects_candidate", "candidate_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("candidates.id", ondelete="CASCADE"), nullable=False
    )
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(50), default="nominated", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utcnow, server_default=func.now(), nullable=False
    )

    # Relationships
    candidate: Mapped["Candidate"] = relationship(back_populates="candidate_projects")
    project: Mapped["Project"] = relationship(back_populates="candidate_projects")
